# src/dcreport/parser/case_parser.py
from __future__ import annotations

import logging
import re
from typing import Iterator, List, Optional

from dcreport.config import AppConfig
from dcreport.logic.derivation import DEFAULT_DC_RATE, compute_derived
from dcreport.models.case_record import CaseDate, CaseRecord

log = logging.getLogger(__name__)

UNKNOWN_REFERRER = "Unknown"

_AMOUNT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# Minimum number of columns for a row to be kept
MIN_COLUMNS = 5

# Column positions of the case export (20 columns, header on the first line)
COL_ID = 0
COL_REG_NO = 1
COL_UHID = 2
COL_DAILY_CASE_NO = 3
COL_CASE_TYPE = 4
COL_DATE = 5
COL_PATIENT = 6
COL_AGE = 7
COL_MOBILE = 8
COL_ADDRESS = 9
COL_REFERRER = 10
COL_INVESTIGATIONS = 11
COL_CENTER = 12
COL_TOTAL = 13
COL_PAID = 14
COL_DUE = 15
COL_DISCOUNT = 16
COL_DISC_TYPE = 17
COL_AGENT = 18
COL_CANCELED = 19


def parse_source_date(raw: str) -> CaseDate:
    """
    Split a source date written as M/D/YYYY.

    e.g. "10/1/2025" -> CaseDate(day="01", month="10", year="2025")

    Anything that does not split into exactly three parts is kept as-is.
    """
    parts = raw.split("/")
    if len(parts) != 3:
        return CaseDate.unparsed(raw)
    month, day, year = parts
    return CaseDate(day=day.zfill(2), month=month.zfill(2), year=year, raw=raw)


def to_amount(raw: str) -> float:
    """
    Tolerant number parse: the leading numeric part of the cell is read
    ("500/-" -> 500, "1200 Rs" -> 1200); no leading number gives 0.
    """
    m = _AMOUNT_PREFIX.match(raw or "")
    if m is None:
        return 0.0
    value = float(m.group(1))
    # nan / inf would poison every total downstream
    if value != value or value in (float("inf"), float("-inf")):
        return 0.0
    return value


def parse_canceled(raw: str) -> bool:
    return (raw or "").strip().upper() == "TRUE"


def parse_case_row(columns: List[str], config: Optional[AppConfig] = None) -> Optional[CaseRecord]:
    """
    Convert one split row into a CaseRecord.

    Returns None for rows with fewer than MIN_COLUMNS columns.
    """
    if len(columns) < MIN_COLUMNS:
        return None

    def get(i: int) -> str:
        return columns[i] if len(columns) > i and columns[i] is not None else ""

    case_id = get(COL_ID)
    raw_date = get(COL_DATE)
    case_date = parse_source_date(raw_date)
    if not case_date.is_parsed:
        log.warning("Case %s: date %r is not M/D/YYYY, keeping it unparsed", case_id, raw_date)

    name = get(COL_PATIENT).strip()
    age = get(COL_AGE).strip()
    referrer = get(COL_REFERRER).strip() or UNKNOWN_REFERRER

    total_fee = to_amount(get(COL_TOTAL))
    discount = to_amount(get(COL_DISCOUNT))

    dc_rate = config.rate_for(referrer) if config is not None else DEFAULT_DC_RATE
    dc_amount, remark = compute_derived(total_fee, discount, dc_rate)

    return CaseRecord(
        id=case_id,
        reg_no=get(COL_REG_NO),
        case_type=get(COL_CASE_TYPE),
        case_date=case_date,
        patient_name=f"{name} {age}",
        patient_age=age,
        referrer=referrer,
        investigations=get(COL_INVESTIGATIONS).strip(),
        total_fee=total_fee,
        fee_paid=to_amount(get(COL_PAID)),
        fee_due=to_amount(get(COL_DUE)),
        discount=discount,
        discount_type=get(COL_DISC_TYPE).strip(),
        canceled=parse_canceled(get(COL_CANCELED)),
        dc_amount=dc_amount,
        remark=remark,
    )


def iter_case_rows(text: str, config: Optional[AppConfig] = None) -> Iterator[CaseRecord]:
    """
    Yield a CaseRecord for every usable data row of a tab-separated export.

    - the first line is the header and is always skipped
    - blank lines are ignored
    - rows with too few columns are dropped
    """
    # only "\n" ends a row; form feeds and the like may sit inside cells
    lines = text.strip().split("\n")
    for line_no, line in enumerate(lines[1:], start=2):
        raw = line.rstrip("\r\n")
        if not raw.strip():
            continue

        case = parse_case_row(raw.split("\t"), config)
        if case is None:
            log.debug("Line %d: fewer than %d columns, skipped", line_no, MIN_COLUMNS)
            continue
        yield case


def parse_case_text(text: str, config: Optional[AppConfig] = None) -> List[CaseRecord]:
    """Parse a whole tab-separated export into a list of CaseRecords."""
    return list(iter_case_rows(text, config))

# src/dcreport/logic/entry_factory.py

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from dcreport.config import AppConfig
from dcreport.logic.derivation import DEFAULT_DC_RATE, compute_derived
from dcreport.models.case_record import CaseDate, CaseRecord

NEW_REG_NO = "NEW"
DEFAULT_CASE_TYPE = "USG"

ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


class InvalidEntryError(ValueError):
    """Raised when a manual entry cannot be turned into a case."""


@dataclass
class NewEntry:
    """
    Values typed into the add-entry form, as strings.

    All fields are required except discount.
    """
    date: str                    # YYYY-MM-DD
    referrer: str
    patient_name: str
    age: str
    investigations: List[str] = field(default_factory=list)
    total_fee: str = ""
    fee_paid: str = ""
    discount: str = ""


def unique_in_order(items: Iterable[str]) -> List[str]:
    """Trimmed, non-empty items with duplicates removed, first one wins."""
    seen = set()
    result: List[str] = []
    for item in items:
        s = (item or "").strip()
        if not s or s in seen:
            continue
        seen.add(s)
        result.append(s)
    return result


def _parse_fee(raw: str) -> Optional[float]:
    try:
        value = float((raw or "").strip())
    except ValueError:
        return None
    if value != value or value < 0 or value == float("inf"):
        return None
    return value


def validate_entry(entry: NewEntry) -> Optional[str]:
    """Return the first problem with entry, or None if it can be saved."""
    if not ISO_DATE_PATTERN.match((entry.date or "").strip()):
        return "Date must be given as YYYY-MM-DD."
    if not (entry.referrer or "").strip():
        return "Referrer is required."
    if not (entry.patient_name or "").strip():
        return "Patient name is required."
    if not (entry.age or "").strip():
        return "Age is required."
    if not unique_in_order(entry.investigations):
        return "At least one investigation is required."

    if not (entry.total_fee or "").strip():
        return "Total fee is required."
    if _parse_fee(entry.total_fee) is None:
        return "Total fee must be a non-negative number."
    if not (entry.fee_paid or "").strip():
        return "Amount paid is required."
    if _parse_fee(entry.fee_paid) is None:
        return "Amount paid must be a non-negative number."
    if (entry.discount or "").strip() and _parse_fee(entry.discount) is None:
        return "Discount must be a non-negative number."
    return None


def new_case_id() -> str:
    """Millisecond timestamp, the id scheme used for manually added cases."""
    return str(int(time.time() * 1000))


def build_case_from_entry(
    entry: NewEntry,
    config: Optional[AppConfig] = None,
    case_id: Optional[str] = None,
) -> CaseRecord:
    """
    Turn a validated form entry into a CaseRecord.

    Raises InvalidEntryError when validate_entry() reports a problem.
    """
    error = validate_entry(entry)
    if error is not None:
        raise InvalidEntryError(error)

    m = ISO_DATE_PATTERN.match(entry.date.strip())
    year, month, day = m.group(1), m.group(2), m.group(3)

    total = _parse_fee(entry.total_fee) or 0.0
    paid = _parse_fee(entry.fee_paid) or 0.0
    discount = _parse_fee(entry.discount) or 0.0

    name = entry.patient_name.strip()
    age = entry.age.strip()
    referrer = entry.referrer.strip()

    dc_rate = config.rate_for(referrer) if config is not None else DEFAULT_DC_RATE
    dc_amount, remark = compute_derived(total, discount, dc_rate)

    return CaseRecord(
        id=case_id or new_case_id(),
        reg_no=NEW_REG_NO,
        case_type=DEFAULT_CASE_TYPE,
        case_date=CaseDate(day=day, month=month, year=year, raw=entry.date.strip()),
        patient_name=f"{name} {age}",
        patient_age=age,
        referrer=referrer,
        investigations=", ".join(unique_in_order(entry.investigations)),
        total_fee=total,
        fee_paid=paid,
        fee_due=total - paid - discount,
        discount=discount,
        discount_type="",
        canceled=False,
        dc_amount=dc_amount,
        remark=remark,
    )

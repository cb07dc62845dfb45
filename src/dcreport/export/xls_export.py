# src/dcreport/export/xls_export.py
from __future__ import annotations

import html
import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from dcreport.logic.derivation import round_half_up
from dcreport.logic.report import group_by_referrer
from dcreport.models.case_record import CaseRecord

log = logging.getLogger(__name__)

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

FILE_PREFIX = "DC_Records"
UNKNOWN_DATE_STEM = f"{FILE_PREFIX}_Unknown_Date"
FILE_EXTENSION = ".xls"
MIME_TYPE = "application/vnd.ms-excel"

NO_DATA_NOTICE = "No data to export."

COLUMNS = [
    "Date",
    "Patient Name",
    "Test Name",
    "Remark",
    "Gross Amount",
    "Discount",
    "Payment Received",
    "Balance",
    "DC",
]

_DOCUMENT_HEAD = """<html xmlns:o="urn:schemas-microsoft-com:office:office" xmlns:x="urn:schemas-microsoft-com:office:excel" xmlns="http://www.w3.org/TR/REC-html40">
<head>
<meta http-equiv="Content-Type" content="text/html; charset=utf-8">
<!--[if gte mso 9]>
<xml>
  <x:ExcelWorkbook>
    <x:ExcelWorksheets>
      <x:ExcelWorksheet>
        <x:Name>{sheet}</x:Name>
        <x:WorksheetOptions>
          <x:DisplayGridlines/>
        </x:WorksheetOptions>
      </x:ExcelWorksheet>
    </x:ExcelWorksheets>
  </x:ExcelWorkbook>
</xml>
<![endif]-->
<style>
  body {{ font-family: Arial, sans-serif; }}
  table {{ border-collapse: collapse; width: 100%; }}
  th, td {{ border: 1px solid #000000; padding: 5px; }}
  .header {{ font-weight: bold; background-color: #dff0d8; text-align: center; }}
  .group-header {{ font-weight: bold; background-color: #fffcf0; text-align: left; }}
  .dc-cell {{ background-color: #fff2cc; font-weight: bold; text-align: right; }}
  .text-right {{ text-align: right; }}
  .text-center {{ text-align: center; }}
</style>
</head>
<body>
<table>
"""

_DOCUMENT_TAIL = """</tbody>
</table>
</body>
</html>
"""


@dataclass(frozen=True)
class ExportDocument:
    filename: str       # e.g. DC_Records_October_2025.xls
    content: str
    mime_type: str = MIME_TYPE


@dataclass
class ExportReport:
    """
    Result of an export run.

    files is empty and notice is set when there was nothing to export.
    """
    files: List[Path] = field(default_factory=list)
    notice: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.files


def month_stem(case: CaseRecord) -> str:
    """
    File stem of the monthly report a case belongs to.

    e.g. month "10", year "2025" -> "DC_Records_October_2025"
    Unparsed dates and months outside 1-12 go to "DC_Records_Unknown_Date".
    """
    month = case.case_date.month_number
    if month is None:
        return UNKNOWN_DATE_STEM
    return f"{FILE_PREFIX}_{MONTH_NAMES[month - 1]}_{case.case_date.year}"


def bucket_by_month(cases: Iterable[CaseRecord]) -> Dict[str, List[CaseRecord]]:
    """Cases per monthly file stem, stems in first-encounter order."""
    buckets: Dict[str, List[CaseRecord]] = {}
    for case in cases:
        buckets.setdefault(month_stem(case), []).append(case)
    return buckets


def _amount_cell(value: float) -> str:
    """Plain rounded integer so spreadsheets read the cell as a number."""
    try:
        return str(round_half_up(float(value)))
    except (TypeError, ValueError, OverflowError):
        return "0"


def _text_cell(value: object) -> str:
    return html.escape("" if value is None else str(value))


def _render_case_row(case: CaseRecord) -> str:
    cells = [
        f'<td class="text-center" style="white-space: nowrap;">{_text_cell(case.date)}</td>',
        f"<td>{_text_cell(case.patient_name)}</td>",
        f"<td>{_text_cell(case.investigations)}</td>",
        f"<td>{_text_cell(case.remark)}</td>",
        f'<td class="text-right">{_amount_cell(case.total_fee)}</td>',
        f'<td class="text-right">{_amount_cell(case.discount)}</td>',
        f'<td class="text-right">{_amount_cell(case.fee_paid)}</td>',
        f'<td class="text-right">{_amount_cell(case.fee_due)}</td>',
        f'<td class="text-right">{_amount_cell(case.dc_amount)}</td>',
    ]
    return "<tr>" + "".join(cells) + "</tr>\n"


def render_month_document(stem: str, cases: Iterable[CaseRecord]) -> str:
    """
    HTML table readable by Excel, one worksheet named after the stem.

    Layout:
      - header row with COLUMNS
      - per referrer (sorted): bold group row spanning all columns but the
        last, which holds the referrer's DC subtotal
      - then one row per case in collection order
    """
    parts: List[str] = [_DOCUMENT_HEAD.format(sheet=_text_cell(stem))]

    parts.append("<thead>\n<tr>")
    parts.extend(f'<th class="header">{label}</th>' for label in COLUMNS)
    parts.append("</tr>\n</thead>\n<tbody>\n")

    for group in group_by_referrer(cases):
        parts.append(
            f'<tr><td colspan="{len(COLUMNS) - 1}" class="group-header">'
            f"<b>{_text_cell(group.referrer)}</b></td>"
            f'<td class="dc-cell">{group.dc_total}</td></tr>\n'
        )
        for case in group.cases:
            parts.append(_render_case_row(case))

    parts.append(_DOCUMENT_TAIL)
    return "".join(parts)


def build_export_documents(cases: Iterable[CaseRecord]) -> List[ExportDocument]:
    """One document per month present in cases (none for empty input)."""
    return [
        ExportDocument(
            filename=f"{stem}{FILE_EXTENSION}",
            content=render_month_document(stem, month_cases),
        )
        for stem, month_cases in bucket_by_month(cases).items()
    ]


def export_cases(cases: Iterable[CaseRecord], out_dir: Path) -> ExportReport:
    """
    Write every monthly document into out_dir.

    Existing files with the same name are overwritten. OSError propagates.
    """
    documents = build_export_documents(cases)
    if not documents:
        log.info(NO_DATA_NOTICE)
        return ExportReport(notice=NO_DATA_NOTICE)

    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    report = ExportReport()
    for doc in documents:
        path = out_dir / doc.filename
        path.write_text(doc.content, encoding="utf-8")
        report.files.append(path)
        log.info("Wrote %s", path)
    return report


def export_cases_archive(cases: Iterable[CaseRecord], archive_path: Path) -> ExportReport:
    """Bundle every monthly document into a single zip file."""
    documents = build_export_documents(cases)
    if not documents:
        log.info(NO_DATA_NOTICE)
        return ExportReport(notice=NO_DATA_NOTICE)

    archive_path = Path(archive_path)
    archive_path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for doc in documents:
            zf.writestr(doc.filename, doc.content.encode("utf-8"))

    log.info("Wrote %d report(s) into %s", len(documents), archive_path)
    return ExportReport(files=[archive_path])

# src/dcreport/models/case_record.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CaseDate:
    """
    Visit date of a case, split once when the record is created.

    - day / month / year: zero-padded tokens ("01", "10", "2025")
    - raw: the text the date was read from

    When the source could not be split the three tokens are None and
    display falls back to raw. Tokens are not checked against the calendar.
    """
    day: Optional[str]
    month: Optional[str]
    year: Optional[str]
    raw: str = ""

    @classmethod
    def unparsed(cls, raw: str) -> "CaseDate":
        return cls(day=None, month=None, year=None, raw=raw)

    @property
    def is_parsed(self) -> bool:
        return self.day is not None and self.month is not None and self.year is not None

    @property
    def display(self) -> str:
        """DD MM YYYY, e.g. "01 10 2025"."""
        if not self.is_parsed:
            return self.raw
        return f"{self.day} {self.month} {self.year}"

    @property
    def iso(self) -> Optional[str]:
        """YYYY-MM-DD, or None for an unparsed date."""
        if not self.is_parsed:
            return None
        return f"{self.year}-{self.month}-{self.day}"

    @property
    def month_number(self) -> Optional[int]:
        """Month as 1-12, None when missing, non-numeric or out of range."""
        if not self.is_parsed:
            return None
        try:
            value = int(self.month)
        except (TypeError, ValueError):
            return None
        if 1 <= value <= 12:
            return value
        return None


@dataclass(frozen=True)
class CaseRecord:
    """
    One diagnostic-center billing entry.

    dc_amount and remark are computed when the record is created and are
    not updated afterwards.
    """
    id: str
    reg_no: str
    case_type: str
    case_date: CaseDate
    patient_name: str       # "<name> <age>", e.g. "RAJESH KUMAR 45 YRS"
    patient_age: str
    referrer: str           # "Unknown" when the source was blank
    investigations: str     # comma-joined test names
    total_fee: float
    fee_paid: float
    fee_due: float
    discount: float
    discount_type: str
    canceled: bool
    dc_amount: int
    remark: str

    @property
    def date(self) -> str:
        return self.case_date.display

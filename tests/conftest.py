from __future__ import annotations

from typing import Callable

import pytest

from dcreport.logic.derivation import compute_derived
from dcreport.models.case_record import CaseDate, CaseRecord


def _date_from_display(text: str) -> CaseDate:
    parts = text.split(" ")
    if len(parts) != 3:
        return CaseDate.unparsed(text)
    day, month, year = parts
    return CaseDate(day=day, month=month, year=year, raw=text)


@pytest.fixture
def make_case() -> Callable[..., CaseRecord]:
    """Factory for CaseRecords with sensible defaults."""
    counter = {"n": 0}

    def _make(
        *,
        id: str = "",
        date: str = "01 10 2025",
        name: str = "Ann 30 YRS",
        referrer: str = "Dr. X",
        investigations: str = "USG KUB",
        case_type: str = "USG",
        total_fee: float = 1000,
        fee_paid: float = 1000,
        fee_due: float = 0,
        discount: float = 0,
        canceled: bool = False,
        dc_amount: int | None = None,
    ) -> CaseRecord:
        counter["n"] += 1
        dc, remark = compute_derived(total_fee, discount)
        return CaseRecord(
            id=id or str(counter["n"]),
            reg_no="R",
            case_type=case_type,
            case_date=_date_from_display(date),
            patient_name=name,
            patient_age=name.split(" ", 1)[-1],
            referrer=referrer,
            investigations=investigations,
            total_fee=total_fee,
            fee_paid=fee_paid,
            fee_due=fee_due,
            discount=discount,
            discount_type="",
            canceled=canceled,
            dc_amount=dc if dc_amount is None else dc_amount,
            remark=remark,
        )

    return _make

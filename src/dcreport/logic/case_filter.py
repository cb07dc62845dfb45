# src/dcreport/logic/case_filter.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from dcreport.models.case_record import CaseRecord


@dataclass(frozen=True)
class FilterCondition:
    """
    Filter for the case list.

    Every field is optional; an empty string disables that filter.
    """
    search: str = ""      # free text, matched against name / referrer / tests
    date: str = ""        # YYYY-MM-DD, exact day
    referrer: str = ""    # exact referrer name

    def is_empty(self) -> bool:
        # search is matched verbatim, so only "" switches it off
        return not (self.search or self.date.strip() or self.referrer.strip())


def match_case(case: CaseRecord, cond: FilterCondition) -> bool:
    """
    Whether one case satisfies every active filter of cond.

    - search: case-insensitive substring of patient_name, referrer or
      investigations (any one is enough)
    - date: the case date must be parsed and equal cond.date
    - referrer: exact match
    """
    search = cond.search.lower()
    if search:
        haystacks = (case.patient_name, case.referrer, case.investigations)
        if not any(search in (h or "").lower() for h in haystacks):
            return False

    date = cond.date.strip()
    if date:
        iso = case.case_date.iso
        # unparsed dates never match a date filter
        if iso is None or iso != date:
            return False

    referrer = cond.referrer.strip()
    if referrer and case.referrer != referrer:
        return False

    return True


def filter_cases(cases: Iterable[CaseRecord], cond: FilterCondition) -> List[CaseRecord]:
    """Cases matching cond, in their original order."""
    if cond.is_empty():
        return list(cases)
    return [case for case in cases if match_case(case, cond)]

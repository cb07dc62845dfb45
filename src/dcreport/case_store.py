# src/dcreport/case_store.py
from __future__ import annotations

import logging
from collections import Counter
from typing import Callable, Iterable, Tuple

from dcreport.models.case_record import CaseRecord

log = logging.getLogger(__name__)


class DuplicateCaseError(ValueError):
    """Raised when a case id is already present in the store."""


class CaseStore:
    """
    In-memory owner of the case collection.

    Every change swaps in a new tuple, so a snapshot taken from `cases`
    is never modified afterwards. Nothing is written to disk.
    """

    def __init__(self, cases: Iterable[CaseRecord] = ()) -> None:
        self._cases: Tuple[CaseRecord, ...] = ()
        self.replace_all(cases)

    @property
    def cases(self) -> Tuple[CaseRecord, ...]:
        return self._cases

    def __len__(self) -> int:
        return len(self._cases)

    def replace_all(self, cases: Iterable[CaseRecord]) -> None:
        """Swap the whole collection, e.g. after opening another file."""
        new_cases = tuple(cases)
        counts = Counter(c.id for c in new_cases)
        dupes = sorted(case_id for case_id, n in counts.items() if n > 1)
        if dupes:
            raise DuplicateCaseError(f"duplicate case ids: {', '.join(dupes)}")
        self._cases = new_cases

    def add(self, case: CaseRecord) -> None:
        """Put a new case at the top of the list."""
        if any(c.id == case.id for c in self._cases):
            raise DuplicateCaseError(f"case id {case.id} already exists")
        self._cases = (case,) + self._cases
        log.info("Added case %s (%s)", case.id, case.patient_name)

    def remove(self, ids: Iterable[str]) -> None:
        """Drop every case whose id is in ids. Unknown ids are ignored."""
        targets = set(ids)
        if not targets:
            return
        before = len(self._cases)
        self._cases = tuple(c for c in self._cases if c.id not in targets)
        log.info("Deleted %d case(s)", before - len(self._cases))

    def delete_with_confirmation(
        self,
        ids: Iterable[str],
        confirm: Callable[[int], bool],
    ) -> bool:
        """
        Ask confirm(count) first and delete only if it answers True.

        Returns whether anything was deleted. An empty selection never asks.
        """
        targets = set(ids)
        if not targets:
            return False
        if not confirm(len(targets)):
            return False
        self.remove(targets)
        return True

from __future__ import annotations

from typing import List

import pytest

from dcreport.case_store import CaseStore, DuplicateCaseError


def test_add_prepends(make_case) -> None:
    store = CaseStore([make_case(id="1"), make_case(id="2")])
    store.add(make_case(id="3"))
    assert [c.id for c in store.cases] == ["3", "1", "2"]


def test_add_rejects_duplicate_id(make_case) -> None:
    store = CaseStore([make_case(id="1")])
    with pytest.raises(DuplicateCaseError):
        store.add(make_case(id="1"))


def test_initial_duplicates_are_rejected(make_case) -> None:
    with pytest.raises(DuplicateCaseError, match="7"):
        CaseStore([make_case(id="7"), make_case(id="7")])


def test_remove_by_id_set(make_case) -> None:
    store = CaseStore([make_case(id=str(i)) for i in range(5)])
    before = store.cases
    assert store.remove({"1", "3", "missing"}) is None
    assert [c.id for c in store.cases] == ["0", "2", "4"]
    # earlier snapshots are untouched
    assert len(before) == 5


def test_delete_requires_confirmation(make_case) -> None:
    store = CaseStore([make_case(id="1"), make_case(id="2")])
    asked: List[int] = []

    def decline(count: int) -> bool:
        asked.append(count)
        return False

    assert store.delete_with_confirmation(["1", "2"], decline) is False
    assert asked == [2]
    assert len(store) == 2

    assert store.delete_with_confirmation(["1"], lambda count: True) is True
    assert [c.id for c in store.cases] == ["2"]


def test_empty_selection_never_prompts(make_case) -> None:
    store = CaseStore([make_case(id="1")])

    def fail(count: int) -> bool:
        raise AssertionError("should not ask")

    assert store.delete_with_confirmation([], fail) is False
    assert len(store) == 1

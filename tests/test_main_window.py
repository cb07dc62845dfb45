from __future__ import annotations

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import Qt  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

from dcreport.config import default_config  # noqa: E402
from dcreport.gui.main_window import MainWindow  # noqa: E402


@pytest.fixture(scope="module")
def qapp() -> QApplication:
    return QApplication.instance() or QApplication([])


@pytest.fixture
def window(qapp: QApplication):
    win = MainWindow(config=default_config())
    yield win
    win.close()


def test_select_all_toggles_every_case(window: MainWindow) -> None:
    window.select_all_action.trigger()
    assert len(window._checked_case_ids()) == 24

    window.select_all_action.trigger()
    assert window._checked_case_ids() == []


def test_select_all_only_ticks_shown_cases(window: MainWindow) -> None:
    window.search_edit.setText("sinha")
    window.select_all_action.trigger()

    checked = window._checked_case_ids()
    assert checked
    assert sorted(checked) == sorted(c.id for c in window._visible)
    assert len(checked) < 24


def test_group_row_ticks_its_cases(window: MainWindow) -> None:
    group_item = window.report_tree.topLevelItem(0)
    group_item.setCheckState(0, Qt.Checked)

    expected = [
        str(group_item.child(j).data(0, Qt.UserRole))
        for j in range(group_item.childCount())
    ]
    assert window._checked_case_ids() == expected


def test_group_row_shows_partial_selection(window: MainWindow) -> None:
    group_item = next(
        window.report_tree.topLevelItem(i)
        for i in range(window.report_tree.topLevelItemCount())
        if window.report_tree.topLevelItem(i).childCount() > 1
    )
    group_item.child(0).setCheckState(0, Qt.Checked)
    assert group_item.checkState(0) == Qt.PartiallyChecked


def test_select_all_then_delete_empties_the_report(window: MainWindow) -> None:
    asked = []
    window._confirm_delete = lambda count: asked.append(count) or True

    window.select_all_action.trigger()
    window.delete_action.trigger()

    assert asked == [24]
    assert len(window._store) == 0
    assert window.report_tree.topLevelItemCount() == 0

# src/dcreport/gui/main_window.py

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional

from PySide6.QtCore import QDate, Qt
from PySide6.QtGui import QAction, QBrush, QColor, QFont, QKeySequence
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDateEdit,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStatusBar,
    QTabWidget,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from dcreport.case_store import CaseStore, DuplicateCaseError
from dcreport.config import AppConfig, load_config
from dcreport.dataset_loader import load_case_file, load_embedded_dataset
from dcreport.export.xls_export import COLUMNS, NO_DATA_NOTICE, export_cases
from dcreport.gui.add_entry_dialog import AddEntryDialog
from dcreport.gui.dashboard_widget import DashboardWidget
from dcreport.logic.case_filter import FilterCondition, filter_cases
from dcreport.logic.entry_factory import InvalidEntryError, build_case_from_entry
from dcreport.logic.report import format_currency, group_by_referrer
from dcreport.models.case_record import CaseRecord

ALL_REFERRERS = "All referrers"

GROUP_BACKGROUND = QColor("#fffcf0")
DC_BACKGROUND = QColor("#fff2cc")
CANCELED_FOREGROUND = QColor("#dc2626")


class MainWindow(QMainWindow):
    """
    DC Report Manager main window.

    The case collection lives in a CaseStore owned by this window; the
    tabs only ever see the filtered list.
    """

    TAB_DASHBOARD = 0
    TAB_REPORT = 1

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("DC Manager - Diagnostic Center Report")
        self.resize(1200, 720)

        self._config = config or load_config()
        self._store = CaseStore(load_embedded_dataset(self._config))
        self._current_file: Optional[Path] = None
        # cases currently shown (after filtering)
        self._visible: List[CaseRecord] = []

        # UI
        self._create_central_widgets()
        self._create_actions()
        self._create_menus()
        self._create_status_bar()

        self._refresh_referrer_combo()
        self._apply_filter()
        self.tabs.setCurrentIndex(self.TAB_REPORT)

    # ─────────────────────────────
    # UI construction
    # ─────────────────────────────
    def _create_central_widgets(self) -> None:
        """
        Top: filter bar (search / date / referrer / clear / count)
        Below: tabs
          - 0: dashboard
          - 1: DC report grouped by referrer
        """
        root = QWidget(self)
        layout = QVBoxLayout(root)

        bar = QHBoxLayout()

        self.search_edit = QLineEdit(root)
        self.search_edit.setPlaceholderText("Search patient, referrer or test...")
        self.search_edit.setClearButtonEnabled(True)
        self.search_edit.textChanged.connect(self._apply_filter)

        self.date_check = QCheckBox("Date:", root)
        self.date_check.toggled.connect(self._on_date_toggled)
        self.date_edit = QDateEdit(QDate.currentDate(), root)
        self.date_edit.setCalendarPopup(True)
        self.date_edit.setDisplayFormat("yyyy-MM-dd")
        self.date_edit.setEnabled(False)
        self.date_edit.dateChanged.connect(self._apply_filter)

        self.referrer_combo = QComboBox(root)
        self.referrer_combo.setMinimumContentsLength(20)
        self.referrer_combo.currentIndexChanged.connect(self._apply_filter)

        self.btn_clear = QPushButton("Clear", root)
        self.btn_clear.clicked.connect(self._on_clear_filters)

        self.count_label = QLabel("", root)

        bar.addWidget(self.search_edit, 2)
        bar.addWidget(self.date_check)
        bar.addWidget(self.date_edit)
        bar.addWidget(self.referrer_combo, 1)
        bar.addWidget(self.btn_clear)
        bar.addStretch(1)
        bar.addWidget(self.count_label)
        layout.addLayout(bar)

        self.tabs = QTabWidget(root)

        # ── tab 0: dashboard ─────────────────────
        self.dashboard = DashboardWidget(self.tabs)
        self.tabs.addTab(self.dashboard, "Dashboard")

        # ── tab 1: DC report ─────────────────────
        self.report_tree = QTreeWidget(self.tabs)
        self.report_tree.setColumnCount(len(COLUMNS))
        self.report_tree.setHeaderLabels(COLUMNS)
        self.report_tree.setAlternatingRowColors(False)
        self.report_tree.setRootIsDecorated(True)
        self.report_tree.setUniformRowHeights(True)
        self.tabs.addTab(self.report_tree, "DC Report")

        layout.addWidget(self.tabs, 1)
        self.setCentralWidget(root)

    def _create_actions(self) -> None:
        self.open_action = QAction("&Open Case File...", self)
        self.open_action.setShortcut(QKeySequence.Open)
        self.open_action.triggered.connect(self._on_open_file)

        self.add_action = QAction("&Add Entry...", self)
        self.add_action.setShortcut(QKeySequence.New)
        self.add_action.triggered.connect(self._on_add_entry)

        self.select_all_action = QAction("Select &All", self)
        self.select_all_action.setShortcut(QKeySequence.SelectAll)
        self.select_all_action.triggered.connect(self._on_select_all)

        self.delete_action = QAction("&Delete Selected", self)
        self.delete_action.setShortcut(QKeySequence.Delete)
        self.delete_action.triggered.connect(self._on_delete_selected)

        self.export_action = QAction("&Export to Excel...", self)
        self.export_action.setShortcut("Ctrl+E")
        self.export_action.triggered.connect(self._on_export)

        self.exit_action = QAction("&Quit", self)
        self.exit_action.setShortcut(QKeySequence.Quit)
        self.exit_action.triggered.connect(self.close)

    def _create_menus(self) -> None:
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")
        file_menu.addAction(self.open_action)
        file_menu.addAction(self.export_action)
        file_menu.addSeparator()
        file_menu.addAction(self.exit_action)

        edit_menu = menubar.addMenu("&Edit")
        edit_menu.addAction(self.add_action)
        edit_menu.addAction(self.select_all_action)
        edit_menu.addAction(self.delete_action)

        toolbar = self.addToolBar("Main")
        toolbar.setMovable(False)
        toolbar.addAction(self.add_action)
        toolbar.addAction(self.select_all_action)
        toolbar.addAction(self.delete_action)
        toolbar.addSeparator()
        toolbar.addAction(self.export_action)

    def _create_status_bar(self) -> None:
        status = QStatusBar(self)
        self.setStatusBar(status)
        self.statusBar().showMessage("Embedded dataset loaded")

    # ─────────────────────────────
    # filtering / display
    # ─────────────────────────────
    def _current_condition(self) -> FilterCondition:
        date = ""
        if self.date_check.isChecked():
            date = self.date_edit.date().toString("yyyy-MM-dd")

        referrer = ""
        if self.referrer_combo.currentIndex() > 0:
            referrer = self.referrer_combo.currentText()

        return FilterCondition(
            search=self.search_edit.text(),
            date=date,
            referrer=referrer,
        )

    def _apply_filter(self, *_args) -> None:
        self._visible = filter_cases(self._store.cases, self._current_condition())
        self._populate_report_tree()
        self.dashboard.set_cases(self._visible)
        self.count_label.setText(f"{len(self._visible)} records found")

    def _on_date_toggled(self, checked: bool) -> None:
        self.date_edit.setEnabled(checked)
        self._apply_filter()

    def _on_clear_filters(self) -> None:
        # block signals so the list is rebuilt once, not per widget
        for w in (self.search_edit, self.date_check, self.referrer_combo):
            w.blockSignals(True)
        self.search_edit.clear()
        self.date_check.setChecked(False)
        self.date_edit.setEnabled(False)
        self.referrer_combo.setCurrentIndex(0)
        for w in (self.search_edit, self.date_check, self.referrer_combo):
            w.blockSignals(False)
        self._apply_filter()

    def _refresh_referrer_combo(self) -> None:
        """Rebuild the referrer choices, keeping the current one if it still exists."""
        current = self.referrer_combo.currentText()
        names = sorted({c.referrer for c in self._store.cases})

        self.referrer_combo.blockSignals(True)
        self.referrer_combo.clear()
        self.referrer_combo.addItem(ALL_REFERRERS)
        self.referrer_combo.addItems(names)
        idx = self.referrer_combo.findText(current)
        self.referrer_combo.setCurrentIndex(idx if idx > 0 else 0)
        self.referrer_combo.blockSignals(False)

    def _populate_report_tree(self) -> None:
        """
        One top-level row per referrer (bold, DC subtotal in the last
        column) with a checkable child row per case.
        """
        self.report_tree.clear()
        last_col = len(COLUMNS) - 1

        bold = QFont()
        bold.setBold(True)

        for group in group_by_referrer(self._visible):
            group_item = QTreeWidgetItem(self.report_tree)
            group_item.setText(0, group.referrer)
            group_item.setText(last_col, format_currency(group.dc_total))
            group_item.setTextAlignment(last_col, Qt.AlignRight | Qt.AlignVCenter)
            for col in range(len(COLUMNS)):
                group_item.setFont(col, bold)
                group_item.setBackground(col, QBrush(GROUP_BACKGROUND))
            group_item.setBackground(last_col, QBrush(DC_BACKGROUND))
            # ticking a referrer row ticks all of its cases
            group_item.setFlags(group_item.flags() | Qt.ItemIsUserCheckable | Qt.ItemIsAutoTristate)
            group_item.setCheckState(0, Qt.Unchecked)

            for case in group.cases:
                self._add_case_item(group_item, case)

        self.report_tree.expandAll()
        for col in range(len(COLUMNS)):
            self.report_tree.resizeColumnToContents(col)

    def _add_case_item(self, parent: QTreeWidgetItem, case: CaseRecord) -> None:
        values = [
            case.date,
            case.patient_name,
            case.investigations,
            case.remark,
            format_currency(case.total_fee),
            format_currency(case.discount),
            format_currency(case.fee_paid),
            format_currency(case.fee_due),
            format_currency(case.dc_amount),
        ]
        item = QTreeWidgetItem(parent, values)
        item.setData(0, Qt.UserRole, case.id)
        item.setFlags(item.flags() | Qt.ItemIsUserCheckable)
        item.setCheckState(0, Qt.Unchecked)
        item.setToolTip(2, case.investigations)

        for col in range(4, len(values)):
            item.setTextAlignment(col, Qt.AlignRight | Qt.AlignVCenter)

        if case.canceled:
            font = item.font(0)
            font.setStrikeOut(True)
            for col in range(len(values)):
                item.setFont(col, font)
                item.setForeground(col, QBrush(CANCELED_FOREGROUND))

    def _case_items(self) -> Iterator[QTreeWidgetItem]:
        root = self.report_tree.invisibleRootItem()
        for i in range(root.childCount()):
            group_item = root.child(i)
            for j in range(group_item.childCount()):
                yield group_item.child(j)

    def _checked_case_ids(self) -> List[str]:
        return [
            str(item.data(0, Qt.UserRole))
            for item in self._case_items()
            if item.checkState(0) == Qt.Checked
        ]

    def _on_select_all(self) -> None:
        """Tick every shown case, or untick them all when all are ticked."""
        items = list(self._case_items())
        state = Qt.Checked
        if items and all(item.checkState(0) == Qt.Checked for item in items):
            state = Qt.Unchecked
        for item in items:
            item.setCheckState(0, state)

    # ─────────────────────────────
    # actions
    # ─────────────────────────────
    def _on_open_file(self) -> None:
        path_str, _ = QFileDialog.getOpenFileName(
            self,
            "Open case file",
            "",
            "Tab-separated files (*.tsv *.txt);;All files (*.*)",
        )
        if not path_str:
            return

        path = Path(path_str)
        try:
            cases = load_case_file(path, self._config)
            self._store.replace_all(cases)
        except (OSError, DuplicateCaseError) as e:
            QMessageBox.critical(self, "Open case file", f"Could not load {path.name}:\n{e}")
            return

        self._current_file = path
        self.setWindowTitle(f"DC Manager - {path.name}")
        self._refresh_referrer_combo()
        self._apply_filter()
        self.statusBar().showMessage(f"Loaded {len(cases)} cases from {path.name}")

    def _on_add_entry(self) -> None:
        entry = AddEntryDialog.get_entry_from_user(self._config, self)
        if entry is None:
            return

        try:
            case = build_case_from_entry(entry, self._config)
            self._store.add(case)
        except (InvalidEntryError, DuplicateCaseError) as e:
            QMessageBox.warning(self, "Add Entry", str(e))
            return

        self._refresh_referrer_combo()
        self._apply_filter()
        self.statusBar().showMessage(f"Added {case.patient_name}")

    def _confirm_delete(self, count: int) -> bool:
        answer = QMessageBox.question(
            self,
            "Delete entries",
            f"Are you sure you want to delete {count} entries?",
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        return answer == QMessageBox.Yes

    def _on_delete_selected(self) -> None:
        ids = self._checked_case_ids()
        if not ids:
            self.statusBar().showMessage("Tick the entries to delete first")
            return

        if not self._store.delete_with_confirmation(ids, self._confirm_delete):
            return

        self._refresh_referrer_combo()
        self._apply_filter()
        self.statusBar().showMessage(f"Deleted {len(ids)} entries")

    def _on_export(self) -> None:
        """Write one .xls per month of the cases currently shown."""
        if not self._visible:
            QMessageBox.information(self, "Export to Excel", NO_DATA_NOTICE)
            return

        out_dir = QFileDialog.getExistingDirectory(self, "Export reports to folder")
        if not out_dir:
            return  # cancelled

        try:
            report = export_cases(self._visible, Path(out_dir))
        except OSError as e:
            QMessageBox.critical(
                self,
                "Export error",
                f"An error occurred while writing the reports:\n{e}",
            )
            return

        if report.is_empty:
            QMessageBox.information(self, "Export to Excel", report.notice or NO_DATA_NOTICE)
            return

        names = "\n".join(p.name for p in report.files)
        QMessageBox.information(
            self,
            "Export to Excel",
            f"Wrote {len(report.files)} file(s) to {out_dir}:\n{names}",
        )

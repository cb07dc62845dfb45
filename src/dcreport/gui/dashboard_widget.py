# src/dcreport/gui/dashboard_widget.py

from __future__ import annotations

from typing import List, Optional, Sequence

from PySide6.QtCore import Qt
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from dcreport.logic.report import (
    ChartPoint,
    case_type_distribution,
    format_currency,
    summarize,
    top_referrers,
)
from dcreport.models.case_record import CaseRecord


class DashboardWidget(QWidget):
    """
    Overview tab: four totals and two count tables drawn as bars.
    """

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._build_ui()

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)

        metrics_box = QGroupBox("Summary", self)
        grid = QGridLayout(metrics_box)

        value_font = QFont()
        value_font.setPointSize(16)
        value_font.setBold(True)

        def add_metric(col: int, title: str) -> QLabel:
            grid.addWidget(QLabel(title, metrics_box), 0, col)
            value = QLabel("-", metrics_box)
            value.setFont(value_font)
            grid.addWidget(value, 1, col)
            return value

        self.lbl_collected = add_metric(0, "Total Collection")
        self.lbl_outstanding = add_metric(1, "Total Due")
        self.lbl_patients = add_metric(2, "Patients")
        self.lbl_dc = add_metric(3, "Total DC Payout")

        root.addWidget(metrics_box)

        charts = QHBoxLayout()
        self.referrer_table = self._make_chart_table("Top Referrers")
        self.case_type_table = self._make_chart_table("Case Types")
        charts.addWidget(self.referrer_table.parentWidget())
        charts.addWidget(self.case_type_table.parentWidget())
        root.addLayout(charts, 1)

    def _make_chart_table(self, title: str) -> QTableWidget:
        box = QGroupBox(title, self)
        layout = QVBoxLayout(box)
        table = QTableWidget(box)
        table.setColumnCount(3)
        table.setHorizontalHeaderLabels(["Name", "Cases", ""])
        table.verticalHeader().setVisible(False)
        table.setEditTriggers(QTableWidget.NoEditTriggers)
        table.setSelectionMode(QTableWidget.NoSelection)
        table.horizontalHeader().setStretchLastSection(True)
        layout.addWidget(table)
        return table

    def _fill_chart(self, table: QTableWidget, points: Sequence[ChartPoint]) -> None:
        table.setRowCount(0)
        peak = max((p.count for p in points), default=0)
        for p in points:
            row = table.rowCount()
            table.insertRow(row)
            table.setItem(row, 0, QTableWidgetItem(p.label))
            count_item = QTableWidgetItem(str(p.count))
            count_item.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
            table.setItem(row, 1, count_item)

            bar = QProgressBar(table)
            bar.setRange(0, max(peak, 1))
            bar.setValue(p.count)
            bar.setTextVisible(False)
            table.setCellWidget(row, 2, bar)
        table.resizeColumnToContents(0)

    def set_cases(self, cases: List[CaseRecord]) -> None:
        metrics = summarize(cases)
        self.lbl_collected.setText(format_currency(metrics.total_collected))
        self.lbl_outstanding.setText(format_currency(metrics.total_outstanding))
        self.lbl_patients.setText(str(metrics.patient_count))
        self.lbl_dc.setText(format_currency(metrics.total_dc))

        self._fill_chart(self.referrer_table, top_referrers(cases))
        self._fill_chart(self.case_type_table, case_type_distribution(cases))

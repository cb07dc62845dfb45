# src/dcreport/gui/add_entry_dialog.py

from __future__ import annotations

from typing import List, Optional

from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
    QCompleter,
    QDateEdit,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QHBoxLayout,
    QLineEdit,
    QListWidget,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from dcreport.config import AppConfig
from dcreport.logic.entry_factory import NewEntry, unique_in_order, validate_entry


class AddEntryDialog(QDialog):
    """
    Form for a manually added case.

    - date, referrer, patient name, age
    - investigations (several, picked from suggestions or typed)
    - total fee, discount, amount paid

    The entry is validated before the dialog closes with Accepted.
    """

    def __init__(self, config: AppConfig, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Add New Entry")
        self._config = config

        self._init_widgets()
        self._init_layout()
        self._connect_signals()

    def _init_widgets(self) -> None:
        self.date_edit = QDateEdit(QDate.currentDate(), self)
        self.date_edit.setCalendarPopup(True)
        self.date_edit.setDisplayFormat("yyyy-MM-dd")

        self.referrer_edit = QLineEdit(self)
        self.referrer_edit.setPlaceholderText("Select or type Dr. Name")
        referrer_completer = QCompleter(list(self._config.referrer_suggestions), self)
        referrer_completer.setCaseSensitivity(Qt.CaseInsensitive)
        referrer_completer.setFilterMode(Qt.MatchContains)
        self.referrer_edit.setCompleter(referrer_completer)

        self.patient_edit = QLineEdit(self)
        self.age_edit = QLineEdit(self)
        self.age_edit.setPlaceholderText("e.g. 25 YRS")

        # investigations: input + add button, chosen items listed below
        self.investigation_edit = QLineEdit(self)
        self.investigation_edit.setPlaceholderText("Type to search tests...")
        inv_completer = QCompleter(list(self._config.investigation_suggestions), self)
        inv_completer.setCaseSensitivity(Qt.CaseInsensitive)
        inv_completer.setFilterMode(Qt.MatchContains)
        self.investigation_edit.setCompleter(inv_completer)
        self.btn_add_investigation = QPushButton("Add", self)
        self.btn_remove_investigation = QPushButton("Remove", self)
        self.investigation_list = QListWidget(self)
        self.investigation_list.setMaximumHeight(100)

        self.total_edit = QLineEdit(self)
        self.discount_edit = QLineEdit(self)
        self.discount_edit.setPlaceholderText("0")
        self.paid_edit = QLineEdit(self)

        self.button_box = QDialogButtonBox(
            QDialogButtonBox.Save | QDialogButtonBox.Cancel,
            orientation=Qt.Horizontal,
            parent=self,
        )

    def _init_layout(self) -> None:
        layout = QFormLayout(self)
        layout.setFieldGrowthPolicy(QFormLayout.AllNonFixedFieldsGrow)

        layout.addRow("Date:", self.date_edit)
        layout.addRow("Referrer:", self.referrer_edit)
        layout.addRow("Patient Name:", self.patient_edit)
        layout.addRow("Age:", self.age_edit)

        inv_row = QHBoxLayout()
        inv_row.addWidget(self.investigation_edit)
        inv_row.addWidget(self.btn_add_investigation)
        inv_box = QVBoxLayout()
        inv_box.addLayout(inv_row)
        inv_box.addWidget(self.investigation_list)
        inv_box.addWidget(self.btn_remove_investigation, alignment=Qt.AlignRight)
        layout.addRow("Investigations:", inv_box)

        layout.addRow("Total Fee:", self.total_edit)
        layout.addRow("Discount:", self.discount_edit)
        layout.addRow("Amount Paid:", self.paid_edit)

        layout.addRow(self.button_box)
        self.setLayout(layout)
        self.resize(460, 480)

    def _connect_signals(self) -> None:
        self.btn_add_investigation.clicked.connect(self._on_add_investigation)
        self.investigation_edit.returnPressed.connect(self._on_add_investigation)
        self.btn_remove_investigation.clicked.connect(self._on_remove_investigation)
        self.button_box.accepted.connect(self._on_accept)
        self.button_box.rejected.connect(self.reject)

    # ─ investigations ─────────────────────────────────────
    def _investigations(self) -> List[str]:
        return [
            self.investigation_list.item(i).text()
            for i in range(self.investigation_list.count())
        ]

    def _on_add_investigation(self) -> None:
        text = self.investigation_edit.text().strip()
        if text and text not in self._investigations():
            self.investigation_list.addItem(text)
        self.investigation_edit.clear()

    def _on_remove_investigation(self) -> None:
        for item in self.investigation_list.selectedItems():
            self.investigation_list.takeItem(self.investigation_list.row(item))

    # ─ result ─────────────────────────────────────────────
    def get_entry(self) -> NewEntry:
        """Build a NewEntry from the current form contents."""
        pending = self.investigation_edit.text().strip()
        investigations = self._investigations() + ([pending] if pending else [])
        return NewEntry(
            date=self.date_edit.date().toString("yyyy-MM-dd"),
            referrer=self.referrer_edit.text(),
            patient_name=self.patient_edit.text(),
            age=self.age_edit.text(),
            investigations=unique_in_order(investigations),
            total_fee=self.total_edit.text(),
            fee_paid=self.paid_edit.text(),
            discount=self.discount_edit.text(),
        )

    def _on_accept(self) -> None:
        error = validate_entry(self.get_entry())
        if error is not None:
            QMessageBox.warning(self, "Add New Entry", error)
            return
        self.accept()

    @staticmethod
    def get_entry_from_user(
        config: AppConfig,
        parent: Optional[QWidget] = None,
    ) -> Optional[NewEntry]:
        """
        Show the dialog modally.

            entry = AddEntryDialog.get_entry_from_user(self._config, self)
            if entry is None:
                return  # cancelled
        """
        dlg = AddEntryDialog(config, parent)
        if dlg.exec() != QDialog.Accepted:
            return None
        return dlg.get_entry()

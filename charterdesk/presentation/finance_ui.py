# charterdesk/presentation/finance_ui.py

from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QTableView, QPushButton, QHBoxLayout, QLineEdit,
    QMessageBox, QDialog, QFormLayout, QGroupBox, QHeaderView, QTabWidget, QComboBox,
    QDialogButtonBox, QAbstractItemView, QTextEdit
)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex
from PyQt5.QtGui import QColor, QFont
from typing import List, Optional, Any, Dict
from datetime import date

from charterdesk.business_logic.entities.ledger_entry_entity import LedgerEntryEntity
from charterdesk.business_logic.entities.financial_report_entity import FinancialReportEntity
from charterdesk.business_logic.ledger_manager import LedgerManager
from charterdesk.business_logic.financial_report_manager import FinancialReportManager, FIGURE_FIELDS
from charterdesk.business_logic.calculations.derived_fields import derive_financial_report_fields
from charterdesk.constants import LedgerEntryType, SourceModule, PaymentMethod
from charterdesk.presentation.custom_widgets import AmountLineEdit, DerivedValueLabel, DateEdit, format_amount
from charterdesk.utils.date_converter import to_display_str

import logging
logger = logging.getLogger(__name__)

FIGURE_LABELS = {
    "total_income": "Total income:",
    "booking_income": "Booking income:",
    "other_income": "Other income:",
    "total_expenses": "Total expenses:",
    "payroll_expenses": "Payroll expenses:",
    "purchase_expenses": "Purchase expenses:",
    "operational_expenses": "Operational expenses:",
}


# ============================================================
#  Ledger
# ============================================================
class LedgerTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[LedgerEntryEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[LedgerEntryEntity] = data if data is not None else []
        self._headers = ["Date", "Type", "Source", "Category", "Description", "Amount"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._data)):
            return QVariant()
        entry = self._data[index.row()]
        col = index.column()

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return to_display_str(entry.transaction_date)
            if col == 1: return entry.entry_type.value.capitalize()
            if col == 2: return entry.source_module.value.upper()
            if col == 3: return entry.category or ""
            if col == 4: return entry.description or ""
            if col == 5: return format_amount(entry.signed_amount)
        elif role == Qt.ItemDataRole.TextAlignmentRole and col == 5:
            return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        elif role == Qt.ItemDataRole.ForegroundRole and col == 5:
            return QColor("darkGreen") if entry.entry_type == LedgerEntryType.INCOME else QColor("darkRed")
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[LedgerEntryEntity]):
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()

    def get_entry_at_row(self, row: int) -> Optional[LedgerEntryEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None


class LedgerEntryDialog(QDialog):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("New ledger entry")
        layout = QFormLayout(self)

        self.date_edit = DateEdit(initial_date=date.today(), allow_empty=False, parent=self)
        self.type_combo = QComboBox(self)
        for entry_type in LedgerEntryType:
            self.type_combo.addItem(entry_type.value.capitalize(), entry_type)
        self.source_combo = QComboBox(self)
        for module in SourceModule:
            self.source_combo.addItem(module.value.upper(), module)
        self.source_combo.setCurrentIndex(self.source_combo.findData(SourceModule.MANUAL))
        self.amount_edit = AmountLineEdit(parent=self)
        self.category_edit = QLineEdit(self)
        self.payment_method_combo = QComboBox(self)
        for method in PaymentMethod:
            self.payment_method_combo.addItem(method.value.replace("_", " ").capitalize(), method)
        self.description_edit = QTextEdit(self)
        self.description_edit.setFixedHeight(50)

        layout.addRow("Date:", self.date_edit)
        layout.addRow("Type:", self.type_combo)
        layout.addRow("Source:", self.source_combo)
        layout.addRow("Amount:", self.amount_edit)
        layout.addRow("Category:", self.category_edit)
        layout.addRow("Payment method:", self.payment_method_combo)
        layout.addRow("Description:", self.description_edit)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)
        layout.addRow(self.button_box)

    def get_data(self) -> Dict[str, Any]:
        return {
            "transaction_date": self.date_edit.date(),
            "entry_type": self.type_combo.currentData(),
            "source_module": self.source_combo.currentData(),
            "amount": self.amount_edit.raw_value(),
            "category": self.category_edit.text().strip() or None,
            "payment_method": self.payment_method_combo.currentData(),
            "description": self.description_edit.toPlainText().strip() or None,
        }


class LedgerWidget(QWidget):
    def __init__(self, ledger_manager: LedgerManager, parent=None):
        super().__init__(parent)
        self.ledger_manager = ledger_manager
        self.table_model = LedgerTableModel()
        self._init_ui()
        self.load_entries()

    def _init_ui(self):
        layout = QVBoxLayout(self)

        options_group = QGroupBox("Period")
        options_layout = QHBoxLayout(options_group)
        self.start_date_edit = DateEdit(parent=self)
        self.end_date_edit = DateEdit(parent=self)
        self.filter_button = QPushButton("Show")
        options_layout.addWidget(QLabel("From:"))
        options_layout.addWidget(self.start_date_edit)
        options_layout.addWidget(QLabel("To:"))
        options_layout.addWidget(self.end_date_edit)
        options_layout.addWidget(self.filter_button)
        options_layout.addStretch()
        layout.addWidget(options_group)

        self.table_view = QTableView(self)
        self.table_view.setModel(self.table_model)
        self.table_view.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table_view.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        header = self.table_view.horizontalHeader()
        if header:
            header.setSectionResizeMode(QHeaderView.ResizeMode.ResizeToContents)
            header.setSectionResizeMode(4, QHeaderView.ResizeMode.Stretch)
        layout.addWidget(self.table_view)

        self.totals_label = QLabel(self)
        font = QFont(); font.setBold(True)
        self.totals_label.setFont(font)
        layout.addWidget(self.totals_label)

        button_layout = QHBoxLayout()
        self.add_button = QPushButton("New entry")
        self.delete_button = QPushButton("Delete entry")
        button_layout.addWidget(self.add_button)
        button_layout.addWidget(self.delete_button)
        button_layout.addStretch()
        layout.addLayout(button_layout)

        self.filter_button.clicked.connect(self.load_entries)
        self.add_button.clicked.connect(self._open_add_dialog)
        self.delete_button.clicked.connect(self._delete_selected)

    def load_entries(self):
        start, end = self.start_date_edit.date(), self.end_date_edit.date()
        try:
            self.table_model.update_data(self.ledger_manager.get_entries(start, end))
            totals = self.ledger_manager.get_totals(start, end)
            self.totals_label.setText(f"Income: {format_amount(totals['income'])}   "
                                      f"Expense: {format_amount(totals['expense'])}   "
                                      f"Net: {format_amount(totals['net'])}")
        except ValueError as ve:
            QMessageBox.warning(self, "Invalid period", str(ve))
        except Exception as e:
            logger.error(f"Error loading ledger entries: {e}", exc_info=True)
            QMessageBox.critical(self, "Load error", f"Could not load the ledger: {e}")

    def _open_add_dialog(self):
        dialog = LedgerEntryDialog(parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            try:
                self.ledger_manager.add_entry(**dialog.get_data())
                self.load_entries()
            except ValueError as ve:
                QMessageBox.warning(self, "Validation error", str(ve))
            except Exception as e:
                logger.error(f"Error adding ledger entry: {e}", exc_info=True)
                QMessageBox.critical(self, "Error", f"Could not add the entry: {e}")

    def _delete_selected(self):
        entry = self.table_model.get_entry_at_row(self.table_view.currentIndex().row())
        if not entry:
            QMessageBox.information(self, "No selection", "Please select an entry first.")
            return
        try:
            self.ledger_manager.delete_entry(entry.id)
            self.load_entries()
        except ValueError as ve:
            QMessageBox.warning(self, "Not deleted", str(ve))
        except Exception as e:
            logger.error(f"Error deleting ledger entry ID {entry.id}: {e}", exc_info=True)
            QMessageBox.critical(self, "Error", f"Could not delete the entry: {e}")


# ============================================================
#  Financial reports
# ============================================================
class FinancialReportTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[FinancialReportEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[FinancialReportEntity] = data if data is not None else []
        self._headers = ["Period", "Income", "Expenses", "Profit", "Notes"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._data)):
            return QVariant()
        report = self._data[index.row()]
        col = index.column()
        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return report.report_period
            if col == 1: return format_amount(report.total_income)
            if col == 2: return format_amount(report.total_expenses)
            if col == 3: return format_amount(report.profit)
            if col == 4: return report.notes or ""
        elif role == Qt.ItemDataRole.TextAlignmentRole and 1 <= col <= 3:
            return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        elif role == Qt.ItemDataRole.ForegroundRole and col == 3 and report.profit < 0:
            return QColor("darkRed")
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[FinancialReportEntity]):
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()

    def get_report_at_row(self, row: int) -> Optional[FinancialReportEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None


class FinancialReportDialog(QDialog):
    """Report figures are typed in or pulled from the ledger for a period."""

    def __init__(self, report_manager: FinancialReportManager,
                 report: Optional[FinancialReportEntity] = None, parent=None):
        super().__init__(parent)
        self.report_manager = report_manager
        self.setWindowTitle(f"Edit report {report.report_period}" if report else "New financial report")
        self.setMinimumWidth(400)

        layout = QVBoxLayout(self)
        form = QFormLayout()
        self.period_edit = QLineEdit(self)
        form.addRow("Period:", self.period_edit)
        self.figure_edits: Dict[str, AmountLineEdit] = {}
        for name in FIGURE_FIELDS:
            edit = AmountLineEdit(parent=self)
            edit.textChanged.connect(self._recalculate)
            self.figure_edits[name] = edit
            form.addRow(FIGURE_LABELS[name], edit)
        self.profit_label = DerivedValueLabel(self)
        form.addRow("Profit:", self.profit_label)
        self.notes_edit = QTextEdit(self)
        self.notes_edit.setFixedHeight(50)
        form.addRow("Notes:", self.notes_edit)
        layout.addLayout(form)

        ledger_group = QGroupBox("Fill from ledger", self)
        ledger_layout = QHBoxLayout(ledger_group)
        self.start_date_edit = DateEdit(allow_empty=False, parent=self)
        self.end_date_edit = DateEdit(allow_empty=False, parent=self)
        self.fill_button = QPushButton("Fill")
        self.fill_button.setEnabled(report_manager.ledger_manager is not None)
        self.fill_button.clicked.connect(self._fill_from_ledger)
        ledger_layout.addWidget(self.start_date_edit)
        ledger_layout.addWidget(self.end_date_edit)
        ledger_layout.addWidget(self.fill_button)
        layout.addWidget(ledger_group)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)
        layout.addWidget(self.button_box)

        if report:
            self.period_edit.setText(report.report_period)
            for name, edit in self.figure_edits.items():
                edit.set_value(getattr(report, name))
            self.notes_edit.setPlainText(report.notes or "")
        self._recalculate()

    def _recalculate(self):
        derived = derive_financial_report_fields({
            "total_income": self.figure_edits["total_income"].raw_value(),
            "total_expenses": self.figure_edits["total_expenses"].raw_value(),
        })
        self.profit_label.set_amount(derived["profit"])

    def _fill_from_ledger(self):
        try:
            figures = self.report_manager.figures_from_ledger(self.start_date_edit.date(), self.end_date_edit.date())
        except ValueError as ve:
            QMessageBox.warning(self, "Invalid period", str(ve))
            return
        for name, value in figures.items():
            self.figure_edits[name].set_value(value)

    def get_data(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {name: edit.raw_value() for name, edit in self.figure_edits.items()}
        data["report_period"] = self.period_edit.text().strip()
        data["notes"] = self.notes_edit.toPlainText().strip() or None
        return data


class FinancialReportsWidget(QWidget):
    def __init__(self, report_manager: FinancialReportManager, parent=None):
        super().__init__(parent)
        self.report_manager = report_manager
        self.table_model = FinancialReportTableModel()
        self._init_ui()
        self.load_reports()

    def _init_ui(self):
        layout = QVBoxLayout(self)
        self.table_view = QTableView(self)
        self.table_view.setModel(self.table_model)
        self.table_view.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table_view.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        header = self.table_view.horizontalHeader()
        if header:
            header.setSectionResizeMode(QHeaderView.ResizeMode.ResizeToContents)
            header.setSectionResizeMode(4, QHeaderView.ResizeMode.Stretch)
        layout.addWidget(self.table_view)

        self.aggregates_label = QLabel(self)
        layout.addWidget(self.aggregates_label)

        button_layout = QHBoxLayout()
        self.add_button = QPushButton("New report")
        self.edit_button = QPushButton("Edit report")
        self.delete_button = QPushButton("Delete report")
        self.add_button.clicked.connect(self._open_add_dialog)
        self.edit_button.clicked.connect(self._open_edit_dialog)
        self.delete_button.clicked.connect(self._delete_selected)
        button_layout.addWidget(self.add_button)
        button_layout.addWidget(self.edit_button)
        button_layout.addWidget(self.delete_button)
        button_layout.addStretch()
        layout.addLayout(button_layout)

    def load_reports(self):
        try:
            self.table_model.update_data(self.report_manager.get_all_reports())
            aggregates = self.report_manager.get_aggregates()
            self.aggregates_label.setText(f"Income: {format_amount(aggregates['total_income'])}   "
                                          f"Expenses: {format_amount(aggregates['total_expenses'])}   "
                                          f"Profit: {format_amount(aggregates['profit'])}")
        except Exception as e:
            logger.error(f"Error loading financial reports: {e}", exc_info=True)
            QMessageBox.critical(self, "Load error", f"Could not load reports: {e}")

    def _open_add_dialog(self):
        dialog = FinancialReportDialog(self.report_manager, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            try:
                self.report_manager.create_report(**dialog.get_data())
                self.load_reports()
            except ValueError as ve:
                QMessageBox.warning(self, "Validation error", str(ve))
            except Exception as e:
                logger.error(f"Error creating financial report: {e}", exc_info=True)
                QMessageBox.critical(self, "Error", f"Could not create the report: {e}")

    def _open_edit_dialog(self):
        report = self.table_model.get_report_at_row(self.table_view.currentIndex().row())
        if not report:
            QMessageBox.information(self, "No selection", "Please select a report first.")
            return
        dialog = FinancialReportDialog(self.report_manager, report, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            try:
                self.report_manager.update_report(report.id, **dialog.get_data())
                self.load_reports()
            except ValueError as ve:
                QMessageBox.warning(self, "Validation error", str(ve))
            except Exception as e:
                logger.error(f"Error updating financial report ID {report.id}: {e}", exc_info=True)
                QMessageBox.critical(self, "Error", f"Could not update the report: {e}")

    def _delete_selected(self):
        report = self.table_model.get_report_at_row(self.table_view.currentIndex().row())
        if not report:
            QMessageBox.information(self, "No selection", "Please select a report first.")
            return
        try:
            self.report_manager.delete_report(report.id)
            self.load_reports()
        except ValueError as ve:
            QMessageBox.warning(self, "Not deleted", str(ve))


class FinanceUI(QWidget):
    def __init__(self, ledger_manager: LedgerManager, report_manager: FinancialReportManager, parent=None):
        super().__init__(parent)
        main_layout = QVBoxLayout(self)
        self.finance_tabs = QTabWidget()
        main_layout.addWidget(self.finance_tabs)

        self.ledger_widget = LedgerWidget(ledger_manager)
        self.finance_tabs.addTab(self.ledger_widget, "Ledger")
        self.reports_widget = FinancialReportsWidget(report_manager)
        self.finance_tabs.addTab(self.reports_widget, "Financial reports")
        logger.info("FinanceUI initialized.")

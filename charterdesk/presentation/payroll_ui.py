# charterdesk/presentation/payroll_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QLabel, QTableView, QPushButton,
                             QHBoxLayout, QMessageBox, QDialog, QComboBox, QSpinBox,
                             QFormLayout, QDialogButtonBox, QAbstractItemView, QTextEdit,
                             QHeaderView, QFileDialog, QGroupBox)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex
from PyQt5.QtGui import QColor

from typing import List, Optional, Any, Dict
from datetime import date

from charterdesk.business_logic.entities.payroll_entity import PayrollEntity
from charterdesk.business_logic.payroll_manager import PayrollManager, EARNING_FIELDS, DEDUCTION_FIELDS
from charterdesk.business_logic.employee_manager import EmployeeManager
from charterdesk.business_logic.calculations.derived_fields import derive_payroll_fields
from charterdesk.business_logic.payslip_builder import export_payslip_pdf, WEASYPRINT_AVAILABLE
from charterdesk.constants import PayrollStatus, MONTHS
from charterdesk.presentation.custom_widgets import AmountLineEdit, DerivedValueLabel, format_amount
from charterdesk.utils.date_converter import to_display_str
import logging

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    "basic_salary": "Basic salary:",
    "allowance": "Allowance:",
    "accommodation_allowance": "Accommodation allowance:",
    "sales_commission": "Sales commission:",
    "bar_commission": "Bar commission:",
    "overtime_amount": "Overtime:",
    "deductions": "Other deductions:",
    "advance_salary": "Advance salary:",
    "absent_deduction": "Absent deduction:",
}

STATUS_COLORS = {
    PayrollStatus.PAID: QColor("darkGreen"),
    PayrollStatus.PENDING: QColor("darkOrange"),
    PayrollStatus.HOLD: QColor("darkRed"),
}


class PayrollTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[PayrollEntity]] = None,
                 employee_names: Optional[Dict[int, str]] = None, parent=None):
        super().__init__(parent)
        self._data: List[PayrollEntity] = data if data is not None else []
        self._employee_names: Dict[int, str] = employee_names or {}
        self._headers = ["ID", "Employee", "Period", "Earnings", "Deductions", "Net salary", "Status", "Paid on"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._data)):
            return QVariant()
        payroll = self._data[index.row()]
        col = index.column()

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return str(payroll.id)
            if col == 1: return self._employee_names.get(payroll.employee_id, f"#{payroll.employee_id}")
            if col == 2: return payroll.period_label
            if col == 3: return format_amount(payroll.total_earnings)
            if col == 4: return format_amount(payroll.total_deductions)
            if col == 5: return format_amount(payroll.net_salary)
            if col == 6: return payroll.payment_status.value.capitalize()
            if col == 7: return to_display_str(payroll.payment_date)
        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if 3 <= col <= 5:
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
            return Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter
        elif role == Qt.ItemDataRole.ForegroundRole and col == 6:
            return STATUS_COLORS.get(payroll.payment_status, QVariant())
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[PayrollEntity], employee_names: Dict[int, str]):
        self.beginResetModel()
        self._data = new_data
        self._employee_names = employee_names
        self.endResetModel()

    def get_payroll_at_row(self, row: int) -> Optional[PayrollEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None


class PayrollDialog(QDialog):
    """
    Payroll entry form. Picking an employee fills the salary package as editable
    defaults; totals and net salary follow every keystroke.
    """

    def __init__(self, employee_manager: EmployeeManager,
                 payroll: Optional[PayrollEntity] = None, parent=None):
        super().__init__(parent)
        self.employee_manager = employee_manager
        self.payroll = payroll
        self.setWindowTitle(f"Edit payroll {payroll.period_label}" if payroll else "Generate payroll")
        self.setMinimumWidth(420)

        layout = QVBoxLayout(self)
        form = QFormLayout()

        self.employee_combo = QComboBox(self)
        for employee in (employee_manager.get_all_employees() if payroll else employee_manager.get_active_employees()):
            self.employee_combo.addItem(employee.full_name, employee.id)
        self.month_combo = QComboBox(self)
        self.month_combo.addItems(MONTHS)
        self.year_spin = QSpinBox(self)
        self.year_spin.setRange(2000, 2100)
        self.year_spin.setValue(date.today().year)
        self.month_combo.setCurrentIndex(date.today().month - 1)

        form.addRow("Employee:", self.employee_combo)
        form.addRow("Month:", self.month_combo)
        form.addRow("Year:", self.year_spin)

        self.amount_edits: Dict[str, AmountLineEdit] = {}
        for name in EARNING_FIELDS + DEDUCTION_FIELDS:
            edit = AmountLineEdit(parent=self)
            edit.textChanged.connect(self._recalculate)
            self.amount_edits[name] = edit
            form.addRow(FIELD_LABELS[name], edit)

        self.notes_edit = QTextEdit(self)
        self.notes_edit.setFixedHeight(50)
        form.addRow("Notes:", self.notes_edit)
        layout.addLayout(form)

        totals_box = QGroupBox("Totals", self)
        totals_form = QFormLayout(totals_box)
        self.total_earnings_label = DerivedValueLabel(self)
        self.total_deductions_label = DerivedValueLabel(self)
        self.net_salary_label = DerivedValueLabel(self)
        totals_form.addRow("Total earnings:", self.total_earnings_label)
        totals_form.addRow("Total deductions:", self.total_deductions_label)
        totals_form.addRow("Net salary:", self.net_salary_label)
        layout.addWidget(totals_box)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)
        layout.addWidget(self.button_box)

        if payroll:
            self._populate(payroll)
        else:
            self.employee_combo.currentIndexChanged.connect(self._fill_defaults)
            self._fill_defaults()
        self._recalculate()

    def _populate(self, payroll: PayrollEntity):
        index = self.employee_combo.findData(payroll.employee_id)
        if index >= 0:
            self.employee_combo.setCurrentIndex(index)
        self.employee_combo.setEnabled(False)
        self.month_combo.setCurrentText(payroll.month)
        self.year_spin.setValue(payroll.year)
        for name, edit in self.amount_edits.items():
            edit.set_value(getattr(payroll, name))
        self.notes_edit.setPlainText(payroll.notes or "")

    def _fill_defaults(self):
        employee_id = self.employee_combo.currentData()
        if employee_id is None:
            return
        try:
            defaults = self.employee_manager.get_payroll_defaults(employee_id)
        except ValueError as ve:
            logger.warning(f"No salary defaults for employee ID {employee_id}: {ve}")
            return
        for name, value in defaults.items():
            self.amount_edits[name].set_value(value)

    def _recalculate(self):
        derived = derive_payroll_fields({name: edit.raw_value() for name, edit in self.amount_edits.items()})
        self.total_earnings_label.set_amount(derived["total_earnings"])
        self.total_deductions_label.set_amount(derived["total_deductions"])
        self.net_salary_label.set_amount(derived["net_salary"])

    def get_data(self) -> Optional[Dict[str, Any]]:
        if self.employee_combo.currentData() is None:
            QMessageBox.warning(self, "Invalid input", "Please choose an employee.")
            return None
        data: Dict[str, Any] = {
            "month": self.month_combo.currentText(),
            "year": self.year_spin.value(),
            "notes": self.notes_edit.toPlainText().strip() or None,
        }
        if not self.payroll:
            data["employee_id"] = self.employee_combo.currentData()
        data.update({name: edit.raw_value() for name, edit in self.amount_edits.items()})
        return data


class PayrollUI(QWidget):
    def __init__(self,
                 payroll_manager: PayrollManager,
                 employee_manager: EmployeeManager,
                 parent=None):
        super().__init__(parent)
        self.payroll_manager = payroll_manager
        self.employee_manager = employee_manager
        self.table_model = PayrollTableModel()
        self._init_ui()
        self.load_payrolls_data()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        filter_layout = QHBoxLayout()
        filter_layout.addWidget(QLabel("Status:"))
        self.status_filter = QComboBox(self)
        self.status_filter.addItem("All", None)
        for status in PayrollStatus:
            self.status_filter.addItem(status.value.capitalize(), status)
        self.status_filter.currentIndexChanged.connect(self.load_payrolls_data)
        filter_layout.addWidget(self.status_filter)
        filter_layout.addStretch()
        self.totals_label = QLabel(self)
        filter_layout.addWidget(self.totals_label)
        main_layout.addLayout(filter_layout)

        self.table_view = QTableView()
        self.table_view.setModel(self.table_model)
        self.table_view.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table_view.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        header = self.table_view.horizontalHeader()
        if header:
            header.setSectionResizeMode(QHeaderView.ResizeMode.ResizeToContents)
            header.setSectionResizeMode(1, QHeaderView.ResizeMode.Stretch)
        main_layout.addWidget(self.table_view)

        button_layout = QHBoxLayout()
        self.generate_button = QPushButton("Generate payroll")
        self.edit_button = QPushButton("Edit")
        self.pay_button = QPushButton("Mark as paid")
        self.hold_button = QPushButton("Put on hold")
        self.delete_button = QPushButton("Delete")
        self.payslip_button = QPushButton("Export payslip PDF")
        self.payslip_button.setEnabled(WEASYPRINT_AVAILABLE)
        self.refresh_button = QPushButton("Refresh")

        self.generate_button.clicked.connect(self._open_generate_dialog)
        self.edit_button.clicked.connect(self._open_edit_dialog)
        self.pay_button.clicked.connect(lambda: self._change_status(self.payroll_manager.mark_as_paid))
        self.hold_button.clicked.connect(lambda: self._change_status(self.payroll_manager.put_on_hold))
        self.delete_button.clicked.connect(self._delete_selected)
        self.payslip_button.clicked.connect(self._export_payslip)
        self.refresh_button.clicked.connect(self.load_payrolls_data)

        for button in (self.generate_button, self.edit_button, self.pay_button,
                       self.hold_button, self.delete_button, self.payslip_button):
            button_layout.addWidget(button)
        button_layout.addStretch()
        button_layout.addWidget(self.refresh_button)
        main_layout.addLayout(button_layout)
        logger.info("PayrollUI initialized.")

    def load_payrolls_data(self):
        try:
            payrolls = self.payroll_manager.get_payrolls(status=self.status_filter.currentData())
            names = {e.id: e.full_name for e in self.employee_manager.get_all_employees()}
            self.table_model.update_data(payrolls, names)
            totals = self.payroll_manager.get_payroll_totals()
            self.totals_label.setText(f"Paid: {format_amount(totals['paid'])}  "
                                      f"Pending: {format_amount(totals['pending'])}  "
                                      f"On hold: {format_amount(totals['hold'])}")
        except Exception as e:
            logger.error(f"Error loading payrolls: {e}", exc_info=True)
            QMessageBox.critical(self, "Load error", f"Could not load payrolls: {e}")

    def _selected(self) -> Optional[PayrollEntity]:
        payroll = self.table_model.get_payroll_at_row(self.table_view.currentIndex().row())
        if not payroll:
            QMessageBox.information(self, "No selection", "Please select a payroll first.")
        return payroll

    def _open_generate_dialog(self):
        dialog = PayrollDialog(self.employee_manager, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    payroll = self.payroll_manager.generate_payroll(**data)
                    QMessageBox.information(self, "Generated",
                                            f"Payroll for {payroll.period_label} generated. "
                                            f"Net salary: {format_amount(payroll.net_salary)}")
                    self.load_payrolls_data()
                except ValueError as ve:
                    QMessageBox.warning(self, "Validation error", str(ve))
                except Exception as e:
                    logger.error(f"Error generating payroll: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not generate the payroll: {e}")

    def _open_edit_dialog(self):
        payroll = self._selected()
        if not payroll:
            return
        if payroll.is_paid:
            QMessageBox.information(self, "Paid", "A paid payroll cannot be edited.")
            return
        dialog = PayrollDialog(self.employee_manager, payroll, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    self.payroll_manager.update_payroll(payroll.id, **data)
                    self.load_payrolls_data()
                except ValueError as ve:
                    QMessageBox.warning(self, "Validation error", str(ve))
                except Exception as e:
                    logger.error(f"Error updating payroll ID {payroll.id}: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not update the payroll: {e}")

    def _change_status(self, action):
        payroll = self._selected()
        if not payroll:
            return
        try:
            action(payroll.id)
            self.load_payrolls_data()
        except ValueError as ve:
            QMessageBox.warning(self, "Not changed", str(ve))
        except Exception as e:
            logger.error(f"Error changing status of payroll ID {payroll.id}: {e}", exc_info=True)
            QMessageBox.critical(self, "Error", f"Could not change the payroll status: {e}")

    def _delete_selected(self):
        payroll = self._selected()
        if not payroll:
            return
        reply = QMessageBox.question(self, "Confirm delete", f"Delete the payroll for {payroll.period_label}?",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply == QMessageBox.StandardButton.Yes:
            try:
                self.payroll_manager.delete_payroll(payroll.id)
                self.load_payrolls_data()
            except ValueError as ve:
                QMessageBox.warning(self, "Not deleted", str(ve))
            except Exception as e:
                logger.error(f"Error deleting payroll ID {payroll.id}: {e}", exc_info=True)
                QMessageBox.critical(self, "Error", f"Could not delete the payroll: {e}")

    def _export_payslip(self):
        payroll = self._selected()
        if not payroll:
            return
        employee = self.employee_manager.get_employee_by_id(payroll.employee_id)
        name = employee.full_name.replace(" ", "_") if employee else str(payroll.employee_id)
        default_name = f"Payslip_{name}_{payroll.month}_{payroll.year}.pdf"
        file_path, _ = QFileDialog.getSaveFileName(self, "Save payslip", default_name, "PDF Files (*.pdf)")
        if not file_path:
            return
        try:
            export_payslip_pdf(payroll, file_path, employee)
            QMessageBox.information(self, "Exported", f"Payslip saved to:\n{file_path}")
        except Exception as e:
            logger.error(f"Error exporting payslip for payroll ID {payroll.id}: {e}", exc_info=True)
            QMessageBox.critical(self, "Export error", f"Could not export the payslip: {e}")

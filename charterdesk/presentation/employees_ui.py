# charterdesk/presentation/employees_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QTableView, QPushButton,
                             QHBoxLayout, QMessageBox, QDialog, QLineEdit,
                             QFormLayout, QDialogButtonBox, QAbstractItemView,
                             QHeaderView, QCheckBox)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex
from PyQt5.QtGui import QColor

from typing import List, Optional, Any, Dict

from charterdesk.business_logic.entities.employee_entity import EmployeeEntity
from charterdesk.business_logic.employee_manager import EmployeeManager, SALARY_FIELDS
from charterdesk.constants import EmployeeStatus
from charterdesk.presentation.custom_widgets import AmountLineEdit, DateEdit, format_amount
from charterdesk.utils.date_converter import to_display_str
import logging

logger = logging.getLogger(__name__)

SALARY_LABELS = {
    "basic_salary": "Basic salary:",
    "allowance": "Allowance:",
    "accommodation_allowance": "Accommodation allowance:",
    "sales_commission": "Sales commission:",
    "bar_commission": "Bar commission:",
}


# --- Custom Table Model for Employees ---
class EmployeeTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[EmployeeEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[EmployeeEntity] = data if data is not None else []
        self._headers = ["ID", "Full name", "Designation", "Department", "Basic salary", "Joined", "Status"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid():
            return QVariant()

        row = index.row()
        col = index.column()
        if not (0 <= row < len(self._data)):
            return QVariant()
        employee = self._data[row]

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0:
                return str(employee.id)
            elif col == 1:
                return employee.full_name
            elif col == 2:
                return employee.designation or ""
            elif col == 3:
                return employee.department or ""
            elif col == 4:
                return format_amount(employee.basic_salary)
            elif col == 5:
                return to_display_str(employee.joining_date)
            elif col == 6:
                return "Active" if employee.is_active else "Inactive"

        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if col == 0:
                return Qt.AlignmentFlag.AlignCenter | Qt.AlignmentFlag.AlignVCenter
            if col == 4:
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
            return Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter

        elif role == Qt.ItemDataRole.ForegroundRole:
            if not employee.is_active:
                return QColor(Qt.GlobalColor.gray)

        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[EmployeeEntity]):
        logger.debug(f"Updating employee table model with {len(new_data)} rows.")
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()

    def get_employee_at_row(self, row: int) -> Optional[EmployeeEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None


# --- Add/Edit Employee Dialog ---
class EmployeeDialog(QDialog):
    def __init__(self, employee: Optional[EmployeeEntity] = None, parent=None):
        super().__init__(parent)
        self.employee = employee
        self.setWindowTitle(f"Edit employee: {employee.full_name}" if employee else "New employee")
        self.setMinimumWidth(400)

        layout = QFormLayout(self)

        self.name_edit = QLineEdit(self)
        self.designation_edit = QLineEdit(self)
        self.department_edit = QLineEdit(self)
        self.joining_date_edit = DateEdit(parent=self)
        self.salary_edits: Dict[str, AmountLineEdit] = {name: AmountLineEdit(parent=self) for name in SALARY_FIELDS}
        self.is_active_checkbox = QCheckBox("Active", self)
        self.is_active_checkbox.setChecked(True)

        if employee:
            self.name_edit.setText(employee.full_name)
            self.designation_edit.setText(employee.designation or "")
            self.department_edit.setText(employee.department or "")
            self.joining_date_edit.setDate(employee.joining_date)
            for name, edit in self.salary_edits.items():
                edit.set_value(getattr(employee, name))
            self.is_active_checkbox.setChecked(employee.is_active)

        layout.addRow("Full name:", self.name_edit)
        layout.addRow("Designation:", self.designation_edit)
        layout.addRow("Department:", self.department_edit)
        layout.addRow("Joining date:", self.joining_date_edit)
        for name in SALARY_FIELDS:
            layout.addRow(SALARY_LABELS[name], self.salary_edits[name])
        layout.addRow("", self.is_active_checkbox)

        buttons = QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        self.button_box = QDialogButtonBox(buttons, Qt.Orientation.Horizontal, self)
        layout.addWidget(self.button_box)

        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)

    def get_data(self) -> Optional[Dict[str, Any]]:
        if not self.name_edit.text().strip():
            QMessageBox.warning(self, "Invalid input", "Employee name cannot be empty.")
            return None

        data = {
            "full_name": self.name_edit.text().strip(),
            "designation": self.designation_edit.text().strip() or None,
            "department": self.department_edit.text().strip() or None,
            "joining_date": self.joining_date_edit.date(),
            "status": EmployeeStatus.ACTIVE if self.is_active_checkbox.isChecked() else EmployeeStatus.INACTIVE,
        }
        data.update({name: edit.raw_value() for name, edit in self.salary_edits.items()})
        return data


# --- Main Employees UI Widget ---
class EmployeesUI(QWidget):
    def __init__(self, employee_manager: EmployeeManager, parent=None):
        super().__init__(parent)
        self.employee_manager = employee_manager
        self.table_model = EmployeeTableModel()
        self.show_active_employees_only = True
        self._init_ui()
        self.load_employees_data()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        self.active_filter_checkbox = QCheckBox("Show active employees only", self)
        self.active_filter_checkbox.setChecked(self.show_active_employees_only)
        self.active_filter_checkbox.stateChanged.connect(self._on_filter_changed)

        filter_layout = QHBoxLayout()
        filter_layout.addWidget(self.active_filter_checkbox)
        filter_layout.addStretch()
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
        self.add_button = QPushButton("Add employee")
        self.edit_button = QPushButton("Edit employee")
        self.toggle_activity_button = QPushButton("Toggle active/inactive")
        self.refresh_button = QPushButton("Refresh")

        self.add_button.clicked.connect(self._open_add_employee_dialog)
        self.edit_button.clicked.connect(self._open_edit_employee_dialog)
        self.toggle_activity_button.clicked.connect(self._toggle_selected_employee_activity)
        self.refresh_button.clicked.connect(self.load_employees_data)

        button_layout.addWidget(self.add_button)
        button_layout.addWidget(self.edit_button)
        button_layout.addWidget(self.toggle_activity_button)
        button_layout.addStretch()
        button_layout.addWidget(self.refresh_button)

        main_layout.addLayout(button_layout)
        logger.info("EmployeesUI initialized.")

    def _on_filter_changed(self, state: int):
        self.show_active_employees_only = self.active_filter_checkbox.isChecked()
        self.load_employees_data()

    def load_employees_data(self):
        logger.debug(f"Loading employees data... (Active only: {self.show_active_employees_only})")
        try:
            if self.show_active_employees_only:
                employees = self.employee_manager.get_active_employees()
            else:
                employees = self.employee_manager.get_all_employees()
            self.table_model.update_data(employees)
        except Exception as e:
            logger.error(f"Error loading employees: {e}", exc_info=True)
            QMessageBox.critical(self, "Load error", f"Could not load employees: {e}")

    def _open_add_employee_dialog(self):
        dialog = EmployeeDialog(parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    employee = self.employee_manager.add_employee(**data)
                    QMessageBox.information(self, "Saved", f"Employee '{employee.full_name}' added.")
                    self.load_employees_data()
                except ValueError as ve:
                    QMessageBox.warning(self, "Validation error", str(ve))
                except Exception as e:
                    logger.error(f"Error adding employee: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not add the employee: {e}")

    def _open_edit_employee_dialog(self):
        employee = self.table_model.get_employee_at_row(self.table_view.currentIndex().row())
        if not employee:
            QMessageBox.information(self, "No selection", "Please select an employee to edit.")
            return

        dialog = EmployeeDialog(employee, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    self.employee_manager.update_employee(employee.id, **data)
                    self.load_employees_data()
                except ValueError as ve:
                    QMessageBox.warning(self, "Validation error", str(ve))
                except Exception as e:
                    logger.error(f"Error editing employee ID {employee.id}: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not update the employee: {e}")

    def _toggle_selected_employee_activity(self):
        employee = self.table_model.get_employee_at_row(self.table_view.currentIndex().row())
        if not employee:
            QMessageBox.information(self, "No selection", "Please select an employee.")
            return

        new_status = EmployeeStatus.INACTIVE if employee.is_active else EmployeeStatus.ACTIVE
        reply = QMessageBox.question(self, "Confirm status change",
                                     f"Mark '{employee.full_name}' as {new_status.value}?",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply == QMessageBox.StandardButton.Yes:
            try:
                self.employee_manager.update_employee(employee.id, status=new_status)
                self.load_employees_data()
            except ValueError as ve:
                QMessageBox.warning(self, "Error", str(ve))
            except Exception as e:
                logger.error(f"Error toggling employee activity: {e}", exc_info=True)
                QMessageBox.critical(self, "Error", f"Could not change the employee status: {e}")

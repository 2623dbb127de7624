# charterdesk/presentation/yachts_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QTableView, QPushButton, QLabel,
                             QHBoxLayout, QMessageBox, QDialog, QLineEdit, QGroupBox,
                             QFormLayout, QDialogButtonBox, QAbstractItemView,
                             QTextEdit, QHeaderView, QCheckBox)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex
from PyQt5.QtGui import QColor

from typing import List, Optional, Any, Dict

from charterdesk.business_logic.entities.yacht_entity import YachtEntity
from charterdesk.business_logic.yacht_manager import YachtManager
from charterdesk.business_logic.permissions import PermissionDeniedError, can_edit_field
from charterdesk.constants import GuestCategory, GUEST_CATEGORY_LABELS
from charterdesk.presentation.custom_widgets import AmountLineEdit, format_amount
import logging

logger = logging.getLogger(__name__)


class YachtTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[YachtEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[YachtEntity] = data if data is not None else []
        self._headers = ["ID", "Name", "Capacity", "Private rate / hour", "Adult seat", "Child seat", "Active"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._data)):
            return QVariant()
        yacht = self._data[index.row()]
        col = index.column()

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return str(yacht.id)
            if col == 1: return yacht.name
            if col == 2: return str(yacht.capacity)
            if col == 3: return format_amount(yacht.private_hourly_rate)
            if col == 4: return format_amount(yacht.shared_packages.get(GuestCategory.ADULT.value))
            if col == 5: return format_amount(yacht.shared_packages.get(GuestCategory.CHILD.value))
            if col == 6: return "Yes" if yacht.is_active else "No"
        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if 2 <= col <= 5:
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
            return Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter
        elif role == Qt.ItemDataRole.ForegroundRole and not yacht.is_active:
            return QColor(Qt.GlobalColor.gray)
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[YachtEntity]):
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()

    def get_yacht_at_row(self, row: int) -> Optional[YachtEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None


class YachtDialog(QDialog):
    """Yacht details. Prices are read-only for roles that may not set them."""

    def __init__(self, user_role: Any, yacht: Optional[YachtEntity] = None, parent=None):
        super().__init__(parent)
        self.yacht = yacht
        self.can_edit_pricing = can_edit_field(user_role, "yacht", "shared_packages")
        self.setWindowTitle(f"Edit yacht: {yacht.name}" if yacht else "New yacht")
        self.setMinimumWidth(420)

        layout = QVBoxLayout(self)
        form = QFormLayout()
        self.name_edit = QLineEdit(self)
        self.capacity_edit = QLineEdit(self)
        self.description_edit = QTextEdit(self)
        self.description_edit.setFixedHeight(50)
        self.is_active_checkbox = QCheckBox("Active", self)
        self.is_active_checkbox.setChecked(True)
        form.addRow("Name:", self.name_edit)
        form.addRow("Capacity:", self.capacity_edit)
        form.addRow("Description:", self.description_edit)
        form.addRow("", self.is_active_checkbox)
        layout.addLayout(form)

        pricing_box = QGroupBox("Pricing", self)
        pricing_form = QFormLayout(pricing_box)
        self.private_rate_edit = AmountLineEdit(parent=self)
        pricing_form.addRow("Private rate / hour:", self.private_rate_edit)
        self.package_edits: Dict[GuestCategory, AmountLineEdit] = {}
        for category in GuestCategory:
            edit = AmountLineEdit(parent=self)
            self.package_edits[category] = edit
            pricing_form.addRow(f"{GUEST_CATEGORY_LABELS[category]}:", edit)
        if not self.can_edit_pricing:
            pricing_form.addRow(QLabel("Only administrators can change prices.", self))
            for edit in [self.private_rate_edit] + list(self.package_edits.values()):
                edit.setReadOnly(True)
                edit.setEnabled(False)
        layout.addWidget(pricing_box)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)
        layout.addWidget(self.button_box)

        if yacht:
            self.name_edit.setText(yacht.name)
            self.capacity_edit.setText(str(yacht.capacity))
            self.description_edit.setPlainText(yacht.description or "")
            self.is_active_checkbox.setChecked(yacht.is_active)
            self.private_rate_edit.set_value(yacht.private_hourly_rate)
            for category, edit in self.package_edits.items():
                edit.set_value(yacht.shared_packages.get(category.value))

    def get_data(self) -> Optional[Dict[str, Any]]:
        if not self.name_edit.text().strip():
            QMessageBox.warning(self, "Invalid input", "Yacht name cannot be empty.")
            return None
        data: Dict[str, Any] = {
            "name": self.name_edit.text().strip(),
            "capacity": self.capacity_edit.text(),
            "description": self.description_edit.toPlainText().strip() or None,
        }
        if self.yacht:
            data["is_active"] = self.is_active_checkbox.isChecked()
        if self.can_edit_pricing:
            data["private_hourly_rate"] = self.private_rate_edit.raw_value()
            data["shared_packages"] = {
                category.value: edit.raw_value()
                for category, edit in self.package_edits.items() if edit.raw_value().strip()
            }
        return data


class YachtsUI(QWidget):
    def __init__(self, yacht_manager: YachtManager, user_role: Any = None, parent=None):
        super().__init__(parent)
        self.yacht_manager = yacht_manager
        self.user_role = user_role
        self.table_model = YachtTableModel()
        self._init_ui()
        self.load_yachts_data()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

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
        self.add_button = QPushButton("Add yacht")
        self.edit_button = QPushButton("Edit yacht")
        self.refresh_button = QPushButton("Refresh")
        self.add_button.clicked.connect(self._open_add_dialog)
        self.edit_button.clicked.connect(self._open_edit_dialog)
        self.refresh_button.clicked.connect(self.load_yachts_data)
        button_layout.addWidget(self.add_button)
        button_layout.addWidget(self.edit_button)
        button_layout.addStretch()
        button_layout.addWidget(self.refresh_button)
        main_layout.addLayout(button_layout)
        logger.info("YachtsUI initialized.")

    def load_yachts_data(self):
        try:
            self.table_model.update_data(self.yacht_manager.get_all_yachts())
        except Exception as e:
            logger.error(f"Error loading yachts: {e}", exc_info=True)
            QMessageBox.critical(self, "Load error", f"Could not load yachts: {e}")

    def _open_add_dialog(self):
        dialog = YachtDialog(self.user_role, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    self.yacht_manager.add_yacht(role=self.user_role, **data)
                    self.load_yachts_data()
                except (ValueError, PermissionDeniedError) as ve:
                    QMessageBox.warning(self, "Not saved", str(ve))
                except Exception as e:
                    logger.error(f"Error adding yacht: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not add the yacht: {e}")

    def _open_edit_dialog(self):
        yacht = self.table_model.get_yacht_at_row(self.table_view.currentIndex().row())
        if not yacht:
            QMessageBox.information(self, "No selection", "Please select a yacht first.")
            return
        dialog = YachtDialog(self.user_role, yacht, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    self.yacht_manager.update_yacht(yacht.id, role=self.user_role, **data)
                    self.load_yachts_data()
                except (ValueError, PermissionDeniedError) as ve:
                    QMessageBox.warning(self, "Not saved", str(ve))
                except Exception as e:
                    logger.error(f"Error updating yacht ID {yacht.id}: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not update the yacht: {e}")

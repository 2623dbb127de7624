# charterdesk/presentation/bookings_ui.py

from PyQt5.QtWidgets import (QWidget, QVBoxLayout, QLabel, QTableView, QPushButton,
                             QHBoxLayout, QMessageBox, QDialog, QLineEdit, QComboBox,
                             QFormLayout, QDialogButtonBox, QAbstractItemView, QTextEdit,
                             QHeaderView, QGroupBox, QGridLayout)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex
from PyQt5.QtGui import QColor

from typing import List, Optional, Any, Dict

from charterdesk.business_logic.entities.booking_entity import BookingEntity
from charterdesk.business_logic.booking_manager import BookingManager
from charterdesk.business_logic.yacht_manager import YachtManager
from charterdesk.business_logic.agent_manager import AgentManager
from charterdesk.business_logic.calculations.derived_fields import (
    derive_shared_booking_fields, derive_private_booking_fields
)
from charterdesk.business_logic.permissions import Permission, PermissionDeniedError, has_permission
from charterdesk.constants import (
    CruiseType, BookingStatus, PaymentStatus, PaymentMethod, GuestCategory, GUEST_CATEGORY_LABELS
)
from charterdesk.presentation.custom_widgets import AmountLineEdit, DerivedValueLabel, DateEdit, format_amount
from charterdesk.utils.date_converter import to_display_str
import logging

logger = logging.getLogger(__name__)

PAYMENT_STATUS_COLORS = {
    PaymentStatus.PAID: QColor("darkGreen"),
    PaymentStatus.PARTIAL: QColor("darkOrange"),
    PaymentStatus.UNPAID: QColor("darkRed"),
}


class BookingTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[BookingEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[BookingEntity] = data if data is not None else []
        self._headers = ["Ticket", "Customer", "Travel date", "Guests", "Total", "Commission",
                         "Net", "Paid", "Balance", "Payment", "Status"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._data)):
            return QVariant()
        booking = self._data[index.row()]
        col = index.column()

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return booking.ticket_number
            if col == 1: return booking.customer_name
            if col == 2: return to_display_str(booking.travel_date)
            if col == 3: return str(booking.number_of_people)
            if col == 4: return format_amount(booking.total_amount)
            if col == 5: return format_amount(booking.commission_amount)
            if col == 6: return format_amount(booking.net_amount)
            if col == 7: return format_amount(booking.paid_amount)
            if col == 8: return format_amount(booking.balance)
            if col == 9: return booking.payment_status.value
            if col == 10: return booking.status.value
        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if 3 <= col <= 8:
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
            return Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter
        elif role == Qt.ItemDataRole.ForegroundRole and col == 9:
            return PAYMENT_STATUS_COLORS.get(booking.payment_status, QVariant())
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[BookingEntity]):
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()

    def get_booking_at_row(self, row: int) -> Optional[BookingEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None


class _BookingDialogBase(QDialog):
    """Customer, date, payment and status inputs shared by both booking dialogs."""

    def __init__(self, agent_manager: AgentManager, yacht_manager: YachtManager,
                 booking: Optional[BookingEntity] = None, parent=None):
        super().__init__(parent)
        self.agent_manager = agent_manager
        self.yacht_manager = yacht_manager
        self.booking = booking
        self.setMinimumWidth(480)

        self.main_layout = QVBoxLayout(self)
        self.form = QFormLayout()
        self.main_layout.addLayout(self.form)

        self.customer_name_edit = QLineEdit(self)
        self.customer_phone_edit = QLineEdit(self)
        self.customer_email_edit = QLineEdit(self)
        self.travel_date_edit = DateEdit(parent=self)
        self.yacht_combo = QComboBox(self)
        self.yacht_combo.addItem("-", None)
        for yacht in yacht_manager.get_all_yachts(active_only=True):
            self.yacht_combo.addItem(yacht.name, yacht.id)
        self.agent_combo = QComboBox(self)
        self.agent_combo.addItem("-", None)
        for agent in agent_manager.get_all_agents(active_only=True):
            self.agent_combo.addItem(agent.agent_name, agent.id)
        self.discount_edit = AmountLineEdit(parent=self)
        self.paid_edit = AmountLineEdit(parent=self)
        self.payment_mode_combo = QComboBox(self)
        self.payment_mode_combo.addItem("-", None)
        for method in PaymentMethod:
            self.payment_mode_combo.addItem(method.value.replace("_", " ").capitalize(), method)
        self.status_combo = QComboBox(self)
        for status in BookingStatus:
            self.status_combo.addItem(status.value.capitalize(), status)
        self.notes_edit = QTextEdit(self)
        self.notes_edit.setFixedHeight(50)

        self.form.addRow("Customer name:", self.customer_name_edit)
        self.form.addRow("Phone:", self.customer_phone_edit)
        self.form.addRow("Email:", self.customer_email_edit)
        self.form.addRow("Travel date:", self.travel_date_edit)
        self.form.addRow("Yacht:", self.yacht_combo)
        self.form.addRow("Agent:", self.agent_combo)

        self.derived_box = QGroupBox("Amounts", self)
        self.derived_form = QFormLayout(self.derived_box)
        self.status_label = QLabel(PaymentStatus.UNPAID.value, self)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)

    def _finish_layout(self):
        self.form.addRow("Paid amount:", self.paid_edit)
        self.form.addRow("Payment mode:", self.payment_mode_combo)
        self.form.addRow("Booking status:", self.status_combo)
        self.form.addRow("Notes:", self.notes_edit)
        self.derived_form.addRow("Payment status:", self.status_label)
        self.main_layout.addWidget(self.derived_box)
        self.main_layout.addWidget(self.button_box)
        self._populate_common()
        self.discount_edit.textChanged.connect(self._recalculate)
        self.paid_edit.textChanged.connect(self._recalculate)

    def _select(self, combo: QComboBox, value: Any):
        index = combo.findData(value)
        if index >= 0:
            combo.setCurrentIndex(index)

    def _populate_common(self):
        b = self.booking
        if b is None:
            return
        self.customer_name_edit.setText(b.customer_name)
        self.customer_phone_edit.setText(b.customer_phone or "")
        self.customer_email_edit.setText(b.customer_email or "")
        self.travel_date_edit.setDate(b.travel_date)
        self._select(self.yacht_combo, b.yacht_id)
        self._select(self.agent_combo, b.agent_id)
        self.discount_edit.set_value(b.discount_percentage)
        self.paid_edit.set_value(b.paid_amount)
        self._select(self.payment_mode_combo, b.payment_mode)
        self._select(self.status_combo, b.status)
        self.notes_edit.setPlainText(b.notes or "")

    def _show_status(self, status: PaymentStatus):
        self.status_label.setText(status.value)
        color = PAYMENT_STATUS_COLORS.get(status)
        self.status_label.setStyleSheet(f"font-weight: bold; color: {color.name()};" if color else "")

    def _recalculate(self):
        raise NotImplementedError

    def _common_data(self) -> Optional[Dict[str, Any]]:
        if not self.customer_name_edit.text().strip():
            QMessageBox.warning(self, "Invalid input", "Customer name cannot be empty.")
            return None
        return {
            "customer_name": self.customer_name_edit.text().strip(),
            "customer_phone": self.customer_phone_edit.text().strip() or None,
            "customer_email": self.customer_email_edit.text().strip() or None,
            "travel_date": self.travel_date_edit.date(),
            "yacht_id": self.yacht_combo.currentData(),
            "agent_id": self.agent_combo.currentData(),
            "paid_amount": self.paid_edit.raw_value(),
            "payment_mode": self.payment_mode_combo.currentData(),
            "status": self.status_combo.currentData(),
            "notes": self.notes_edit.toPlainText().strip() or None,
        }


class SharedBookingDialog(_BookingDialogBase):
    def __init__(self, agent_manager: AgentManager, yacht_manager: YachtManager,
                 booking: Optional[BookingEntity] = None, parent=None):
        super().__init__(agent_manager, yacht_manager, booking, parent)
        self.setWindowTitle(f"Edit shared booking {booking.ticket_number}" if booking else "New shared booking")

        guests_box = QGroupBox("Guests", self)
        grid = QGridLayout(guests_box)
        self.guest_edits: Dict[GuestCategory, QLineEdit] = {}
        for i, category in enumerate(GuestCategory):
            edit = QLineEdit(self)
            edit.setPlaceholderText("0")
            edit.setMaximumWidth(60)
            self.guest_edits[category] = edit
            grid.addWidget(QLabel(GUEST_CATEGORY_LABELS[category]), i // 3, (i % 3) * 2)
            grid.addWidget(edit, i // 3, (i % 3) * 2 + 1)
        self.main_layout.insertWidget(1, guests_box)

        self.form.addRow("Agent commission %:", self.discount_edit)

        self.people_label = QLabel("0", self)
        self.total_label = DerivedValueLabel(self)
        self.commission_label = DerivedValueLabel(self)
        self.net_label = DerivedValueLabel(self)
        self.balance_label = DerivedValueLabel(self)
        self.derived_form.addRow("Guests:", self.people_label)
        self.derived_form.addRow("Total:", self.total_label)
        self.derived_form.addRow("Agent commission:", self.commission_label)
        self.derived_form.addRow("Net:", self.net_label)
        self.derived_form.addRow("Balance:", self.balance_label)

        self._finish_layout()
        if booking:
            for category, edit in self.guest_edits.items():
                count = booking.guests.get(category.value)
                edit.setText(str(count) if count else "")
        for edit in self.guest_edits.values():
            edit.textChanged.connect(self._recalculate)
        self.yacht_combo.currentIndexChanged.connect(self._recalculate)
        self.agent_combo.currentIndexChanged.connect(self._on_agent_changed)
        self._recalculate()

    def _guest_counts(self) -> Dict[str, str]:
        return {category.value: edit.text() for category, edit in self.guest_edits.items()}

    def _on_agent_changed(self):
        agent_id = self.agent_combo.currentData()
        agent = self.agent_manager.get_agent_by_id(agent_id) if agent_id else None
        if agent and not self.discount_edit.raw_value().strip():
            self.discount_edit.set_value(agent.commission_percentage)

    def _recalculate(self):
        derived = derive_shared_booking_fields(
            self._guest_counts(),
            self.yacht_manager.get_unit_prices(self.yacht_combo.currentData()),
            self.discount_edit.raw_value(),
            self.paid_edit.raw_value()
        )
        self.people_label.setText(str(derived["number_of_people"]))
        self.total_label.set_amount(derived["total_amount"])
        self.commission_label.set_amount(derived["commission_amount"])
        self.net_label.set_amount(derived["net_amount"])
        self.balance_label.set_amount(derived["balance"])
        self._show_status(derived["payment_status"])

    def get_data(self) -> Optional[Dict[str, Any]]:
        data = self._common_data()
        if data is None:
            return None
        if not data["yacht_id"]:
            QMessageBox.warning(self, "Invalid input", "Please choose the yacht of this shared cruise.")
            return None
        data["guests"] = self._guest_counts()
        data["discount_percentage"] = self.discount_edit.raw_value()
        return data


class PrivateBookingDialog(_BookingDialogBase):
    def __init__(self, agent_manager: AgentManager, yacht_manager: YachtManager,
                 booking: Optional[BookingEntity] = None, parent=None):
        super().__init__(agent_manager, yacht_manager, booking, parent)
        self.setWindowTitle(f"Edit private booking {booking.ticket_number}" if booking else "New private booking")

        self.people_edit = QLineEdit(self)
        self.total_edit = AmountLineEdit(parent=self)
        self.other_charges_edit = AmountLineEdit(parent=self)
        self.upgrade_cost_edit = AmountLineEdit(parent=self)
        self.form.addRow("Number of guests:", self.people_edit)
        self.form.addRow("Total amount:", self.total_edit)
        self.form.addRow("Discount %:", self.discount_edit)
        self.form.addRow("Other charges:", self.other_charges_edit)
        self.form.addRow("Upgrade cost:", self.upgrade_cost_edit)

        self.net_label = DerivedValueLabel(self)
        self.balance_label = DerivedValueLabel(self)
        self.derived_form.addRow("Net:", self.net_label)
        self.derived_form.addRow("Balance:", self.balance_label)

        self._finish_layout()
        if booking:
            self.people_edit.setText(str(booking.number_of_people))
            self.total_edit.set_value(booking.total_amount)
            self.other_charges_edit.set_value(booking.other_charges)
            self.upgrade_cost_edit.set_value(booking.upgrade_cost)
        self.total_edit.textChanged.connect(self._recalculate)
        self._recalculate()

    def _recalculate(self):
        derived = derive_private_booking_fields({
            "total_amount": self.total_edit.raw_value(),
            "discount_percentage": self.discount_edit.raw_value(),
            "paid_amount": self.paid_edit.raw_value(),
        })
        self.net_label.set_amount(derived["net_amount"])
        self.balance_label.set_amount(derived["balance"])
        self._show_status(derived["payment_status"])

    def get_data(self) -> Optional[Dict[str, Any]]:
        data = self._common_data()
        if data is None:
            return None
        data.update({
            "number_of_people": self.people_edit.text(),
            "total_amount": self.total_edit.raw_value(),
            "discount_percentage": self.discount_edit.raw_value(),
            "other_charges": self.other_charges_edit.raw_value(),
            "upgrade_cost": self.upgrade_cost_edit.raw_value(),
        })
        return data


class BookingsUI(QWidget):
    """Bookings tab for one cruise type."""

    def __init__(self,
                 booking_manager: BookingManager,
                 yacht_manager: YachtManager,
                 agent_manager: AgentManager,
                 cruise_type: CruiseType,
                 user_role: Any = None,
                 parent=None):
        super().__init__(parent)
        self.booking_manager = booking_manager
        self.yacht_manager = yacht_manager
        self.agent_manager = agent_manager
        self.cruise_type = cruise_type
        self.user_role = user_role
        self.table_model = BookingTableModel()
        self._init_ui()
        self.load_bookings_data()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        self.totals_label = QLabel(self)
        main_layout.addWidget(self.totals_label)

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
        self.add_button = QPushButton(f"New {self.cruise_type.value} booking")
        self.edit_button = QPushButton("Edit")
        self.delete_button = QPushButton("Delete")
        self.delete_button.setEnabled(has_permission(self.user_role, Permission.DELETE_BOOKINGS))
        self.refresh_button = QPushButton("Refresh")

        self.add_button.clicked.connect(self._open_add_dialog)
        self.edit_button.clicked.connect(self._open_edit_dialog)
        self.delete_button.clicked.connect(self._delete_selected)
        self.refresh_button.clicked.connect(self.load_bookings_data)

        button_layout.addWidget(self.add_button)
        button_layout.addWidget(self.edit_button)
        button_layout.addWidget(self.delete_button)
        button_layout.addStretch()
        button_layout.addWidget(self.refresh_button)
        main_layout.addLayout(button_layout)
        logger.info(f"BookingsUI ({self.cruise_type.value}) initialized.")

    def load_bookings_data(self):
        try:
            self.table_model.update_data(self.booking_manager.get_bookings(self.cruise_type))
            totals = self.booking_manager.get_booking_totals(self.cruise_type)
            self.totals_label.setText(
                f"Bookings: {totals['count']}  Guests: {totals['guests']}  "
                f"Net: {format_amount(totals['net_amount'])}  Outstanding: {format_amount(totals['outstanding'])}"
            )
        except Exception as e:
            logger.error(f"Error loading {self.cruise_type.value} bookings: {e}", exc_info=True)
            QMessageBox.critical(self, "Load error", f"Could not load bookings: {e}")

    def _dialog(self, booking: Optional[BookingEntity] = None) -> _BookingDialogBase:
        dialog_class = SharedBookingDialog if self.cruise_type == CruiseType.SHARED else PrivateBookingDialog
        return dialog_class(self.agent_manager, self.yacht_manager, booking, parent=self)

    def _open_add_dialog(self):
        dialog = self._dialog()
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    if self.cruise_type == CruiseType.SHARED:
                        data["agent_discount_percentage"] = data.pop("discount_percentage")
                        booking = self.booking_manager.create_shared_booking(**data)
                    else:
                        booking = self.booking_manager.create_private_booking(**data)
                    QMessageBox.information(self, "Saved", f"Booking {booking.ticket_number} created.")
                    self.load_bookings_data()
                except ValueError as ve:
                    QMessageBox.warning(self, "Validation error", str(ve))
                except Exception as e:
                    logger.error(f"Error creating booking: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not create the booking: {e}")

    def _open_edit_dialog(self):
        booking = self.table_model.get_booking_at_row(self.table_view.currentIndex().row())
        if not booking:
            QMessageBox.information(self, "No selection", "Please select a booking first.")
            return
        dialog = self._dialog(booking)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            data = dialog.get_data()
            if data:
                try:
                    self.booking_manager.update_booking(booking.id, **data)
                    self.load_bookings_data()
                except ValueError as ve:
                    QMessageBox.warning(self, "Validation error", str(ve))
                except Exception as e:
                    logger.error(f"Error updating booking ID {booking.id}: {e}", exc_info=True)
                    QMessageBox.critical(self, "Error", f"Could not update the booking: {e}")

    def _delete_selected(self):
        booking = self.table_model.get_booking_at_row(self.table_view.currentIndex().row())
        if not booking:
            QMessageBox.information(self, "No selection", "Please select a booking first.")
            return
        reply = QMessageBox.question(self, "Confirm delete", f"Delete booking {booking.ticket_number}?",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply == QMessageBox.StandardButton.Yes:
            try:
                self.booking_manager.delete_booking(booking.id, self.user_role)
                self.load_bookings_data()
            except (ValueError, PermissionDeniedError) as ve:
                QMessageBox.warning(self, "Not deleted", str(ve))
            except Exception as e:
                logger.error(f"Error deleting booking ID {booking.id}: {e}", exc_info=True)
                QMessageBox.critical(self, "Error", f"Could not delete the booking: {e}")

# charterdesk/presentation/invoices_ui.py

from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QTableView, QPushButton, QHBoxLayout,
    QMessageBox, QDialog, QLineEdit, QComboBox, QFormLayout,
    QDialogButtonBox, QAbstractItemView, QTextEdit, QHeaderView
)
from PyQt5.QtCore import Qt, QAbstractTableModel, QVariant, QModelIndex
from PyQt5.QtGui import QColor
from typing import List, Optional, Any, Dict
from datetime import date
import logging

from charterdesk.business_logic.entities.invoice_entity import InvoiceEntity
from charterdesk.business_logic.invoice_manager import InvoiceManager
from charterdesk.business_logic.booking_manager import BookingManager
from charterdesk.business_logic.calculations.derived_fields import derive_invoice_fields
from charterdesk.constants import InvoiceStatus, PaymentMethod
from charterdesk.presentation.custom_widgets import AmountLineEdit, DerivedValueLabel, DateEdit, format_amount
from charterdesk.utils.date_converter import to_display_str

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    InvoiceStatus.PAID: QColor("darkGreen"),
    InvoiceStatus.PARTIAL: QColor("darkOrange"),
    InvoiceStatus.UNPAID: QColor("darkRed"),
    InvoiceStatus.CANCELLED: QColor(Qt.GlobalColor.gray),
}


class InvoiceTableModel(QAbstractTableModel):
    def __init__(self, data: Optional[List[InvoiceEntity]] = None, parent=None):
        super().__init__(parent)
        self._data: List[InvoiceEntity] = data if data is not None else []
        self._headers = ["Number", "Date", "Customer", "Amount", "Tax", "Discount", "Final", "Due", "Status"]

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return len(self._headers)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid() or not (0 <= index.row() < len(self._data)):
            return QVariant()
        invoice = self._data[index.row()]
        col = index.column()

        if role == Qt.ItemDataRole.DisplayRole:
            if col == 0: return invoice.invoice_number
            if col == 1: return to_display_str(invoice.invoice_date)
            if col == 2: return invoice.customer_name or ""
            if col == 3: return format_amount(invoice.amount)
            if col == 4: return format_amount(invoice.tax_amount)
            if col == 5: return format_amount(invoice.discount_amount)
            if col == 6: return format_amount(invoice.final_amount)
            if col == 7: return to_display_str(invoice.due_date)
            if col == 8: return invoice.status.value.capitalize()
        elif role == Qt.ItemDataRole.TextAlignmentRole:
            if 3 <= col <= 6:
                return Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
            return Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter
        elif role == Qt.ItemDataRole.ForegroundRole:
            if col == 8:
                return STATUS_COLORS.get(invoice.status, QVariant())
            if invoice.due_date and invoice.due_date < date.today() and invoice.status == InvoiceStatus.UNPAID:
                return QColor("darkRed")
        return QVariant()

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            if 0 <= section < len(self._headers):
                return self._headers[section]
        return QVariant()

    def update_data(self, new_data: List[InvoiceEntity]):
        self.beginResetModel()
        self._data = new_data
        self.endResetModel()

    def get_invoice_at_row(self, row: int) -> Optional[InvoiceEntity]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None


class InvoiceDialog(QDialog):
    def __init__(self, booking_manager: Optional[BookingManager] = None,
                 invoice: Optional[InvoiceEntity] = None, parent=None):
        super().__init__(parent)
        self.booking_manager = booking_manager
        self.invoice = invoice
        self.setWindowTitle(f"Edit invoice {invoice.invoice_number}" if invoice else "New invoice")
        self.setMinimumWidth(420)

        layout = QFormLayout(self)

        self.booking_combo = QComboBox(self)
        self.booking_combo.addItem("-", None)
        if booking_manager is not None:
            for booking in booking_manager.get_bookings():
                self.booking_combo.addItem(f"{booking.ticket_number} - {booking.customer_name}", booking.id)
        self.customer_name_edit = QLineEdit(self)
        self.invoice_date_edit = DateEdit(initial_date=date.today(), allow_empty=False, parent=self)
        self.due_date_edit = DateEdit(parent=self)
        self.amount_edit = AmountLineEdit(parent=self)
        self.tax_edit = AmountLineEdit(parent=self)
        self.discount_edit = AmountLineEdit(parent=self)
        self.final_label = DerivedValueLabel(self)
        self.status_combo = QComboBox(self)
        for status in InvoiceStatus:
            self.status_combo.addItem(status.value.capitalize(), status)
        self.payment_method_combo = QComboBox(self)
        self.payment_method_combo.addItem("-", None)
        for method in PaymentMethod:
            self.payment_method_combo.addItem(method.value.replace("_", " ").capitalize(), method)
        self.notes_edit = QTextEdit(self)
        self.notes_edit.setFixedHeight(50)

        layout.addRow("Booking:", self.booking_combo)
        layout.addRow("Customer:", self.customer_name_edit)
        layout.addRow("Invoice date:", self.invoice_date_edit)
        layout.addRow("Due date:", self.due_date_edit)
        layout.addRow("Amount:", self.amount_edit)
        layout.addRow("Tax:", self.tax_edit)
        layout.addRow("Discount:", self.discount_edit)
        layout.addRow("Final amount:", self.final_label)
        layout.addRow("Status:", self.status_combo)
        layout.addRow("Payment method:", self.payment_method_combo)
        layout.addRow("Notes:", self.notes_edit)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel,
                                           Qt.Orientation.Horizontal, self)
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)
        layout.addRow(self.button_box)

        if invoice:
            self._populate(invoice)
        for edit in (self.amount_edit, self.tax_edit, self.discount_edit):
            edit.textChanged.connect(self._recalculate)
        self.booking_combo.currentIndexChanged.connect(self._on_booking_changed)
        self._recalculate()

    def _populate(self, invoice: InvoiceEntity):
        index = self.booking_combo.findData(invoice.booking_id)
        if index >= 0:
            self.booking_combo.setCurrentIndex(index)
        self.booking_combo.setEnabled(False)
        self.customer_name_edit.setText(invoice.customer_name or "")
        self.invoice_date_edit.setDate(invoice.invoice_date)
        self.due_date_edit.setDate(invoice.due_date)
        self.amount_edit.set_value(invoice.amount)
        self.tax_edit.set_value(invoice.tax_amount)
        self.discount_edit.set_value(invoice.discount_amount)
        self.status_combo.setCurrentIndex(max(self.status_combo.findData(invoice.status), 0))
        self.payment_method_combo.setCurrentIndex(max(self.payment_method_combo.findData(invoice.payment_method), 0))
        self.notes_edit.setPlainText(invoice.notes or "")

    def _on_booking_changed(self):
        booking_id = self.booking_combo.currentData()
        if booking_id is None or self.booking_manager is None:
            return
        booking = self.booking_manager.get_booking_by_id(booking_id)
        if booking:
            self.customer_name_edit.setText(booking.customer_name)
            self.amount_edit.set_value(booking.total_amount)

    def _recalculate(self):
        derived = derive_invoice_fields({
            "amount": self.amount_edit.raw_value(),
            "tax_amount": self.tax_edit.raw_value(),
            "discount_amount": self.discount_edit.raw_value(),
        })
        self.final_label.set_amount(derived["final_amount"])

    def get_data(self) -> Dict[str, Any]:
        data = {
            "invoice_date": self.invoice_date_edit.date(),
            "due_date": self.due_date_edit.date(),
            "customer_name": self.customer_name_edit.text().strip() or None,
            "amount": self.amount_edit.raw_value(),
            "tax_amount": self.tax_edit.raw_value(),
            "discount_amount": self.discount_edit.raw_value(),
            "status": self.status_combo.currentData(),
            "payment_method": self.payment_method_combo.currentData(),
            "notes": self.notes_edit.toPlainText().strip() or None,
        }
        if not self.invoice:
            data["booking_id"] = self.booking_combo.currentData()
        return data


class InvoicesUI(QWidget):
    def __init__(self, invoice_manager: InvoiceManager,
                 booking_manager: Optional[BookingManager] = None, parent=None):
        super().__init__(parent)
        self.invoice_manager = invoice_manager
        self.booking_manager = booking_manager
        self.table_model = InvoiceTableModel()
        self._init_ui()
        self.load_invoices_data()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        self.totals_label = QLabel(self)
        main_layout.addWidget(self.totals_label)

        self.table_view = QTableView()
        self.table_view.setModel(self.table_model)
        self.table_view.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table_view.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table_view.doubleClicked.connect(self._open_edit_dialog)
        header = self.table_view.horizontalHeader()
        if header:
            header.setSectionResizeMode(QHeaderView.ResizeMode.ResizeToContents)
            header.setSectionResizeMode(2, QHeaderView.ResizeMode.Stretch)
        main_layout.addWidget(self.table_view)

        button_layout = QHBoxLayout()
        self.add_button = QPushButton("New invoice")
        self.edit_button = QPushButton("Edit")
        self.pay_button = QPushButton("Mark as paid")
        self.delete_button = QPushButton("Delete")
        self.refresh_button = QPushButton("Refresh")

        self.add_button.clicked.connect(self._open_add_dialog)
        self.edit_button.clicked.connect(self._open_edit_dialog)
        self.pay_button.clicked.connect(self._mark_paid)
        self.delete_button.clicked.connect(self._delete_selected)
        self.refresh_button.clicked.connect(self.load_invoices_data)

        button_layout.addWidget(self.add_button)
        button_layout.addWidget(self.edit_button)
        button_layout.addWidget(self.pay_button)
        button_layout.addWidget(self.delete_button)
        button_layout.addStretch()
        button_layout.addWidget(self.refresh_button)
        main_layout.addLayout(button_layout)
        logger.info("InvoicesUI initialized.")

    def load_invoices_data(self):
        try:
            self.table_model.update_data(self.invoice_manager.get_all_invoices())
            totals = self.invoice_manager.get_invoice_totals()
            self.totals_label.setText(f"Invoices: {totals['count']}  Paid: {format_amount(totals['paid'])}  "
                                      f"Unpaid: {format_amount(totals['unpaid'])}")
        except Exception as e:
            logger.error(f"Error loading invoices: {e}", exc_info=True)
            QMessageBox.critical(self, "Load error", f"Could not load invoices: {e}")

    def _selected(self) -> Optional[InvoiceEntity]:
        invoice = self.table_model.get_invoice_at_row(self.table_view.currentIndex().row())
        if not invoice:
            QMessageBox.information(self, "No selection", "Please select an invoice first.")
        return invoice

    def _open_add_dialog(self):
        dialog = InvoiceDialog(self.booking_manager, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            try:
                invoice = self.invoice_manager.create_invoice(**dialog.get_data())
                QMessageBox.information(self, "Saved", f"Invoice {invoice.invoice_number} created.")
                self.load_invoices_data()
            except ValueError as ve:
                QMessageBox.warning(self, "Validation error", str(ve))
            except Exception as e:
                logger.error(f"Error creating invoice: {e}", exc_info=True)
                QMessageBox.critical(self, "Error", f"Could not create the invoice: {e}")

    def _open_edit_dialog(self):
        invoice = self._selected()
        if not invoice:
            return
        dialog = InvoiceDialog(self.booking_manager, invoice, parent=self)
        if dialog.exec_() == QDialog.DialogCode.Accepted:
            try:
                self.invoice_manager.update_invoice(invoice.id, **dialog.get_data())
                self.load_invoices_data()
            except ValueError as ve:
                QMessageBox.warning(self, "Validation error", str(ve))
            except Exception as e:
                logger.error(f"Error updating invoice ID {invoice.id}: {e}", exc_info=True)
                QMessageBox.critical(self, "Error", f"Could not update the invoice: {e}")

    def _mark_paid(self):
        invoice = self._selected()
        if not invoice:
            return
        try:
            self.invoice_manager.mark_as_paid(invoice.id)
            self.load_invoices_data()
        except ValueError as ve:
            QMessageBox.warning(self, "Not changed", str(ve))
        except Exception as e:
            logger.error(f"Error paying invoice ID {invoice.id}: {e}", exc_info=True)
            QMessageBox.critical(self, "Error", f"Could not mark the invoice as paid: {e}")

    def _delete_selected(self):
        invoice = self._selected()
        if not invoice:
            return
        reply = QMessageBox.question(self, "Confirm delete", f"Delete invoice {invoice.invoice_number}?",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply == QMessageBox.StandardButton.Yes:
            try:
                self.invoice_manager.delete_invoice(invoice.id)
                self.load_invoices_data()
            except ValueError as ve:
                QMessageBox.warning(self, "Not deleted", str(ve))
            except Exception as e:
                logger.error(f"Error deleting invoice ID {invoice.id}: {e}", exc_info=True)
                QMessageBox.critical(self, "Error", f"Could not delete the invoice: {e}")

# charterdesk/business_logic/invoice_manager.py

from typing import Optional, List, Dict, Any
from datetime import date
import time
import logging

from charterdesk.business_logic.entities.invoice_entity import InvoiceEntity
from charterdesk.data_access.invoices_repository import InvoicesRepository
from charterdesk.business_logic.booking_manager import BookingManager
from charterdesk.business_logic.calculations.money import Money
from charterdesk.business_logic.calculations.derived_fields import derive_invoice_fields
from charterdesk.constants import InvoiceStatus, PaymentMethod

logger = logging.getLogger(__name__)

_AMOUNT_FIELDS = ("amount", "tax_amount", "discount_amount")


class InvoiceManager:
    def __init__(self,
                 invoices_repository: InvoicesRepository,
                 booking_manager: Optional[BookingManager] = None):
        if invoices_repository is None: raise ValueError("invoices_repository cannot be None")
        self.invoices_repository = invoices_repository
        self.booking_manager = booking_manager

    def generate_invoice_number(self) -> str:
        stamp = int(time.time() * 1000)
        invoice_number = f"INV{stamp}"
        while self.invoices_repository.get_by_invoice_number(invoice_number):
            stamp += 1
            invoice_number = f"INV{stamp}"
        return invoice_number

    def create_invoice(self,
                       invoice_date: Optional[date] = None,
                       booking_id: Optional[int] = None,
                       customer_name: Optional[str] = None,
                       amount: Any = None,
                       tax_amount: Any = None,
                       discount_amount: Any = None,
                       due_date: Optional[date] = None,
                       status: InvoiceStatus = InvoiceStatus.UNPAID,
                       payment_method: Optional[PaymentMethod] = None,
                       notes: Optional[str] = None) -> InvoiceEntity:
        """
        Issues an invoice. When it is linked to a booking, a blank amount and
        customer name are taken from that booking.
        """
        invoice_date = invoice_date or date.today()
        if due_date and due_date < invoice_date:
            raise ValueError("Due date cannot be before the invoice date.")

        if booking_id is not None:
            if self.booking_manager is None:
                raise ValueError("Invoices linked to bookings need a booking manager.")
            booking = self.booking_manager.get_booking_by_id(booking_id)
            if not booking:
                raise ValueError(f"Booking with ID {booking_id} not found.")
            if amount in (None, ""):
                amount = booking.total_amount
            if not customer_name:
                customer_name = booking.customer_name

        invoice = InvoiceEntity(
            invoice_number=self.generate_invoice_number(),
            invoice_date=invoice_date,
            booking_id=booking_id,
            customer_name=customer_name,
            due_date=due_date,
            amount=Money.of(amount).as_decimal(),
            tax_amount=Money.of(tax_amount).as_decimal(),
            discount_amount=Money.of(discount_amount).as_decimal(),
            status=status,
            payment_method=payment_method,
            notes=notes
        )
        invoice.final_amount = derive_invoice_fields(
            {name: getattr(invoice, name) for name in _AMOUNT_FIELDS})["final_amount"]

        try:
            created = self.invoices_repository.add(invoice)
            if created is None:
                raise ValueError(f"Invoice {invoice.invoice_number} could not be saved.")
            logger.info(f"Invoice {created.invoice_number} (ID: {created.id}) created. Final amount: {created.final_amount}")
            return created
        except Exception as e:
            logger.error(f"Error creating invoice {invoice.invoice_number}: {e}", exc_info=True)
            raise

    def update_invoice(self, invoice_id: int, **kwargs) -> InvoiceEntity:
        invoice = self.invoices_repository.get_by_id(invoice_id)
        if not invoice:
            raise ValueError(f"Invoice with ID {invoice_id} not found.")

        for name in _AMOUNT_FIELDS:
            if name in kwargs:
                setattr(invoice, name, Money.of(kwargs[name]).as_decimal())
        for name in ("invoice_date", "due_date", "customer_name", "status", "payment_method", "notes"):
            if name in kwargs:
                setattr(invoice, name, kwargs[name])
        if invoice.due_date and invoice.due_date < invoice.invoice_date:
            raise ValueError("Due date cannot be before the invoice date.")

        invoice.final_amount = derive_invoice_fields(
            {name: getattr(invoice, name) for name in _AMOUNT_FIELDS})["final_amount"]
        updated = self.invoices_repository.update(invoice)
        if updated is None:
            raise ValueError(f"Invoice with ID {invoice_id} could not be updated.")
        logger.info(f"Invoice {updated.invoice_number} updated. Final amount: {updated.final_amount}")
        return updated

    def mark_as_paid(self, invoice_id: int, payment_method: Optional[PaymentMethod] = None) -> InvoiceEntity:
        invoice = self.invoices_repository.get_by_id(invoice_id)
        if not invoice:
            raise ValueError(f"Invoice with ID {invoice_id} not found.")
        if invoice.status == InvoiceStatus.CANCELLED:
            raise ValueError(f"Invoice {invoice.invoice_number} is cancelled and cannot be paid.")
        if invoice.status == InvoiceStatus.PAID:
            logger.warning(f"Invoice {invoice.invoice_number} is already paid.")
            return invoice

        invoice.status = InvoiceStatus.PAID
        if payment_method is not None:
            invoice.payment_method = payment_method
        updated = self.invoices_repository.update(invoice)
        if updated is None:
            raise ValueError(f"Invoice with ID {invoice_id} could not be marked as paid.")
        logger.info(f"Invoice {updated.invoice_number} marked as paid.")
        return updated

    def get_invoice_by_id(self, invoice_id: int) -> Optional[InvoiceEntity]:
        return self.invoices_repository.get_by_id(invoice_id)

    def get_invoice_by_number(self, invoice_number: str) -> Optional[InvoiceEntity]:
        return self.invoices_repository.get_by_invoice_number(invoice_number)

    def get_all_invoices(self) -> List[InvoiceEntity]:
        return self.invoices_repository.get_all(order_by="invoice_date DESC, id DESC")

    def get_invoices_for_booking(self, booking_id: int) -> List[InvoiceEntity]:
        return self.invoices_repository.get_by_booking_id(booking_id)

    def delete_invoice(self, invoice_id: int) -> bool:
        invoice = self.invoices_repository.get_by_id(invoice_id)
        if not invoice:
            raise ValueError(f"Invoice with ID {invoice_id} not found.")
        if invoice.status == InvoiceStatus.PAID:
            raise ValueError(f"Invoice {invoice.invoice_number} is paid and cannot be deleted.")
        return self.invoices_repository.delete(invoice_id)

    def get_invoice_totals(self) -> Dict[str, Any]:
        invoices = self.invoices_repository.get_all()
        return {
            "count": len(invoices),
            "paid": Money.total(i.final_amount for i in invoices if i.status == InvoiceStatus.PAID).as_decimal(),
            "unpaid": Money.total(i.final_amount for i in invoices if i.status == InvoiceStatus.UNPAID).as_decimal(),
        }

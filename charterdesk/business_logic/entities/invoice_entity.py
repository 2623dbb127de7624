# charterdesk/business_logic/entities/invoice_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity
from charterdesk.constants import InvoiceStatus, PaymentMethod

@dataclass
class InvoiceEntity(BaseEntity):
    invoice_number: str
    invoice_date: date
    booking_id: Optional[int] = field(default=None) # Foreign Key to BookingEntity
    customer_name: Optional[str] = field(default=None)
    due_date: Optional[date] = field(default=None)
    amount: Decimal = field(default_factory=lambda: Decimal("0.00"))
    tax_amount: Decimal = field(default_factory=lambda: Decimal("0.00"))
    discount_amount: Decimal = field(default_factory=lambda: Decimal("0.00"))
    final_amount: Decimal = field(default_factory=lambda: Decimal("0.00")) # amount + tax - discount
    status: InvoiceStatus = field(default=InvoiceStatus.UNPAID)
    payment_method: Optional[PaymentMethod] = field(default=None)
    notes: Optional[str] = field(default=None)

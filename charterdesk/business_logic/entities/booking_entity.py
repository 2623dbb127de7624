# charterdesk/business_logic/entities/booking_entity.py
from dataclasses import dataclass, field
from typing import Optional, Dict
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity
from charterdesk.constants import CruiseType, BookingStatus, PaymentStatus, PaymentMethod

def _zero() -> Decimal:
    return Decimal("0.00")

@dataclass
class BookingEntity(BaseEntity):
    ticket_number: str
    cruise_type: CruiseType
    yacht_id: Optional[int] = field(default=None)
    agent_id: Optional[int] = field(default=None)
    customer_name: str = field(default="")
    customer_phone: Optional[str] = field(default=None)
    customer_email: Optional[str] = field(default=None)
    travel_date: Optional[date] = field(default=None)
    booking_date: Optional[date] = field(default=None)

    # Shared cruises only: head count per GuestCategory value
    guests: Dict[str, int] = field(default_factory=dict)
    number_of_people: int = field(default=0)
    free_tickets: int = field(default=0)

    total_amount: Decimal = field(default_factory=_zero)
    discount_percentage: Decimal = field(default_factory=_zero) # agent commission % on shared cruises
    commission_amount: Decimal = field(default_factory=_zero)
    net_amount: Decimal = field(default_factory=_zero)
    paid_amount: Decimal = field(default_factory=_zero)
    balance: Decimal = field(default_factory=_zero)
    other_charges: Decimal = field(default_factory=_zero)
    upgrade_cost: Decimal = field(default_factory=_zero)

    status: BookingStatus = field(default=BookingStatus.CONFIRMED)
    payment_status: PaymentStatus = field(default=PaymentStatus.UNPAID)
    payment_mode: Optional[PaymentMethod] = field(default=None)
    notes: Optional[str] = field(default=None)

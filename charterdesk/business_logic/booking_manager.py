# charterdesk/business_logic/booking_manager.py

from typing import Optional, List, Dict, Any, Mapping
from datetime import date
import time
import logging

from charterdesk.business_logic.entities.booking_entity import BookingEntity
from charterdesk.data_access.bookings_repository import BookingsRepository
from charterdesk.business_logic.yacht_manager import YachtManager
from charterdesk.business_logic.agent_manager import AgentManager
from charterdesk.business_logic.calculations.money import Money, to_decimal, to_int
from charterdesk.business_logic.calculations.guest_pricing_calculator import normalize_guest_counts
from charterdesk.business_logic.calculations.derived_fields import (
    derive_shared_booking_fields, derive_private_booking_fields, derive_payment_status
)
from charterdesk.business_logic.permissions import Permission, require_permission
from charterdesk.constants import CruiseType, BookingStatus, PaymentMethod

logger = logging.getLogger(__name__)

_MONEY_FIELDS = ("total_amount", "paid_amount", "other_charges", "upgrade_cost")
_TEXT_FIELDS = ("customer_name", "customer_phone", "customer_email", "notes")
# changing any of these re-derives commission, net and balance
_PRICING_FIELDS = ("total_amount", "discount_percentage", "guests", "yacht_id")


class BookingManager:
    def __init__(self,
                 bookings_repository: BookingsRepository,
                 yacht_manager: YachtManager,
                 agent_manager: Optional[AgentManager] = None):
        if bookings_repository is None: raise ValueError("bookings_repository cannot be None")
        if yacht_manager is None: raise ValueError("yacht_manager cannot be None")

        self.bookings_repository = bookings_repository
        self.yacht_manager = yacht_manager
        self.agent_manager = agent_manager

    def generate_ticket_number(self) -> str:
        stamp = int(time.time() * 1000)
        ticket_number = f"TKT-{stamp}"
        while self.bookings_repository.get_by_ticket_number(ticket_number):
            stamp += 1
            ticket_number = f"TKT-{stamp}"
        return ticket_number

    def _agent_commission(self, agent_id: Optional[int]) -> Any:
        if not agent_id or self.agent_manager is None:
            return None
        agent = self.agent_manager.get_agent_by_id(agent_id)
        return agent.commission_percentage if agent else None

    def apply_derived_fields(self, booking: BookingEntity, reprice: bool = True) -> BookingEntity:
        """
        Recomputes the money fields of a booking from its entered values.
        A shared booking is priced from its guests and the yacht's seat prices
        only when reprice is set; otherwise its stored total is kept.
        """
        if booking.cruise_type == CruiseType.SHARED and reprice:
            derived = derive_shared_booking_fields(
                booking.guests,
                self.yacht_manager.get_unit_prices(booking.yacht_id),
                booking.discount_percentage,
                booking.paid_amount
            )
            booking.number_of_people = derived["number_of_people"]
            booking.total_amount = derived["total_amount"]
            booking.commission_amount = derived["commission_amount"]
        else:
            derived = derive_private_booking_fields({
                "total_amount": booking.total_amount,
                "discount_percentage": booking.discount_percentage,
                "paid_amount": booking.paid_amount,
            })
            if booking.cruise_type == CruiseType.SHARED:
                booking.commission_amount = (Money.of(booking.total_amount) - derived["net_amount"]).as_decimal()
        booking.net_amount = derived["net_amount"]
        booking.balance = derived["balance"]
        booking.payment_status = derived["payment_status"]
        return booking

    def create_booking(self, booking: BookingEntity, derive: bool = True) -> BookingEntity:
        """
        Persists a booking. With derive=False the money fields are stored as given,
        which is how a won opportunity carries its quoted figures over.
        """
        if not booking.ticket_number:
            booking.ticket_number = self.generate_ticket_number()
        if booking.booking_date is None:
            booking.booking_date = date.today()
        if derive:
            self.apply_derived_fields(booking)

        try:
            created = self.bookings_repository.add(booking)
            if created is None:
                raise ValueError(f"Booking {booking.ticket_number} could not be saved.")
            logger.info(f"{created.cruise_type.value.capitalize()} booking {created.ticket_number} created with ID {created.id}. "
                        f"Net: {created.net_amount}, balance: {created.balance}, status: {created.payment_status.value}.")
            return created
        except Exception as e:
            logger.error(f"Error creating booking {booking.ticket_number}: {e}", exc_info=True)
            raise

    def create_shared_booking(self,
                              yacht_id: int,
                              guests: Mapping,
                              customer_name: str,
                              travel_date: Optional[date] = None,
                              agent_id: Optional[int] = None,
                              agent_discount_percentage: Any = None,
                              paid_amount: Any = None,
                              customer_phone: Optional[str] = None,
                              customer_email: Optional[str] = None,
                              free_tickets: Any = 0,
                              payment_mode: Optional[PaymentMethod] = None,
                              status: BookingStatus = BookingStatus.CONFIRMED,
                              notes: Optional[str] = None) -> BookingEntity:
        if not yacht_id:
            raise ValueError("A shared booking needs a yacht.")
        if not customer_name or not customer_name.strip():
            raise ValueError("Customer name cannot be empty.")
        if agent_discount_percentage in (None, ""):
            agent_discount_percentage = self._agent_commission(agent_id)

        booking = BookingEntity(
            ticket_number="",
            cruise_type=CruiseType.SHARED,
            yacht_id=yacht_id,
            agent_id=agent_id,
            customer_name=customer_name.strip(),
            customer_phone=customer_phone,
            customer_email=customer_email,
            travel_date=travel_date,
            guests={k: v for k, v in normalize_guest_counts(guests).items() if v},
            free_tickets=to_int(free_tickets),
            discount_percentage=to_decimal(agent_discount_percentage),
            paid_amount=Money.of(paid_amount).as_decimal(),
            status=status,
            payment_mode=payment_mode,
            notes=notes
        )
        return self.create_booking(booking)

    def create_private_booking(self,
                               customer_name: str,
                               total_amount: Any,
                               discount_percentage: Any = None,
                               paid_amount: Any = None,
                               yacht_id: Optional[int] = None,
                               agent_id: Optional[int] = None,
                               travel_date: Optional[date] = None,
                               number_of_people: Any = 0,
                               customer_phone: Optional[str] = None,
                               customer_email: Optional[str] = None,
                               other_charges: Any = None,
                               upgrade_cost: Any = None,
                               payment_mode: Optional[PaymentMethod] = None,
                               status: BookingStatus = BookingStatus.CONFIRMED,
                               notes: Optional[str] = None) -> BookingEntity:
        if not customer_name or not customer_name.strip():
            raise ValueError("Customer name cannot be empty.")

        booking = BookingEntity(
            ticket_number="",
            cruise_type=CruiseType.PRIVATE,
            yacht_id=yacht_id,
            agent_id=agent_id,
            customer_name=customer_name.strip(),
            customer_phone=customer_phone,
            customer_email=customer_email,
            travel_date=travel_date,
            number_of_people=to_int(number_of_people),
            total_amount=Money.of(total_amount).as_decimal(),
            discount_percentage=to_decimal(discount_percentage),
            paid_amount=Money.of(paid_amount).as_decimal(),
            other_charges=Money.of(other_charges).as_decimal(),
            upgrade_cost=Money.of(upgrade_cost).as_decimal(),
            status=status,
            payment_mode=payment_mode,
            notes=notes
        )
        return self.create_booking(booking)

    def update_booking(self, booking_id: int, **kwargs) -> BookingEntity:
        booking = self.bookings_repository.get_by_id(booking_id)
        if not booking:
            raise ValueError(f"Booking with ID {booking_id} not found.")

        before = {name: getattr(booking, name) for name in _PRICING_FIELDS}
        before["guests"] = dict(booking.guests or {})
        for name in _MONEY_FIELDS:
            if name in kwargs:
                setattr(booking, name, Money.of(kwargs[name]).as_decimal())
        for name in _TEXT_FIELDS:
            if name in kwargs:
                setattr(booking, name, kwargs[name])
        if "discount_percentage" in kwargs:
            booking.discount_percentage = to_decimal(kwargs["discount_percentage"])
        if "guests" in kwargs:
            booking.guests = {k: v for k, v in normalize_guest_counts(kwargs["guests"]).items() if v}
        if "number_of_people" in kwargs and booking.cruise_type == CruiseType.PRIVATE:
            booking.number_of_people = to_int(kwargs["number_of_people"])
        if "free_tickets" in kwargs:
            booking.free_tickets = to_int(kwargs["free_tickets"])
        for name in ("yacht_id", "agent_id", "travel_date", "status", "payment_mode"):
            if name in kwargs:
                setattr(booking, name, kwargs[name])

        changed = [name for name in _PRICING_FIELDS if getattr(booking, name) != before[name]]
        if changed:
            reprice = "guests" in changed or "yacht_id" in changed or bool(booking.guests)
            self.apply_derived_fields(booking, reprice=reprice)
        else:
            # net stays as stored, e.g. the quoted figures of a converted opportunity
            balance = Money.of(booking.net_amount) - Money.of(booking.paid_amount)
            booking.balance = balance.as_decimal()
            booking.payment_status = derive_payment_status(balance, booking.paid_amount)
        updated = self.bookings_repository.update(booking)
        if updated is None:
            raise ValueError(f"Booking with ID {booking_id} could not be updated.")
        logger.info(f"Booking {updated.ticket_number} updated. Balance: {updated.balance}, status: {updated.payment_status.value}.")
        return updated

    def get_booking_by_id(self, booking_id: int) -> Optional[BookingEntity]:
        return self.bookings_repository.get_by_id(booking_id)

    def get_bookings(self, cruise_type: Optional[CruiseType] = None) -> List[BookingEntity]:
        if cruise_type is not None:
            return self.bookings_repository.get_by_cruise_type(cruise_type)
        return self.bookings_repository.get_all(order_by="travel_date DESC, id DESC")

    def delete_booking(self, booking_id: int, role: Any) -> bool:
        require_permission(role, Permission.DELETE_BOOKINGS)
        booking = self.bookings_repository.get_by_id(booking_id)
        if not booking:
            raise ValueError(f"Booking with ID {booking_id} not found.")
        deleted = self.bookings_repository.delete(booking_id)
        if deleted:
            logger.info(f"Booking {booking.ticket_number} deleted.")
        return deleted

    def get_booking_totals(self, cruise_type: Optional[CruiseType] = None) -> Dict[str, Any]:
        bookings = self.get_bookings(cruise_type)
        return {
            "count": len(bookings),
            "guests": sum(b.number_of_people for b in bookings),
            "total_amount": Money.total(b.total_amount for b in bookings).as_decimal(),
            "net_amount": Money.total(b.net_amount for b in bookings).as_decimal(),
            "outstanding": Money.total(b.balance for b in bookings if b.balance > 0).as_decimal(),
        }

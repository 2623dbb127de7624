# tests/test_booking_manager.py

from datetime import date
from decimal import Decimal

import pytest

from charterdesk.business_logic.entities.booking_entity import BookingEntity
from charterdesk.business_logic.permissions import UserRole, PermissionDeniedError
from charterdesk.constants import CruiseType, PaymentStatus


def test_shared_booking_uses_yacht_prices_and_agent_commission(booking_manager, agent_manager, priced_yacht):
    agent = agent_manager.add_agent("Dubai Marina Tours", role=UserRole.MANAGER, commission_percentage="10")

    booking = booking_manager.create_shared_booking(
        yacht_id=priced_yacht.id,
        guests={"adult": "4", "child": 2, "royal_child": ""},
        customer_name="  Sara  ",
        travel_date=date(2025, 4, 20),
        agent_id=agent.id,
        paid_amount="675"
    )

    assert booking.ticket_number.startswith("TKT-")
    assert booking.customer_name == "Sara"
    assert booking.guests == {"adult": 4, "child": 2}
    assert booking.number_of_people == 6
    assert booking.discount_percentage == Decimal("10")
    assert booking.total_amount == Decimal("750.00")
    assert booking.commission_amount == Decimal("75.00")
    assert booking.net_amount == Decimal("675.00")
    assert booking.balance == Decimal("0.00")
    assert booking.payment_status is PaymentStatus.PAID
    assert booking.booking_date == date.today()


def test_shared_booking_edits_reprice_only_when_guests_change(booking_manager, priced_yacht):
    booking = booking_manager.create_shared_booking(priced_yacht.id, {"adult": 4}, "Mona", paid_amount="100")
    assert booking.total_amount == Decimal("600.00")

    renamed = booking_manager.update_booking(booking.id, customer_name="Mona Saeed", guests={"adult": "4"})
    assert renamed.total_amount == Decimal("600.00")
    assert renamed.balance == Decimal("500.00")

    regrouped = booking_manager.update_booking(booking.id, guests={"adult": 4, "child": 2})
    assert regrouped.number_of_people == 6
    assert regrouped.total_amount == Decimal("750.00")
    assert regrouped.balance == Decimal("650.00")
    assert regrouped.payment_status is PaymentStatus.PARTIAL


def test_shared_booking_without_guests_keeps_its_total_on_discount_change(booking_manager, priced_yacht):
    booking = booking_manager.create_booking(BookingEntity(
        ticket_number="", cruise_type=CruiseType.SHARED, yacht_id=priced_yacht.id, customer_name="Walk-in",
        total_amount=Decimal("1000.00"), net_amount=Decimal("1000.00"), balance=Decimal("1000.00")
    ), derive=False)

    updated = booking_manager.update_booking(booking.id, discount_percentage="10")
    assert updated.total_amount == Decimal("1000.00")
    assert updated.commission_amount == Decimal("100.00")
    assert updated.net_amount == Decimal("900.00")
    assert updated.balance == Decimal("900.00")


def test_explicit_agent_discount_wins_over_commission(booking_manager, agent_manager, priced_yacht):
    agent = agent_manager.add_agent("Creek Travel", role=UserRole.ADMIN, commission_percentage="10")
    booking = booking_manager.create_shared_booking(
        priced_yacht.id, {"adult": 2}, "Ali", agent_id=agent.id, agent_discount_percentage="0"
    )
    assert booking.commission_amount == Decimal("0.00")
    assert booking.payment_status is PaymentStatus.UNPAID


def test_shared_booking_needs_yacht_and_name(booking_manager, priced_yacht):
    with pytest.raises(ValueError):
        booking_manager.create_shared_booking(None, {"adult": 1}, "Ali")
    with pytest.raises(ValueError):
        booking_manager.create_shared_booking(priced_yacht.id, {"adult": 1}, "   ")


def test_private_booking_and_update(booking_manager):
    booking = booking_manager.create_private_booking(
        "Khalid", total_amount="2000", discount_percentage="10", paid_amount="500", number_of_people="12 pax"
    )
    assert booking.cruise_type is CruiseType.PRIVATE
    assert booking.number_of_people == 12
    assert booking.net_amount == Decimal("1800.00")
    assert booking.balance == Decimal("1300.00")
    assert booking.payment_status is PaymentStatus.PARTIAL

    # paid_amount is the running total paid against the net amount
    updated = booking_manager.update_booking(booking.id, paid_amount="1800")
    assert updated.balance == Decimal("0.00")
    assert updated.payment_status is PaymentStatus.PAID

    with pytest.raises(ValueError):
        booking_manager.update_booking(9999, paid_amount="1")


def test_ticket_numbers_are_unique(booking_manager):
    first = booking_manager.create_private_booking("A", total_amount="100")
    second = booking_manager.create_private_booking("B", total_amount="100")
    assert first.ticket_number != second.ticket_number


def test_only_admins_delete_bookings(booking_manager):
    booking = booking_manager.create_private_booking("Reem", total_amount="500")

    with pytest.raises(PermissionDeniedError):
        booking_manager.delete_booking(booking.id, UserRole.SALES)
    with pytest.raises(PermissionDeniedError):
        booking_manager.delete_booking(booking.id, "Manager")

    assert booking_manager.delete_booking(booking.id, UserRole.ADMIN) is True
    with pytest.raises(ValueError):
        booking_manager.delete_booking(booking.id, UserRole.SUPER_ADMIN)


def test_booking_totals_by_cruise_type(booking_manager, priced_yacht):
    booking_manager.create_shared_booking(priced_yacht.id, {"adult": 2}, "Hana", paid_amount="100")
    booking_manager.create_private_booking("Yusuf", total_amount="1000", paid_amount="1200", number_of_people=4)

    shared = booking_manager.get_booking_totals(CruiseType.SHARED)
    assert shared["count"] == 1
    assert shared["guests"] == 2
    assert shared["outstanding"] == Decimal("200.00")

    everything = booking_manager.get_booking_totals()
    assert everything["count"] == 2
    assert everything["total_amount"] == Decimal("1300.00")
    # overpayment does not reduce what is still owed elsewhere
    assert everything["outstanding"] == Decimal("200.00")

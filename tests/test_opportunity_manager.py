# tests/test_opportunity_manager.py

import re
from datetime import date
from decimal import Decimal

import pytest

from charterdesk.business_logic.opportunity_manager import OpportunityManager, OpportunityConversionError
from charterdesk.business_logic.permissions import UserRole, PermissionDeniedError
from charterdesk.constants import (
    OpportunityStage, OpportunityType, OpportunityLogType, CruiseType, BookingStatus, PaymentStatus,
    LeadSource, PaymentMethod
)
from charterdesk.data_access.opportunities_repository import OpportunitiesRepository
from charterdesk.data_access.opportunity_logs_repository import OpportunityLogsRepository
from charterdesk.data_access.bookings_repository import BookingsRepository

QUOTE = {
    "base_price": "1000",
    "agent_discount_percentage": "10",
    "client_discount_percentage": "5",
    "vat_percentage": "5",
    "advance_paid": "200",
    "probability_percentage": "50",
}


def test_create_computes_figures_and_logs_creation(opportunity_manager):
    opportunity = opportunity_manager.create_opportunity(**QUOTE)

    assert re.fullmatch(rf"OPC-{date.today().year}-\d{{4}}", opportunity.opportunity_code)
    assert opportunity.subtotal == Decimal("850.00")
    assert opportunity.vat_amount == Decimal("42.50")
    assert opportunity.total_amount == Decimal("892.50")
    assert opportunity.balance_amount == Decimal("692.50")
    assert opportunity.expected_revenue == Decimal("446.25")

    stored = opportunity_manager.get_opportunity_by_id(opportunity.id)
    assert stored.total_amount == Decimal("892.50")

    logs = opportunity_manager.get_logs(opportunity.id)
    assert [log.message_content for log in logs] == ["Opportunity created at stage: new"]
    assert logs[0].message_type is OpportunityLogType.NOTE


def test_vat_and_probability_defaults(opportunity_manager):
    opportunity = opportunity_manager.create_opportunity(base_price="1000")
    assert opportunity.vat_percentage == Decimal("5")
    assert opportunity.probability_percentage == Decimal("50")
    assert opportunity.total_amount == Decimal("1050.00")
    assert opportunity.expected_revenue == Decimal("525.00")


def test_explicit_blank_vat_means_no_vat(opportunity_manager):
    opportunity = opportunity_manager.create_opportunity(base_price="1000", vat_percentage="")
    assert opportunity.vat_amount == Decimal("0.00")
    assert opportunity.total_amount == Decimal("1000.00")


def test_unknown_fields_and_stages_are_rejected(opportunity_manager):
    with pytest.raises(ValueError):
        opportunity_manager.create_opportunity(base_prize="1000")
    with pytest.raises(ValueError):
        opportunity_manager.create_opportunity(stage="won")


def test_type_source_and_payment_method_become_enums(opportunity_manager):
    opportunity = opportunity_manager.create_opportunity(
        opportunity_type="sunset", lead_source="whatsapp", payment_method="bank_transfer", base_price="500"
    )
    assert opportunity.opportunity_type is OpportunityType.SUNSET
    assert opportunity.lead_source is LeadSource.WHATSAPP
    assert opportunity.payment_method is PaymentMethod.BANK_TRANSFER

    updated = opportunity_manager.update_opportunity(
        opportunity.id, opportunity_type=OpportunityType.EVENT, lead_source="", payment_method=None
    )
    assert updated.opportunity_type is OpportunityType.EVENT
    assert updated.lead_source is None
    assert updated.payment_method is None

    with pytest.raises(ValueError):
        opportunity_manager.update_opportunity(opportunity.id, opportunity_type="bogus")
    with pytest.raises(ValueError):
        opportunity_manager.update_opportunity(opportunity.id, opportunity_type=None)
    with pytest.raises(ValueError):
        opportunity_manager.create_opportunity(payment_method="barter")

    assert opportunity_manager.get_opportunity_by_id(opportunity.id).opportunity_type is OpportunityType.EVENT
    # the store still accepts writes after the rejected edits
    assert opportunity_manager.update_opportunity(opportunity.id, notes="follow up").notes == "follow up"


def test_party_defaults_prefill_blank_discounts(opportunity_manager, client_manager, agent_manager):
    client = client_manager.add_client("Noura", discount_percentage="5")
    agent = agent_manager.add_agent("Harbour Tours", role=UserRole.ADMIN, commission_percentage="10")

    opportunity = opportunity_manager.create_opportunity(
        client_id=client.id, agent_id=agent.id, base_price="1000", vat_percentage="5", advance_paid="200"
    )
    assert opportunity.agent_discount_percentage == Decimal("10")
    assert opportunity.client_discount_percentage == Decimal("5")
    assert opportunity.total_amount == Decimal("892.50")

    kept = opportunity_manager.apply_party_defaults({"agent_id": agent.id, "agent_discount_percentage": "2"})
    assert kept["agent_discount_percentage"] == "2"


def test_stage_change_is_logged(opportunity_manager):
    opportunity = opportunity_manager.create_opportunity(**QUOTE)
    updated = opportunity_manager.update_opportunity(opportunity.id, stage=OpportunityStage.QUOTED, base_price="2000")

    assert updated.stage is OpportunityStage.QUOTED
    assert updated.total_amount == Decimal("1785.00")
    logs = opportunity_manager.get_logs(opportunity.id)
    assert logs[-1].message_type is OpportunityLogType.STAGE_CHANGE
    assert logs[-1].message_content == "Stage changed from new to quoted"
    assert (logs[-1].previous_stage, logs[-1].new_stage) == ("new", "quoted")

    opportunity_manager.update_opportunity(opportunity.id, notes="called back")
    assert len(opportunity_manager.get_logs(opportunity.id)) == 2


def test_closed_opportunities_are_locked(opportunity_manager):
    opportunity = opportunity_manager.create_opportunity(stage=OpportunityStage.LOST, **QUOTE)

    with pytest.raises(PermissionDeniedError):
        opportunity_manager.update_opportunity(opportunity.id, role=UserRole.SALES, notes="retry")
    with pytest.raises(PermissionDeniedError):
        opportunity_manager.update_opportunity(opportunity.id, notes="no role")

    reopened = opportunity_manager.update_opportunity(
        opportunity.id, role=UserRole.MANAGER, stage=OpportunityStage.FOLLOWUP
    )
    assert reopened.stage is OpportunityStage.FOLLOWUP


def test_notes(opportunity_manager):
    opportunity = opportunity_manager.create_opportunity()
    note = opportunity_manager.add_note(opportunity.id, "  wants sunset slot ")
    assert note.message_content == "wants sunset slot"
    with pytest.raises(ValueError):
        opportunity_manager.add_note(opportunity.id, "   ")
    with pytest.raises(ValueError):
        opportunity_manager.add_note(9999, "orphan")


def test_pipeline_summary(opportunity_manager):
    opportunity_manager.create_opportunity(**QUOTE)
    opportunity_manager.create_opportunity(stage=OpportunityStage.WON, base_price="100", vat_percentage="0")
    opportunity_manager.create_opportunity(stage=OpportunityStage.LOST, base_price="300")

    summary = opportunity_manager.get_pipeline_summary()
    assert summary["count"] == 3
    assert summary["open_count"] == 1
    assert (summary["won_count"], summary["lost_count"]) == (1, 1)
    assert summary["pipeline_value"] == Decimal("892.50")
    assert summary["expected_revenue"] == Decimal("446.25")
    assert summary["won_value"] == Decimal("100.00")
    assert summary["by_stage"][OpportunityStage.NEW] == 1


def test_convert_to_booking(opportunity_manager, booking_manager, client_manager):
    client = client_manager.add_client("Omar", phone="+971500000000")
    opportunity = opportunity_manager.create_opportunity(
        client_id=client.id, date_of_charter=date(2025, 5, 1), adults=6, kids=2, **QUOTE
    )

    booking = opportunity_manager.convert_to_booking(opportunity.id)

    assert booking.ticket_number.startswith("TKT-")
    assert booking.cruise_type is CruiseType.PRIVATE
    assert booking.customer_name == "Omar"
    assert booking.customer_phone == "+971500000000"
    assert booking.travel_date == date(2025, 5, 1)
    assert booking.number_of_people == 8
    assert booking.total_amount == Decimal("892.50")
    assert booking.net_amount == Decimal("892.50")
    assert booking.paid_amount == Decimal("200.00")
    assert booking.balance == Decimal("692.50")
    assert booking.discount_percentage == Decimal("15")
    assert booking.status is BookingStatus.CONFIRMED
    assert booking.payment_status is PaymentStatus.PARTIAL
    assert booking.notes.startswith(f"Converted from Opportunity: {opportunity.opportunity_code}")

    won = opportunity_manager.get_opportunity_by_id(opportunity.id)
    assert won.stage is OpportunityStage.WON
    assert won.converted_booking_id == booking.id
    assert opportunity_manager.get_logs(opportunity.id)[-1].message_content == f"Converted to Booking: {booking.ticket_number}"
    assert booking_manager.get_booking_by_id(booking.id) is not None

    with pytest.raises(ValueError):
        opportunity_manager.convert_to_booking(opportunity.id)


def test_non_private_opportunity_converts_to_shared_booking(opportunity_manager):
    opportunity = opportunity_manager.create_opportunity(opportunity_type=OpportunityType.SUNSET, base_price="500")
    booking = opportunity_manager.convert_to_booking(opportunity.id)
    assert booking.cruise_type is CruiseType.SHARED
    assert booking.customer_name == "Unknown"
    assert booking.payment_status is PaymentStatus.PARTIAL


def test_converted_shared_booking_keeps_quoted_figures_when_edited(opportunity_manager, booking_manager, priced_yacht):
    opportunity = opportunity_manager.create_opportunity(
        opportunity_type=OpportunityType.SUNSET, yacht_id=priced_yacht.id, **QUOTE
    )
    booking = opportunity_manager.convert_to_booking(opportunity.id)
    assert booking.cruise_type is CruiseType.SHARED

    edited = booking_manager.update_booking(booking.id, notes="call back")
    assert edited.total_amount == Decimal("892.50")
    assert edited.net_amount == Decimal("892.50")
    assert edited.balance == Decimal("692.50")
    assert edited.payment_status is PaymentStatus.PARTIAL

    # the booking form sends the unchanged yacht and an empty guest list
    resaved = booking_manager.update_booking(booking.id, yacht_id=priced_yacht.id, guests={}, discount_percentage="15")
    assert resaved.total_amount == Decimal("892.50")
    assert resaved.net_amount == Decimal("892.50")

    settled = booking_manager.update_booking(booking.id, paid_amount="892.50")
    assert settled.net_amount == Decimal("892.50")
    assert settled.balance == Decimal("0.00")
    assert settled.payment_status is PaymentStatus.PAID


class _FailingOpportunitiesRepository(OpportunitiesRepository):
    def update(self, entity):
        return None


class _FailingLogsRepository(OpportunityLogsRepository):
    fail = False

    def add(self, entity):
        if self.fail:
            return None
        return super().add(entity)


def test_conversion_reports_booking_left_behind_when_marking_won_fails(db_manager, booking_manager):
    manager = OpportunityManager(
        _FailingOpportunitiesRepository(db_manager), OpportunityLogsRepository(db_manager), booking_manager
    )
    opportunity = manager.create_opportunity(**QUOTE)

    with pytest.raises(OpportunityConversionError) as excinfo:
        manager.convert_to_booking(opportunity.id)

    error = excinfo.value
    assert error.failed_step == "mark_won"
    assert error.completed_steps == ("create_booking",)
    assert error.booking is not None
    assert booking_manager.get_booking_by_id(error.booking.id) is not None
    assert manager.get_opportunity_by_id(opportunity.id).stage is OpportunityStage.NEW


def test_conversion_reports_missing_log(db_manager, booking_manager):
    logs = _FailingLogsRepository(db_manager)
    manager = OpportunityManager(OpportunitiesRepository(db_manager), logs, booking_manager)
    opportunity = manager.create_opportunity(**QUOTE)
    logs.fail = True

    with pytest.raises(OpportunityConversionError) as excinfo:
        manager.convert_to_booking(opportunity.id)

    assert excinfo.value.failed_step == "log_conversion"
    assert excinfo.value.completed_steps == ("create_booking", "mark_won")
    assert manager.get_opportunity_by_id(opportunity.id).stage is OpportunityStage.WON


def test_conversion_failing_at_booking_changes_nothing(db_manager, booking_manager, opportunity_manager):
    opportunity = opportunity_manager.create_opportunity(**QUOTE)

    class _Broken(BookingsRepository):
        def add(self, entity):
            return None

    booking_manager.bookings_repository = _Broken(db_manager)
    with pytest.raises(ValueError):
        opportunity_manager.convert_to_booking(opportunity.id)
    assert opportunity_manager.get_opportunity_by_id(opportunity.id).stage is OpportunityStage.NEW

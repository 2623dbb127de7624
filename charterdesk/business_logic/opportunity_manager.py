# charterdesk/business_logic/opportunity_manager.py

from typing import Optional, List, Dict, Any, Mapping, Tuple
from datetime import date
from dataclasses import asdict
import random
import logging

from charterdesk.business_logic.entities.opportunity_entity import OpportunityEntity
from charterdesk.business_logic.entities.opportunity_log_entity import OpportunityLogEntity
from charterdesk.business_logic.entities.booking_entity import BookingEntity
from charterdesk.data_access.opportunities_repository import OpportunitiesRepository
from charterdesk.data_access.opportunity_logs_repository import OpportunityLogsRepository
from charterdesk.business_logic.booking_manager import BookingManager
from charterdesk.business_logic.client_manager import ClientManager
from charterdesk.business_logic.agent_manager import AgentManager
from charterdesk.business_logic.calculations.money import Money, to_decimal, to_int
from charterdesk.business_logic.calculations.derived_fields import (
    derive_opportunity_fields, OPPORTUNITY_COST_FIELDS
)
from charterdesk.business_logic.permissions import Permission, require_permission
from charterdesk.config import DEFAULT_VAT_PERCENTAGE, DEFAULT_PROBABILITY_PERCENTAGE
from charterdesk.constants import (
    OpportunityStage, OpportunityType, OpportunityLogType, LeadSource, PaymentMethod,
    CruiseType, BookingStatus, PaymentStatus,
    CLOSED_OPPORTUNITY_STAGES
)

logger = logging.getLogger(__name__)

MONEY_FIELDS = OPPORTUNITY_COST_FIELDS + ("advance_paid",)
PERCENT_FIELDS = ("agent_discount_percentage", "client_discount_percentage",
                  "vat_percentage", "probability_percentage")
PLAIN_FIELDS = ("client_id", "agent_id", "yacht_id",
                "date_of_charter", "lost_reason", "notes")
# field -> (enum, may be left empty)
ENUM_FIELDS = {
    "opportunity_type": (OpportunityType, False),
    "lead_source": (LeadSource, True),
    "payment_method": (PaymentMethod, True),
}
DERIVED_FIELDS = ("subtotal", "vat_amount", "total_amount", "balance_amount", "expected_revenue")


def _as_enum(enum_cls, value: Any, name: str, optional: bool = False):
    """Accepts a member or its stored value ('sunset', 'bank_transfer'); anything else is rejected."""
    if isinstance(value, enum_cls):
        return value
    if optional and value in (None, ""):
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValueError(f"Invalid {name.replace('_', ' ')}: {value}") from None


STEP_CREATE_BOOKING = "create_booking"
STEP_MARK_WON = "mark_won"
STEP_LOG_CONVERSION = "log_conversion"


class OpportunityConversionError(Exception):
    """
    Raised when converting an opportunity stopped after some of its steps were
    already written. Nothing is rolled back: ``completed_steps`` says what is in
    the database and ``booking`` is the booking that was created, if any.
    """

    def __init__(self, opportunity_id: int, completed_steps: Tuple[str, ...], failed_step: str,
                 booking: Optional[BookingEntity] = None, cause: Optional[BaseException] = None):
        self.opportunity_id = opportunity_id
        self.completed_steps = completed_steps
        self.failed_step = failed_step
        self.booking = booking
        self.cause = cause
        ticket = booking.ticket_number if booking else "none"
        super().__init__(
            f"Conversion of opportunity ID {opportunity_id} failed at '{failed_step}' after "
            f"{', '.join(completed_steps) or 'no steps'} (booking: {ticket}). {cause or ''}".strip()
        )


class OpportunityManager:
    def __init__(self,
                 opportunities_repository: OpportunitiesRepository,
                 opportunity_logs_repository: OpportunityLogsRepository,
                 booking_manager: BookingManager,
                 client_manager: Optional[ClientManager] = None,
                 agent_manager: Optional[AgentManager] = None):
        if opportunities_repository is None: raise ValueError("opportunities_repository cannot be None")
        if opportunity_logs_repository is None: raise ValueError("opportunity_logs_repository cannot be None")
        if booking_manager is None: raise ValueError("booking_manager cannot be None")

        self.opportunities_repository = opportunities_repository
        self.opportunity_logs_repository = opportunity_logs_repository
        self.booking_manager = booking_manager
        self.client_manager = client_manager
        self.agent_manager = agent_manager

    # --- Codes, defaults and figures ---

    def generate_opportunity_code(self, year: Optional[int] = None) -> str:
        year = year or date.today().year
        while True:
            code = f"OPC-{year}-{random.randint(0, 9999):04d}"
            if not self.opportunities_repository.get_by_code(code):
                return code

    @staticmethod
    def recalculate(raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Quote figures for the values currently in the form; nothing is stored."""
        return derive_opportunity_fields(raw)

    def apply_party_defaults(self, raw: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Prefills the discount percentages from the selected agent's commission and
        the selected client's discount, when those fields are still blank.
        """
        values = dict(raw)
        if self.agent_manager and values.get("agent_id") and values.get("agent_discount_percentage") in (None, ""):
            agent = self.agent_manager.get_agent_by_id(values["agent_id"])
            if agent:
                values["agent_discount_percentage"] = agent.commission_percentage
        if self.client_manager and values.get("client_id") and values.get("client_discount_percentage") in (None, ""):
            client = self.client_manager.get_client_by_id(values["client_id"])
            if client:
                values["client_discount_percentage"] = client.discount_percentage
        return values

    @staticmethod
    def _apply_values(opportunity: OpportunityEntity, values: Mapping[str, Any]) -> None:
        for name in MONEY_FIELDS:
            if name in values:
                setattr(opportunity, name, Money.of(values[name]).as_decimal())
        for name in PERCENT_FIELDS:
            if name in values:
                setattr(opportunity, name, to_decimal(values[name]))
        for name in ("adults", "kids"):
            if name in values:
                setattr(opportunity, name, to_int(values[name]))
        if "duration_hours" in values:
            opportunity.duration_hours = to_decimal(values["duration_hours"])
        for name in PLAIN_FIELDS:
            if name in values:
                setattr(opportunity, name, values[name])
        for name, (enum_cls, optional) in ENUM_FIELDS.items():
            if name in values:
                setattr(opportunity, name, _as_enum(enum_cls, values[name], name, optional))

    @staticmethod
    def _apply_derived(opportunity: OpportunityEntity) -> OpportunityEntity:
        derived = derive_opportunity_fields(asdict(opportunity))
        for name in DERIVED_FIELDS:
            setattr(opportunity, name, derived[name])
        return opportunity

    def _write_log(self, opportunity_id: int, message_type: OpportunityLogType, message: str,
                   previous_stage: Optional[OpportunityStage] = None,
                   new_stage: Optional[OpportunityStage] = None) -> Optional[OpportunityLogEntity]:
        log = OpportunityLogEntity(
            opportunity_id=opportunity_id,
            message_type=message_type,
            message_content=message,
            previous_stage=previous_stage.value if previous_stage else None,
            new_stage=new_stage.value if new_stage else None
        )
        return self.opportunity_logs_repository.add(log)

    # --- CRUD ---

    def create_opportunity(self,
                           stage: OpportunityStage = OpportunityStage.NEW,
                           opportunity_type: OpportunityType = OpportunityType.PRIVATE,
                           **values) -> OpportunityEntity:
        if not isinstance(stage, OpportunityStage):
            raise ValueError(f"Invalid opportunity stage: {stage}")
        unknown = set(values) - set(MONEY_FIELDS + PERCENT_FIELDS + PLAIN_FIELDS + tuple(ENUM_FIELDS)) - {"adults", "kids", "duration_hours"}
        if unknown:
            raise ValueError(f"Unknown opportunity fields: {', '.join(sorted(unknown))}")

        values.setdefault("vat_percentage", DEFAULT_VAT_PERCENTAGE)
        values.setdefault("probability_percentage", DEFAULT_PROBABILITY_PERCENTAGE)
        values = self.apply_party_defaults(values)

        opportunity = OpportunityEntity(
            opportunity_code=self.generate_opportunity_code(),
            opportunity_type=_as_enum(OpportunityType, opportunity_type, "opportunity_type"),
            stage=stage
        )
        self._apply_values(opportunity, values)
        self._apply_derived(opportunity)

        try:
            created = self.opportunities_repository.add(opportunity)
            if created is None:
                raise ValueError("Opportunity could not be saved.")
        except Exception as e:
            logger.error(f"Error creating opportunity: {e}", exc_info=True)
            raise

        if self._write_log(created.id, OpportunityLogType.NOTE,
                           f"Opportunity created at stage: {created.stage.value}") is None:
            logger.error(f"Opportunity {created.opportunity_code} created but its creation note was not written.")
        logger.info(f"Opportunity {created.opportunity_code} (ID: {created.id}) created at stage '{created.stage.value}'. "
                    f"Total: {created.total_amount}, expected revenue: {created.expected_revenue}")
        return created

    def update_opportunity(self, opportunity_id: int, role: Any = None,
                           stage: Optional[OpportunityStage] = None, **values) -> OpportunityEntity:
        """
        Updates an opportunity and recomputes its figures. A stage change is
        written to the opportunity's log. Won or lost opportunities can only be
        edited by roles with the bypass_closed_lock permission.
        """
        opportunity = self.opportunities_repository.get_by_id(opportunity_id)
        if not opportunity:
            raise ValueError(f"Opportunity with ID {opportunity_id} not found.")
        if opportunity.is_closed:
            require_permission(role, Permission.BYPASS_CLOSED_LOCK)
        if stage is not None and not isinstance(stage, OpportunityStage):
            raise ValueError(f"Invalid opportunity stage: {stage}")

        previous_stage = opportunity.stage
        self._apply_values(opportunity, values)
        if stage is not None:
            opportunity.stage = stage
        self._apply_derived(opportunity)

        updated = self.opportunities_repository.update(opportunity)
        if updated is None:
            raise ValueError(f"Opportunity with ID {opportunity_id} could not be updated.")

        if updated.stage != previous_stage:
            message = f"Stage changed from {previous_stage.value} to {updated.stage.value}"
            if self._write_log(opportunity_id, OpportunityLogType.STAGE_CHANGE, message,
                               previous_stage, updated.stage) is None:
                logger.error(f"Stage change of opportunity ID {opportunity_id} was saved but not logged.")
            logger.info(f"Opportunity {updated.opportunity_code}: {message}.")
        else:
            logger.info(f"Opportunity {updated.opportunity_code} updated.")
        return updated

    def delete_opportunity(self, opportunity_id: int) -> bool:
        opportunity = self.opportunities_repository.get_by_id(opportunity_id)
        if not opportunity:
            raise ValueError(f"Opportunity with ID {opportunity_id} not found.")
        deleted = self.opportunities_repository.delete(opportunity_id)
        if deleted:
            logger.info(f"Opportunity {opportunity.opportunity_code} deleted.")
        return deleted

    def add_note(self, opportunity_id: int, message: str) -> OpportunityLogEntity:
        if not message or not message.strip():
            raise ValueError("Note cannot be empty.")
        if not self.opportunities_repository.get_by_id(opportunity_id):
            raise ValueError(f"Opportunity with ID {opportunity_id} not found.")
        log = self._write_log(opportunity_id, OpportunityLogType.NOTE, message.strip())
        if log is None:
            raise ValueError(f"Note for opportunity ID {opportunity_id} could not be saved.")
        return log

    def get_opportunity_by_id(self, opportunity_id: int) -> Optional[OpportunityEntity]:
        return self.opportunities_repository.get_by_id(opportunity_id)

    def get_opportunities(self, stage: Optional[OpportunityStage] = None) -> List[OpportunityEntity]:
        if stage is not None:
            return self.opportunities_repository.get_by_stage(stage)
        return self.opportunities_repository.get_all(order_by="id DESC")

    def get_logs(self, opportunity_id: int) -> List[OpportunityLogEntity]:
        return self.opportunity_logs_repository.get_by_opportunity_id(opportunity_id)

    def get_pipeline_summary(self) -> Dict[str, Any]:
        opportunities = self.opportunities_repository.get_all()
        open_opps = [o for o in opportunities if o.stage not in CLOSED_OPPORTUNITY_STAGES]
        won = [o for o in opportunities if o.stage == OpportunityStage.WON]
        return {
            "count": len(opportunities),
            "open_count": len(open_opps),
            "won_count": len(won),
            "lost_count": sum(1 for o in opportunities if o.stage == OpportunityStage.LOST),
            "pipeline_value": Money.total(o.total_amount for o in open_opps).as_decimal(),
            "expected_revenue": Money.total(o.expected_revenue for o in open_opps).as_decimal(),
            "won_value": Money.total(o.total_amount for o in won).as_decimal(),
            "by_stage": {stage: sum(1 for o in opportunities if o.stage == stage) for stage in OpportunityStage},
        }

    # --- Conversion ---

    def _booking_from_opportunity(self, opportunity: OpportunityEntity) -> BookingEntity:
        client = None
        if self.client_manager and opportunity.client_id:
            client = self.client_manager.get_client_by_id(opportunity.client_id)
        notes = f"Converted from Opportunity: {opportunity.opportunity_code}\n{opportunity.notes or ''}"
        return BookingEntity(
            ticket_number=self.booking_manager.generate_ticket_number(),
            cruise_type=CruiseType.PRIVATE if opportunity.opportunity_type == OpportunityType.PRIVATE else CruiseType.SHARED,
            yacht_id=opportunity.yacht_id,
            agent_id=opportunity.agent_id,
            customer_name=client.client_name if client else "Unknown",
            customer_phone=client.phone if client else None,
            customer_email=client.email if client else None,
            travel_date=opportunity.date_of_charter,
            booking_date=date.today(),
            number_of_people=opportunity.adults + opportunity.kids,
            other_charges=opportunity.addons_total,
            total_amount=opportunity.total_amount,
            discount_percentage=opportunity.agent_discount_percentage + opportunity.client_discount_percentage,
            net_amount=opportunity.total_amount,
            paid_amount=opportunity.advance_paid,
            balance=opportunity.balance_amount,
            status=BookingStatus.CONFIRMED,
            payment_status=PaymentStatus.PARTIAL if opportunity.balance_amount > 0 else PaymentStatus.PAID,
            payment_mode=opportunity.payment_method,
            notes=notes.strip()
        )

    def convert_to_booking(self, opportunity_id: int) -> BookingEntity:
        """
        Turns an open opportunity into a confirmed booking:
        create the booking, mark the opportunity won with a link to it, then log a note.
        The steps are not atomic. A failure after the booking exists raises
        OpportunityConversionError describing what was left behind.
        """
        opportunity = self.opportunities_repository.get_by_id(opportunity_id)
        if not opportunity:
            raise ValueError(f"Opportunity with ID {opportunity_id} not found.")
        if opportunity.is_closed:
            raise ValueError(f"Opportunity {opportunity.opportunity_code} is already {opportunity.stage.value}.")

        completed: List[str] = []

        try:
            booking = self.booking_manager.create_booking(self._booking_from_opportunity(opportunity), derive=False)
        except Exception as e:
            logger.error(f"Conversion of opportunity {opportunity.opportunity_code} failed before any change: {e}", exc_info=True)
            raise
        completed.append(STEP_CREATE_BOOKING)

        previous_stage = opportunity.stage
        opportunity.stage = OpportunityStage.WON
        opportunity.converted_booking_id = booking.id
        try:
            if self.opportunities_repository.update(opportunity) is None:
                raise ValueError("opportunity update was not saved")
        except Exception as e:
            logger.error(f"Booking {booking.ticket_number} created but opportunity {opportunity.opportunity_code} "
                         f"is still '{previous_stage.value}': {e}", exc_info=True)
            raise OpportunityConversionError(opportunity_id, tuple(completed), STEP_MARK_WON, booking, e) from e
        completed.append(STEP_MARK_WON)

        try:
            if self._write_log(opportunity_id, OpportunityLogType.NOTE,
                               f"Converted to Booking: {booking.ticket_number}") is None:
                raise ValueError("conversion note was not saved")
        except Exception as e:
            logger.error(f"Opportunity {opportunity.opportunity_code} converted to {booking.ticket_number} "
                         f"but the conversion note is missing: {e}", exc_info=True)
            raise OpportunityConversionError(opportunity_id, tuple(completed), STEP_LOG_CONVERSION, booking, e) from e

        logger.info(f"Opportunity {opportunity.opportunity_code} converted to booking {booking.ticket_number} (ID: {booking.id}).")
        return booking

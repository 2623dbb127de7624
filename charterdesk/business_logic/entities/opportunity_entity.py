# charterdesk/business_logic/entities/opportunity_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity
from charterdesk.constants import OpportunityStage, OpportunityType, LeadSource, PaymentMethod

def _zero() -> Decimal:
    return Decimal("0.00")

@dataclass
class OpportunityEntity(BaseEntity):
    opportunity_code: str
    opportunity_type: OpportunityType = field(default=OpportunityType.PRIVATE)
    lead_source: Optional[LeadSource] = field(default=None)
    stage: OpportunityStage = field(default=OpportunityStage.NEW)
    client_id: Optional[int] = field(default=None)
    agent_id: Optional[int] = field(default=None)
    yacht_id: Optional[int] = field(default=None)
    date_of_charter: Optional[date] = field(default=None)
    duration_hours: Decimal = field(default_factory=_zero)
    adults: int = field(default=0)
    kids: int = field(default=0)

    # Entered figures
    base_price: Decimal = field(default_factory=_zero)
    vip_cost: Decimal = field(default_factory=_zero)
    alcohol_cost: Decimal = field(default_factory=_zero)
    catering_cost: Decimal = field(default_factory=_zero)
    extra_hour_cost: Decimal = field(default_factory=_zero)
    addons_total: Decimal = field(default_factory=_zero)
    agent_discount_percentage: Decimal = field(default_factory=_zero)
    client_discount_percentage: Decimal = field(default_factory=_zero)
    vat_percentage: Decimal = field(default_factory=lambda: Decimal("5"))
    probability_percentage: Decimal = field(default_factory=lambda: Decimal("50"))
    advance_paid: Decimal = field(default_factory=_zero)
    payment_method: Optional[PaymentMethod] = field(default=None)

    # Derived figures, always written by OpportunityManager
    subtotal: Decimal = field(default_factory=_zero)
    vat_amount: Decimal = field(default_factory=_zero)
    total_amount: Decimal = field(default_factory=_zero)
    balance_amount: Decimal = field(default_factory=_zero)
    expected_revenue: Decimal = field(default_factory=_zero)

    converted_booking_id: Optional[int] = field(default=None)
    lost_reason: Optional[str] = field(default=None)
    notes: Optional[str] = field(default=None)

    @property
    def is_closed(self) -> bool:
        return self.stage in (OpportunityStage.WON, OpportunityStage.LOST)

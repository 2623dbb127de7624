# charterdesk/business_logic/entities/financial_report_entity.py
from dataclasses import dataclass, field
from typing import Optional
from decimal import Decimal
from .base_entity import BaseEntity

def _zero() -> Decimal:
    return Decimal("0.00")

@dataclass
class FinancialReportEntity(BaseEntity):
    report_period: str # e.g. "March 2025"
    total_income: Decimal = field(default_factory=_zero)
    booking_income: Decimal = field(default_factory=_zero)
    other_income: Decimal = field(default_factory=_zero)
    total_expenses: Decimal = field(default_factory=_zero)
    payroll_expenses: Decimal = field(default_factory=_zero)
    purchase_expenses: Decimal = field(default_factory=_zero)
    operational_expenses: Decimal = field(default_factory=_zero)
    profit: Decimal = field(default_factory=_zero) # total_income - total_expenses
    notes: Optional[str] = field(default=None)

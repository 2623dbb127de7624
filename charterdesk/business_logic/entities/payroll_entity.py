# charterdesk/business_logic/entities/payroll_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity
from charterdesk.constants import PayrollStatus

def _zero() -> Decimal:
    return Decimal("0.00")

@dataclass
class PayrollEntity(BaseEntity):
    employee_id: int # Foreign Key to EmployeeEntity
    month: str
    year: int
    # Earnings
    basic_salary: Decimal = field(default_factory=_zero)
    allowance: Decimal = field(default_factory=_zero)
    accommodation_allowance: Decimal = field(default_factory=_zero)
    sales_commission: Decimal = field(default_factory=_zero)
    bar_commission: Decimal = field(default_factory=_zero)
    overtime_amount: Decimal = field(default_factory=_zero)
    # Deductions
    deductions: Decimal = field(default_factory=_zero)
    advance_salary: Decimal = field(default_factory=_zero)
    absent_deduction: Decimal = field(default_factory=_zero)
    # Derived, written by PayrollManager
    total_earnings: Decimal = field(default_factory=_zero)
    total_deductions: Decimal = field(default_factory=_zero)
    net_salary: Decimal = field(default_factory=_zero)

    payment_status: PayrollStatus = field(default=PayrollStatus.PENDING)
    payment_date: Optional[date] = field(default=None)
    notes: Optional[str] = field(default=None)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PayrollStatus.PAID

    @property
    def period_label(self) -> str:
        return f"{self.month} {self.year}"

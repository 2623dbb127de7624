# charterdesk/business_logic/entities/employee_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity
from charterdesk.constants import EmployeeStatus

def _zero() -> Decimal:
    return Decimal("0.00")

@dataclass
class EmployeeEntity(BaseEntity):
    full_name: str
    designation: Optional[str] = field(default=None)
    department: Optional[str] = field(default=None)
    joining_date: Optional[date] = field(default=None)
    status: EmployeeStatus = field(default=EmployeeStatus.ACTIVE)
    # Monthly package; copied into a new payroll as editable defaults
    basic_salary: Decimal = field(default_factory=_zero)
    allowance: Decimal = field(default_factory=_zero)
    accommodation_allowance: Decimal = field(default_factory=_zero)
    sales_commission: Decimal = field(default_factory=_zero)
    bar_commission: Decimal = field(default_factory=_zero)

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE

# charterdesk/business_logic/calculations/payroll_calculator.py

from dataclasses import dataclass, field, fields
from typing import Any, List, Mapping, Union

from .money import Money, as_money
from .commission_engine import apply_flat_deductions


@dataclass(frozen=True)
class PayrollEarnings:
    basic: Money = field(default_factory=Money.zero)
    allowance: Money = field(default_factory=Money.zero)
    accommodation: Money = field(default_factory=Money.zero)
    sales_commission: Money = field(default_factory=Money.zero)
    bar_commission: Money = field(default_factory=Money.zero)
    overtime: Money = field(default_factory=Money.zero)

    def __post_init__(self):
        for f in fields(self):
            object.__setattr__(self, f.name, as_money(getattr(self, f.name)))

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> "PayrollEarnings":
        """Builds the earnings from payroll record field names (basic_salary, overtime_amount, ...)."""
        return cls(
            basic=raw.get("basic_salary"),
            allowance=raw.get("allowance"),
            accommodation=raw.get("accommodation_allowance"),
            sales_commission=raw.get("sales_commission"),
            bar_commission=raw.get("bar_commission"),
            overtime=raw.get("overtime_amount"),
        )

    def components(self) -> List[Money]:
        return [getattr(self, f.name) for f in fields(self)]


@dataclass(frozen=True)
class PayrollDeductions:
    other: Money = field(default_factory=Money.zero)
    advance_salary: Money = field(default_factory=Money.zero)
    absent_deduction: Money = field(default_factory=Money.zero)

    def __post_init__(self):
        for f in fields(self):
            object.__setattr__(self, f.name, as_money(getattr(self, f.name)))

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> "PayrollDeductions":
        return cls(
            other=raw.get("deductions"),
            advance_salary=raw.get("advance_salary"),
            absent_deduction=raw.get("absent_deduction"),
        )

    def components(self) -> List[Money]:
        return [getattr(self, f.name) for f in fields(self)]


@dataclass(frozen=True)
class PayrollResult:
    total_earnings: Money
    total_deductions: Money
    net_salary: Money


def _coerce(value: Union[PayrollEarnings, PayrollDeductions, Mapping[str, Any], None], kind):
    if isinstance(value, kind):
        return value
    if value is None:
        return kind()
    known = {f.name for f in fields(kind)}
    return kind(**{key: val for key, val in value.items() if key in known})


def compute_payroll(earnings: Union[PayrollEarnings, Mapping[str, Any], None],
                    deductions: Union[PayrollDeductions, Mapping[str, Any], None]) -> PayrollResult:
    """
    Sums flat earning and deduction amounts into a net salary.
    Net salary may be negative (e.g. a large salary advance); that is returned as is.
    """
    earnings = _coerce(earnings, PayrollEarnings)
    deductions = _coerce(deductions, PayrollDeductions)

    total_earnings = Money.total(earnings.components())
    total_deductions = Money.total(deductions.components())
    return PayrollResult(
        total_earnings=total_earnings,
        total_deductions=total_deductions,
        net_salary=apply_flat_deductions(total_earnings, deductions.components()),
    )

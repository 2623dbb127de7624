# charterdesk/business_logic/calculations/commission_engine.py

from dataclasses import dataclass
from typing import Iterable

from .money import Money, MoneyLike, as_money


@dataclass(frozen=True)
class CommissionResult:
    commission_amount: Money
    net_amount: Money


def compute_commission(total: MoneyLike, commission_percent: MoneyLike) -> CommissionResult:
    """Agent commission on a gross total and what is left for the operator."""
    total_amount = as_money(total)
    commission_amount = total_amount.percent(commission_percent)
    return CommissionResult(
        commission_amount=commission_amount,
        net_amount=total_amount - commission_amount,
    )


def apply_flat_deductions(total: MoneyLike, amounts: Iterable[MoneyLike]) -> Money:
    """Flat-amount counterpart of compute_commission, as used for payroll deductions."""
    return as_money(total) - Money.total(amounts)

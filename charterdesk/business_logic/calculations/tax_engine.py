# charterdesk/business_logic/calculations/tax_engine.py

from dataclasses import dataclass

from .money import Money, MoneyLike, as_money


@dataclass(frozen=True)
class TaxResult:
    tax_amount: Money
    total: Money


def apply_tax(subtotal: MoneyLike, tax_percent: MoneyLike) -> TaxResult:
    """
    Adds a percentage tax (VAT) on top of a discounted subtotal.
    The rate is always supplied by the caller; bookings pass 0 or skip this step.
    """
    subtotal_amount = as_money(subtotal)
    tax_amount = subtotal_amount.percent(tax_percent)
    return TaxResult(tax_amount=tax_amount, total=subtotal_amount + tax_amount)

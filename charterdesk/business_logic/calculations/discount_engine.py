# charterdesk/business_logic/calculations/discount_engine.py

from dataclasses import dataclass
from typing import Iterable, Tuple

from .money import Money, MoneyLike, as_money


@dataclass(frozen=True)
class DiscountResult:
    discount_amounts: Tuple[Money, ...]
    subtotal: Money

    @property
    def total_discount(self) -> Money:
        return Money.total(self.discount_amounts)


def apply_sequential_discounts(base: MoneyLike, percentages: Iterable[MoneyLike]) -> DiscountResult:
    """
    Applies each discount percentage to the original base (agent first, then client).

    Discounts add up rather than compound: 10% + 5% on 1000 is 150 off, not 145.
    The subtotal is not clamped and goes negative when the percentages exceed 100.
    """
    base_amount = as_money(base)
    discount_amounts = tuple(base_amount.percent(percentage) for percentage in percentages)
    return DiscountResult(
        discount_amounts=discount_amounts,
        subtotal=base_amount - Money.total(discount_amounts),
    )

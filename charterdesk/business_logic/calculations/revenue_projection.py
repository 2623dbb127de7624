# charterdesk/business_logic/calculations/revenue_projection.py

from .money import Money, MoneyLike, as_money


def expected_revenue(total: MoneyLike, probability_percent: MoneyLike) -> Money:
    # Probability is not clamped to 0..100.
    return as_money(total).percent(probability_percent)

# charterdesk/business_logic/calculations/guest_pricing_calculator.py

from typing import Any, Dict, Mapping, Optional

from charterdesk.constants import GuestCategory
from .money import Money, as_money, to_int


def _lookup(mapping: Optional[Mapping], category: GuestCategory) -> Any:
    # Callers key either by the enum or by its string value (JSON-loaded records).
    if not mapping:
        return None
    if category in mapping:
        return mapping[category]
    return mapping.get(category.value)


def normalize_guest_counts(guest_counts: Optional[Mapping]) -> Dict[str, int]:
    """All twelve categories as plain ints, keyed by category value."""
    return {category.value: to_int(_lookup(guest_counts, category)) for category in GuestCategory}


def count_guests(guest_counts: Optional[Mapping]) -> int:
    return sum(normalize_guest_counts(guest_counts).values())


def compute_shared_total(guest_counts: Optional[Mapping], unit_prices: Optional[Mapping]) -> Money:
    """
    Shared cruise total: sum of head count x unit price over the fixed categories.
    A category without a count or without a configured price contributes nothing.
    """
    total = Money.zero()
    for category in GuestCategory:
        count = to_int(_lookup(guest_counts, category))
        if not count:
            continue
        total = total + as_money(_lookup(unit_prices, category)).times(count)
    return total

# tests/test_engines.py

from decimal import Decimal
import random

import pytest

from charterdesk.business_logic.calculations import (
    Money, apply_sequential_discounts, apply_tax, compute_commission, apply_flat_deductions,
    expected_revenue, compute_payroll, PayrollEarnings, PayrollDeductions,
    compute_shared_total, count_guests, normalize_guest_counts
)
from charterdesk.constants import GuestCategory

CENT = Decimal("0.01")


def _random_amount(rng: random.Random) -> Decimal:
    return Decimal(rng.randint(0, 10_000_000)) / 100


def test_sequential_discounts_are_taken_from_the_original_base():
    rng = random.Random(7)
    for _ in range(200):
        base = _random_amount(rng)
        p1 = Decimal(rng.randint(0, 10000)) / 100
        p2 = Decimal(rng.randint(0, 10000)) / 100
        result = apply_sequential_discounts(base, [p1, p2])
        expected = base - base * p1 / 100 - base * p2 / 100
        assert abs(result.subtotal.as_decimal() - expected) <= CENT


def test_discounts_add_rather_than_compound():
    result = apply_sequential_discounts("1000", ["10", "5"])
    assert [d.as_decimal() for d in result.discount_amounts] == [Decimal("100.00"), Decimal("50.00")]
    assert result.total_discount == Money.of("150")
    assert result.subtotal == Money.of("850")


def test_discounts_over_one_hundred_percent_are_not_clamped():
    result = apply_sequential_discounts("100", ["80", "40"])
    assert result.subtotal.as_decimal() == Decimal("-20.00")


def test_tax_is_added_on_top_of_the_subtotal():
    rng = random.Random(11)
    for _ in range(200):
        subtotal = _random_amount(rng)
        rate = Decimal(rng.randint(0, 2500)) / 100
        result = apply_tax(subtotal, rate)
        assert abs(result.total.as_decimal() - (subtotal + subtotal * rate / 100)) <= CENT


def test_commission_and_flat_deductions():
    commission = compute_commission("750", "10")
    assert commission.commission_amount == Money.of("75")
    assert commission.net_amount == Money.of("675")
    assert apply_flat_deductions("3600", ["50", "500", None]) == Money.of("3050")


def test_expected_revenue_is_not_clamped():
    assert expected_revenue("1000", "150").as_decimal() == Decimal("1500.00")
    assert expected_revenue("892.5", "50").as_decimal() == Decimal("446.25")


def test_payroll_net_is_exactly_earnings_minus_deductions():
    rng = random.Random(3)
    for _ in range(100):
        earnings = [_random_amount(rng) for _ in range(6)]
        deductions = [_random_amount(rng) for _ in range(3)]
        result = compute_payroll(PayrollEarnings(*earnings), PayrollDeductions(*deductions))
        assert result.net_salary.as_decimal() == sum(earnings) - sum(deductions)


def test_payroll_accepts_mappings_and_allows_negative_net():
    result = compute_payroll({"basic": "1000"}, {"advance_salary": "1500", "unknown": "99"})
    assert result.total_earnings == Money.of("1000")
    assert result.net_salary.as_decimal() == Decimal("-500.00")


def test_shared_total_prices_each_category():
    counts = {"adult": 4, GuestCategory.CHILD: "2", "royal_adult": 1}
    prices = {"adult": "150", "child": Decimal("75")}
    # royal_adult has no configured price and contributes nothing
    assert compute_shared_total(counts, prices) == Money.of("750")
    assert count_guests(counts) == 7


def test_normalize_guest_counts_lists_every_category():
    normalized = normalize_guest_counts({"adult": "3", "child_vip": "x"})
    assert set(normalized) == {category.value for category in GuestCategory}
    assert normalized["adult"] == 3
    assert normalized["child_vip"] == 0


@pytest.mark.parametrize("counts, prices", [(None, None), ({}, {}), ({"adult": "2"}, None)])
def test_shared_total_without_data_is_zero(counts, prices):
    assert compute_shared_total(counts, prices).is_zero()

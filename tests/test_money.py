# tests/test_money.py

from decimal import Decimal

import pytest

from charterdesk.business_logic.calculations.money import Money, to_decimal, to_int, as_money


@pytest.mark.parametrize("raw, expected", [
    (None, Decimal("0")),
    ("", Decimal("0")),
    ("   ", Decimal("0")),
    ("abc", Decimal("0")),
    ("12.5", Decimal("12.5")),
    ("  42 AED", Decimal("42")),
    ("1e2", Decimal("100")),
    (".5", Decimal("0.5")),
    ("-3.25", Decimal("-3.25")),
    ("-0", Decimal("0")),
    (7, Decimal("7")),
    (0.1, Decimal("0.1")),
    (Decimal("NaN"), Decimal("0")),
    (True, Decimal("0")),
])
def test_to_decimal_parses_like_a_form_field(raw, expected):
    assert to_decimal(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    (None, 0),
    ("", 0),
    ("3 pax", 3),
    ("2.7", 2),
    (2.7, 2),
    ("x4", 0),
    (5, 5),
])
def test_to_int_parses_head_counts(raw, expected):
    assert to_int(raw) == expected


def test_money_of_rounds_entered_values_half_up():
    assert Money.of("10.005").as_decimal() == Decimal("10.01")
    assert Money.of("10.004").as_decimal() == Decimal("10.00")
    assert Money.of("garbage").is_zero()


def test_very_large_amounts_are_kept():
    huge = Money.of("1e25")
    assert huge.as_decimal() == Decimal("1e25")
    assert not huge.is_zero()
    assert huge.percent("10").as_decimal() == Decimal("1e24")
    assert Money.of("123456789012345678901234567.891").as_decimal() == Decimal("123456789012345678901234567.89")


def test_percent_keeps_intermediate_precision_until_output():
    third = Money.of("10").percent("33.333")
    assert third.amount == Decimal("3.3333")
    assert third.as_decimal() == Decimal("3.33")
    assert str(third) == "3.33"


def test_arithmetic_and_comparisons():
    a = Money.of("100.10")
    b = Money.of("0.90")
    assert a + b == Money.of("101")
    assert a - b == Decimal("99.2")
    assert b - a < Money.zero()
    assert (b - a).is_negative()
    assert 5 + Money.of("1") == Money.of("6")
    assert Money.of("2") > Money.of("1.99")
    assert not Money.zero()


def test_total_accepts_mixed_inputs():
    assert Money.total(["1.50", None, Decimal("2"), 3, "junk"]).as_decimal() == Decimal("6.50")


def test_as_money_passes_money_through():
    value = Money("1.2345")
    assert as_money(value) is value
    assert Money.of(value) is value

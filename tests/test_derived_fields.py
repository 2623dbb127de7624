# tests/test_derived_fields.py

from decimal import Decimal

import pytest

from charterdesk.constants import PaymentStatus
from charterdesk.business_logic.calculations import (
    derive_opportunity_fields, derive_shared_booking_fields, derive_private_booking_fields,
    derive_payroll_fields, derive_invoice_fields, derive_financial_report_fields,
    derive_payment_status
)

QUOTE = {
    "base_price": "1000",
    "agent_discount_percentage": "10",
    "client_discount_percentage": "5",
    "vat_percentage": "5",
    "advance_paid": "200",
    "probability_percentage": "50",
}


def test_opportunity_quote():
    derived = derive_opportunity_fields(QUOTE)
    assert derived == {
        "total_before_discount": Decimal("1000.00"),
        "agent_discount_amount": Decimal("100.00"),
        "client_discount_amount": Decimal("50.00"),
        "subtotal": Decimal("850.00"),
        "vat_amount": Decimal("42.50"),
        "total_amount": Decimal("892.50"),
        "balance_amount": Decimal("692.50"),
        "expected_revenue": Decimal("446.25"),
    }


def test_opportunity_costs_are_summed_before_discounts():
    raw = {"base_price": "500", "vip_cost": "100", "alcohol_cost": "50.5",
           "catering_cost": "", "extra_hour_cost": None, "addons_total": "49.5"}
    derived = derive_opportunity_fields(raw)
    assert derived["total_before_discount"] == Decimal("700.00")
    assert derived["total_amount"] == Decimal("700.00")
    assert derived["expected_revenue"] == Decimal("0.00")


@pytest.mark.parametrize("raw", [None, {}, {key: "" for key in QUOTE}])
def test_empty_opportunity_gives_zeros(raw):
    derived = derive_opportunity_fields(raw)
    assert all(value == Decimal("0") for value in derived.values())


def test_derivation_is_idempotent():
    first = derive_opportunity_fields(QUOTE)
    second = derive_opportunity_fields({**QUOTE, **first})
    assert first == second


def test_opportunity_values_are_not_clamped():
    derived = derive_opportunity_fields({
        "base_price": "100", "agent_discount_percentage": "80", "client_discount_percentage": "40",
        "advance_paid": "50", "probability_percentage": "150",
    })
    assert derived["subtotal"] == Decimal("-20.00")
    assert derived["balance_amount"] == Decimal("-70.00")
    assert derived["expected_revenue"] == Decimal("-30.00")


def test_shared_booking():
    derived = derive_shared_booking_fields(
        {"adult": "4", "child": "2"}, {"adult": "150", "child": "75"},
        agent_discount_percentage="10", paid_amount="675"
    )
    assert derived == {
        "number_of_people": 6,
        "total_amount": Decimal("750.00"),
        "commission_amount": Decimal("75.00"),
        "net_amount": Decimal("675.00"),
        "balance": Decimal("0.00"),
        "payment_status": PaymentStatus.PAID,
    }


def test_shared_booking_without_prices_counts_guests_only():
    derived = derive_shared_booking_fields({"adult": 3}, None)
    assert derived["number_of_people"] == 3
    assert derived["total_amount"] == Decimal("0.00")
    assert derived["payment_status"] == PaymentStatus.PAID


def test_private_booking():
    derived = derive_private_booking_fields(
        {"total_amount": "2000", "discount_percentage": "10", "paid_amount": "500"}
    )
    assert derived["net_amount"] == Decimal("1800.00")
    assert derived["balance"] == Decimal("1300.00")
    assert derived["payment_status"] == PaymentStatus.PARTIAL


def test_payroll():
    derived = derive_payroll_fields({
        "basic_salary": "3000", "allowance": "300", "accommodation_allowance": "200",
        "overtime_amount": "100", "deductions": "50", "advance_salary": "500",
    })
    assert derived == {
        "total_earnings": Decimal("3600.00"),
        "total_deductions": Decimal("550.00"),
        "net_salary": Decimal("3050.00"),
    }


def test_invoice_and_report():
    assert derive_invoice_fields({"amount": "1000", "tax_amount": "50", "discount_amount": "25"}) == {
        "final_amount": Decimal("1025.00")
    }
    assert derive_financial_report_fields({"total_income": "800", "total_expenses": "1200"}) == {
        "profit": Decimal("-400.00")
    }


@pytest.mark.parametrize("balance, paid, expected", [
    ("0", "0", PaymentStatus.PAID),
    ("-10", "500", PaymentStatus.PAID),
    ("100", "1", PaymentStatus.PARTIAL),
    ("100", "0", PaymentStatus.UNPAID),
    ("100", None, PaymentStatus.UNPAID),
])
def test_payment_status(balance, paid, expected):
    assert derive_payment_status(balance, paid) == expected

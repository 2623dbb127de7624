# charterdesk/business_logic/calculations/derived_fields.py
"""
Derived record fields, computed from the raw values typed into a form.

Every function here is pure: forms call them on each input change and managers
call them again before persisting, so stored derived fields always match the
stored raw fields. Outputs are Decimals rounded to cents.
"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from charterdesk.constants import PaymentStatus
from .money import Money, as_money
from .discount_engine import apply_sequential_discounts
from .tax_engine import apply_tax
from .commission_engine import compute_commission
from .revenue_projection import expected_revenue
from .payroll_calculator import PayrollEarnings, PayrollDeductions, compute_payroll
from .guest_pricing_calculator import compute_shared_total, count_guests

OPPORTUNITY_COST_FIELDS = (
    "base_price", "vip_cost", "alcohol_cost", "catering_cost", "extra_hour_cost", "addons_total",
)


def _get(raw: Optional[Mapping[str, Any]], key: str) -> Any:
    return raw.get(key) if raw else None


def derive_payment_status(balance: Any, paid_amount: Any) -> PaymentStatus:
    if as_money(balance) <= Money.zero():
        return PaymentStatus.PAID
    if as_money(paid_amount) > Money.zero():
        return PaymentStatus.PARTIAL
    return PaymentStatus.UNPAID


def derive_opportunity_fields(raw: Optional[Mapping[str, Any]]) -> Dict[str, Decimal]:
    """
    Quote figures of a sales opportunity.

    costs -> agent/client discounts on the undiscounted total -> VAT on the
    subtotal -> balance after the advance -> probability-weighted revenue.
    """
    total_before_discount = Money.total(_get(raw, name) for name in OPPORTUNITY_COST_FIELDS)
    discounts = apply_sequential_discounts(
        total_before_discount,
        [_get(raw, "agent_discount_percentage"), _get(raw, "client_discount_percentage")],
    )
    taxed = apply_tax(discounts.subtotal, _get(raw, "vat_percentage"))
    balance = taxed.total - as_money(_get(raw, "advance_paid"))
    revenue = expected_revenue(taxed.total, _get(raw, "probability_percentage"))

    agent_discount, client_discount = discounts.discount_amounts
    return {
        "total_before_discount": total_before_discount.as_decimal(),
        "agent_discount_amount": agent_discount.as_decimal(),
        "client_discount_amount": client_discount.as_decimal(),
        "subtotal": discounts.subtotal.as_decimal(),
        "vat_amount": taxed.tax_amount.as_decimal(),
        "total_amount": taxed.total.as_decimal(),
        "balance_amount": balance.as_decimal(),
        "expected_revenue": revenue.as_decimal(),
    }


def derive_shared_booking_fields(guest_counts: Optional[Mapping],
                                 unit_prices: Optional[Mapping],
                                 agent_discount_percentage: Any = None,
                                 paid_amount: Any = None) -> Dict[str, Any]:
    total = compute_shared_total(guest_counts, unit_prices)
    commission = compute_commission(total, agent_discount_percentage)
    balance = commission.net_amount - as_money(paid_amount)
    return {
        "number_of_people": count_guests(guest_counts),
        "total_amount": total.as_decimal(),
        "commission_amount": commission.commission_amount.as_decimal(),
        "net_amount": commission.net_amount.as_decimal(),
        "balance": balance.as_decimal(),
        "payment_status": derive_payment_status(balance, paid_amount),
    }


def derive_private_booking_fields(raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    discounted = compute_commission(_get(raw, "total_amount"), _get(raw, "discount_percentage"))
    paid_amount = _get(raw, "paid_amount")
    balance = discounted.net_amount - as_money(paid_amount)
    return {
        "net_amount": discounted.net_amount.as_decimal(),
        "balance": balance.as_decimal(),
        "payment_status": derive_payment_status(balance, paid_amount),
    }


def derive_payroll_fields(raw: Optional[Mapping[str, Any]]) -> Dict[str, Decimal]:
    raw = raw or {}
    result = compute_payroll(PayrollEarnings.from_record(raw), PayrollDeductions.from_record(raw))
    return {
        "total_earnings": result.total_earnings.as_decimal(),
        "total_deductions": result.total_deductions.as_decimal(),
        "net_salary": result.net_salary.as_decimal(),
    }


def derive_invoice_fields(raw: Optional[Mapping[str, Any]]) -> Dict[str, Decimal]:
    final_amount = (as_money(_get(raw, "amount"))
                    + as_money(_get(raw, "tax_amount"))
                    - as_money(_get(raw, "discount_amount")))
    return {"final_amount": final_amount.as_decimal()}


def derive_financial_report_fields(raw: Optional[Mapping[str, Any]]) -> Dict[str, Decimal]:
    profit = as_money(_get(raw, "total_income")) - as_money(_get(raw, "total_expenses"))
    return {"profit": profit.as_decimal()}

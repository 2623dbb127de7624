# charterdesk/business_logic/calculations/__init__.py
from .money import Money, to_decimal, to_int, as_money, add, subtract, multiply_by_percent
from .discount_engine import DiscountResult, apply_sequential_discounts
from .tax_engine import TaxResult, apply_tax
from .commission_engine import CommissionResult, compute_commission, apply_flat_deductions
from .revenue_projection import expected_revenue
from .payroll_calculator import PayrollEarnings, PayrollDeductions, PayrollResult, compute_payroll
from .guest_pricing_calculator import compute_shared_total, count_guests, normalize_guest_counts
from .derived_fields import (
    derive_opportunity_fields, derive_shared_booking_fields, derive_private_booking_fields,
    derive_payroll_fields, derive_invoice_fields, derive_financial_report_fields,
    derive_payment_status,
)

__all__ = [
    "Money", "to_decimal", "to_int", "as_money", "add", "subtract", "multiply_by_percent",
    "DiscountResult", "apply_sequential_discounts",
    "TaxResult", "apply_tax",
    "CommissionResult", "compute_commission", "apply_flat_deductions",
    "expected_revenue",
    "PayrollEarnings", "PayrollDeductions", "PayrollResult", "compute_payroll",
    "compute_shared_total", "count_guests", "normalize_guest_counts",
    "derive_opportunity_fields", "derive_shared_booking_fields", "derive_private_booking_fields",
    "derive_payroll_fields", "derive_invoice_fields", "derive_financial_report_fields",
    "derive_payment_status",
]

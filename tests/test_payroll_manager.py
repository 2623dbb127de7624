# tests/test_payroll_manager.py

from datetime import date
from decimal import Decimal

import pytest

from charterdesk.constants import PayrollStatus, EmployeeStatus


@pytest.fixture
def employee(employee_manager):
    return employee_manager.add_employee(
        "Rashid Khan", basic_salary="3000", designation="Deckhand",
        allowance="300", accommodation_allowance="200"
    )


def test_blank_earnings_are_filled_from_employee_package(payroll_manager, employee):
    payroll = payroll_manager.generate_payroll(
        employee.id, "March", 2025,
        basic_salary="", overtime_amount="100", deductions="50", advance_salary="500"
    )

    assert payroll.basic_salary == Decimal("3000.00")
    assert payroll.allowance == Decimal("300.00")
    assert payroll.total_earnings == Decimal("3600.00")
    assert payroll.total_deductions == Decimal("550.00")
    assert payroll.net_salary == Decimal("3050.00")
    assert payroll.payment_status is PayrollStatus.PENDING
    assert payroll.period_label == "March 2025"


def test_entered_values_override_defaults(payroll_manager, employee):
    payroll = payroll_manager.generate_payroll(employee.id, "April", "2025", basic_salary="2500", allowance="0")
    assert payroll.basic_salary == Decimal("2500.00")
    assert payroll.allowance == Decimal("0.00")
    assert payroll.year == 2025


def test_negative_net_salary_is_kept(payroll_manager, employee):
    payroll = payroll_manager.generate_payroll(employee.id, "May", 2025, advance_salary="10000")
    assert payroll.net_salary == Decimal("-6500.00")


@pytest.mark.parametrize("month, year", [("Marchh", 2025), ("march", 2025), ("March", 0), ("March", "abc")])
def test_invalid_period(payroll_manager, employee, month, year):
    with pytest.raises(ValueError):
        payroll_manager.generate_payroll(employee.id, month, year)


def test_unknown_employee_or_field(payroll_manager, employee):
    with pytest.raises(ValueError):
        payroll_manager.generate_payroll(9999, "March", 2025)
    with pytest.raises(ValueError):
        payroll_manager.generate_payroll(employee.id, "March", 2025, bonus="100")


def test_update_recomputes_totals(payroll_manager, employee):
    payroll = payroll_manager.generate_payroll(employee.id, "June", 2025)
    updated = payroll_manager.update_payroll(payroll.id, absent_deduction="250", notes="2 days off")
    assert updated.net_salary == Decimal("3250.00")
    assert payroll_manager.get_payroll_by_id(payroll.id).notes == "2 days off"


def test_pay_hold_and_delete_rules(payroll_manager, employee):
    held = payroll_manager.generate_payroll(employee.id, "July", 2025)
    paid = payroll_manager.generate_payroll(employee.id, "August", 2025)

    assert payroll_manager.put_on_hold(held.id).payment_status is PayrollStatus.HOLD

    result = payroll_manager.mark_as_paid(paid.id, payment_date=date(2025, 9, 1))
    assert result.payment_status is PayrollStatus.PAID
    assert result.payment_date == date(2025, 9, 1)
    again = payroll_manager.mark_as_paid(paid.id)
    assert again.payment_date == date(2025, 9, 1)

    with pytest.raises(ValueError):
        payroll_manager.put_on_hold(paid.id)
    with pytest.raises(ValueError):
        payroll_manager.delete_payroll(paid.id)
    assert payroll_manager.delete_payroll(held.id) is True
    with pytest.raises(ValueError):
        payroll_manager.mark_as_paid(0)


def test_listing_and_totals(payroll_manager, employee_manager, employee):
    other = employee_manager.add_employee("Maya", basic_salary="1000")
    first = payroll_manager.generate_payroll(employee.id, "January", 2025)
    payroll_manager.generate_payroll(other.id, "January", 2025)
    payroll_manager.mark_as_paid(first.id)

    assert len(payroll_manager.get_payrolls(employee_id=employee.id)) == 1
    assert len(payroll_manager.get_payrolls(status=PayrollStatus.PENDING)) == 1
    assert payroll_manager.get_payrolls(employee_id=other.id, status=PayrollStatus.PAID) == []

    totals = payroll_manager.get_payroll_totals()
    assert totals["count"] == 2
    assert totals["total_net_salary"] == Decimal("4500.00")
    assert totals["paid"] == Decimal("3500.00")
    assert totals["pending"] == Decimal("1000.00")
    assert totals["hold"] == Decimal("0.00")


def test_employee_management(employee_manager, employee):
    assert employee_manager.get_payroll_defaults(employee.id)["allowance"] == Decimal("300.00")
    employee_manager.update_employee(employee.id, status=EmployeeStatus.INACTIVE)
    assert employee_manager.get_active_employees() == []
    with pytest.raises(ValueError):
        employee_manager.add_employee("  ")
    with pytest.raises(ValueError):
        employee_manager.add_employee("Zed", overtime_amount="10")

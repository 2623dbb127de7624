# tests/test_payslip.py

from datetime import date, datetime
from decimal import Decimal

from charterdesk.business_logic.entities.employee_entity import EmployeeEntity
from charterdesk.business_logic.entities.payroll_entity import PayrollEntity
from charterdesk.business_logic.payslip_builder import build_payslip_html
from charterdesk.config import COMPANY_NAME
from charterdesk.constants import PayrollStatus


def _payroll(**overrides):
    values = dict(
        employee_id=7, month="March", year=2025,
        basic_salary=Decimal("3000.00"), allowance=Decimal("300.00"),
        total_earnings=Decimal("3300.00"), advance_salary=Decimal("500.00"),
        total_deductions=Decimal("500.00"), net_salary=Decimal("2800.00"),
        id=1
    )
    values.update(overrides)
    return PayrollEntity(**values)


def test_payslip_lists_earnings_deductions_and_net():
    employee = EmployeeEntity(full_name="Rashid <Khan>", designation="Captain", id=7)
    html = build_payslip_html(_payroll(), employee, generated_at=datetime(2025, 4, 1, 10, 0))

    assert COMPANY_NAME in html
    assert "Rashid &lt;Khan&gt;" in html
    assert "March 2025" in html
    assert "AED 3,000.00" in html
    assert "AED 2,800.00" in html
    assert "Pending" in html
    assert "PENDING" in html
    assert "Generated on 2025-04-01 10:00:00" in html


def test_payslip_without_employee_record():
    html = build_payslip_html(
        _payroll(payment_status=PayrollStatus.PAID, payment_date=date(2025, 4, 2), notes="Eid bonus paid separately")
    )
    assert "Employee #7" in html
    assert "2025-04-02" in html
    assert "Eid bonus paid separately" in html

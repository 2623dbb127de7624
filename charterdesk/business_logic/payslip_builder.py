# charterdesk/business_logic/payslip_builder.py

from typing import Optional
from datetime import datetime
from decimal import Decimal
from html import escape
import logging

from charterdesk.business_logic.entities.payroll_entity import PayrollEntity
from charterdesk.business_logic.entities.employee_entity import EmployeeEntity
from charterdesk.config import COMPANY_NAME, DEFAULT_CURRENCY
from charterdesk.constants import DATETIME_FORMAT

logger = logging.getLogger(__name__)

# --- WeasyPrint Import ---
try:
    from weasyprint import HTML
    WEASYPRINT_AVAILABLE = True
except (ImportError, OSError): # OSError when the Pango system libraries are missing
    WEASYPRINT_AVAILABLE = False
    HTML = None
    logger.warning("WeasyPrint could not be loaded. Payslip PDF export will be disabled.")

_STYLE = """
@page { size: A4; margin: 20mm; }
body { font-family: Arial, sans-serif; color: #111827; font-size: 11pt; }
.header { text-align: center; border-bottom: 3px solid #1E40AF; padding-bottom: 12px; margin-bottom: 20px; }
.company-name { font-size: 22pt; font-weight: bold; color: #1E40AF; }
.slip-title { font-size: 16pt; font-weight: bold; color: #374151; }
table.info { width: 100%; background: #F3F4F6; margin-bottom: 20px; padding: 10px; }
table.info td.label { font-weight: bold; color: #4B5563; width: 25%; }
.section-title { font-weight: bold; padding: 6px 10px; margin-top: 16px; }
.earnings { background: #D1FAE5; color: #065F46; }
.deductions { background: #FEE2E2; color: #991B1B; }
table.lines { width: 100%; border-collapse: collapse; }
table.lines td { padding: 6px 10px; border-bottom: 1px solid #E5E7EB; }
table.lines td.amount { text-align: right; font-weight: bold; }
tr.total td { background: #F9FAFB; font-weight: bold; }
.net-salary { margin-top: 20px; padding: 14px; background: #1E40AF; color: white; font-size: 14pt; font-weight: bold; }
.net-salary span.amount { float: right; }
.notes { margin-top: 16px; padding: 10px; background: #FEF3C7; border-left: 4px solid #F59E0B; }
.footer { margin-top: 30px; border-top: 2px solid #E5E7EB; padding-top: 10px; text-align: center; color: #6B7280; font-size: 9pt; }
"""


def _amount(value: Optional[Decimal]) -> str:
    return f"{DEFAULT_CURRENCY} {(value or Decimal('0')):,.2f}"


def _line(label: str, value: Optional[Decimal], css_class: str = "") -> str:
    row_class = f" class='{css_class}'" if css_class else ""
    return f"<tr{row_class}><td>{escape(label)}</td><td class='amount'>{_amount(value)}</td></tr>"


def build_payslip_html(payroll: PayrollEntity, employee: Optional[EmployeeEntity] = None,
                       generated_at: Optional[datetime] = None) -> str:
    """Renders one payroll as a printable salary slip."""
    generated_at = generated_at or datetime.now()
    name = escape(employee.full_name) if employee else f"Employee #{payroll.employee_id}"
    designation = escape(employee.designation or "-") if employee else "-"
    department = escape(employee.department or "-") if employee else "-"
    payment_date = payroll.payment_date.isoformat() if payroll.payment_date else "Pending"

    html = f"""<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>Salary Slip - {name}</title><style>{_STYLE}</style></head>
<body>
<div class="header"><div class="company-name">{escape(COMPANY_NAME)}</div><div class="slip-title">SALARY SLIP</div></div>
<table class="info">
<tr><td class="label">Employee Name:</td><td>{name}</td><td class="label">Employee ID:</td><td>{payroll.employee_id}</td></tr>
<tr><td class="label">Designation:</td><td>{designation}</td><td class="label">Department:</td><td>{department}</td></tr>
<tr><td class="label">Pay Period:</td><td>{escape(payroll.period_label)}</td><td class="label">Payment Date:</td><td>{payment_date}</td></tr>
<tr><td class="label">Status:</td><td>{payroll.payment_status.value.upper()}</td><td></td><td></td></tr>
</table>
<div class="section-title earnings">EARNINGS</div>
<table class="lines">"""
    html += _line("Basic Salary", payroll.basic_salary)
    html += _line("Allowance", payroll.allowance)
    html += _line("Accommodation Allowance", payroll.accommodation_allowance)
    html += _line("Sales Commission", payroll.sales_commission)
    html += _line("Bar Commission", payroll.bar_commission)
    html += _line("Overtime Amount", payroll.overtime_amount)
    html += _line("TOTAL EARNINGS", payroll.total_earnings, "total")
    html += "</table><div class='section-title deductions'>DEDUCTIONS</div><table class='lines'>"
    html += _line("Other Deductions", payroll.deductions)
    html += _line("Advance Salary", payroll.advance_salary)
    html += _line("Absent Deduction", payroll.absent_deduction)
    html += _line("TOTAL DEDUCTIONS", payroll.total_deductions, "total")
    html += "</table>"
    html += f"<div class='net-salary'>NET SALARY <span class='amount'>{_amount(payroll.net_salary)}</span></div>"
    if payroll.notes:
        html += f"<div class='notes'><strong>Notes:</strong> {escape(payroll.notes)}</div>"
    html += (f"<div class='footer'>Generated on {generated_at.strftime(DATETIME_FORMAT)}<br>"
             "This is a computer-generated document and does not require a signature.</div>")
    html += "</body></html>"
    return html


def export_payslip_pdf(payroll: PayrollEntity, file_path: str,
                       employee: Optional[EmployeeEntity] = None) -> str:
    if not WEASYPRINT_AVAILABLE:
        raise RuntimeError("WeasyPrint is not installed; payslips cannot be exported to PDF.")
    html_content = build_payslip_html(payroll, employee)
    try:
        HTML(string=html_content).write_pdf(file_path)
    except Exception as e:
        logger.error(f"Failed to export payslip for payroll ID {payroll.id} to {file_path}: {e}", exc_info=True)
        raise
    logger.info(f"Payslip for payroll ID {payroll.id} ({payroll.period_label}) written to {file_path}.")
    return file_path

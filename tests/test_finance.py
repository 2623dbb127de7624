# tests/test_finance.py

from datetime import date
from decimal import Decimal

import pytest

from charterdesk.constants import InvoiceStatus, LedgerEntryType, SourceModule, PaymentMethod


def test_invoice_from_booking(invoice_manager, booking_manager):
    booking = booking_manager.create_private_booking("Mariam", total_amount="1500")
    invoice = invoice_manager.create_invoice(
        invoice_date=date(2025, 3, 1), booking_id=booking.id, tax_amount="75", discount_amount="25"
    )

    assert invoice.invoice_number.startswith("INV")
    assert invoice.customer_name == "Mariam"
    assert invoice.amount == Decimal("1500.00")
    assert invoice.final_amount == Decimal("1550.00")
    assert invoice_manager.get_invoices_for_booking(booking.id)[0].id == invoice.id
    assert invoice_manager.get_invoice_by_number(invoice.invoice_number).id == invoice.id


def test_invoice_validation(invoice_manager):
    with pytest.raises(ValueError):
        invoice_manager.create_invoice(invoice_date=date(2025, 3, 10), due_date=date(2025, 3, 1), amount="10")
    with pytest.raises(ValueError):
        invoice_manager.create_invoice(booking_id=9999)


def test_invoice_update_pay_and_delete(invoice_manager):
    first = invoice_manager.create_invoice(customer_name="Walk-in", amount="100")
    second = invoice_manager.create_invoice(customer_name="Walk-in", amount="40", tax_amount="2")
    assert first.invoice_number != second.invoice_number

    updated = invoice_manager.update_invoice(first.id, tax_amount="5")
    assert updated.final_amount == Decimal("105.00")

    paid = invoice_manager.mark_as_paid(first.id, payment_method=PaymentMethod.CARD)
    assert paid.status is InvoiceStatus.PAID
    assert paid.payment_method is PaymentMethod.CARD
    with pytest.raises(ValueError):
        invoice_manager.delete_invoice(first.id)

    totals = invoice_manager.get_invoice_totals()
    assert totals == {"count": 2, "paid": Decimal("105.00"), "unpaid": Decimal("42.00")}

    invoice_manager.update_invoice(second.id, status=InvoiceStatus.CANCELLED)
    with pytest.raises(ValueError):
        invoice_manager.mark_as_paid(second.id)
    assert invoice_manager.delete_invoice(second.id) is True


def test_ledger_entries_and_totals(ledger_manager):
    ledger_manager.add_entry(LedgerEntryType.INCOME, "1000", date(2025, 3, 1), SourceModule.CRM)
    ledger_manager.add_entry(LedgerEntryType.INCOME, "250", date(2025, 3, 15), SourceModule.POS)
    ledger_manager.add_entry(LedgerEntryType.EXPENSE, "400", date(2025, 3, 31), SourceModule.HRMS)
    ledger_manager.add_entry(LedgerEntryType.EXPENSE, "90", date(2025, 4, 2), category="Fuel")

    march = ledger_manager.get_totals(date(2025, 3, 1), date(2025, 3, 31))
    assert march == {"income": Decimal("1250.00"), "expense": Decimal("400.00"), "net": Decimal("850.00")}
    assert len(ledger_manager.get_entries(start_date=date(2025, 3, 20))) == 2
    assert len(ledger_manager.get_entries(end_date=date(2025, 3, 1))) == 1
    expenses = ledger_manager.get_entries(entry_type=LedgerEntryType.EXPENSE)
    assert [e.signed_amount for e in expenses] == [Decimal("-400"), Decimal("-90")]

    with pytest.raises(ValueError):
        ledger_manager.get_entries(date(2025, 4, 1), date(2025, 3, 1))


@pytest.mark.parametrize("amount", ["0", "-5", "", "abc"])
def test_ledger_rejects_non_positive_amounts(ledger_manager, amount):
    with pytest.raises(ValueError):
        ledger_manager.add_entry(LedgerEntryType.INCOME, amount)


def test_ledger_rejects_unknown_entry_type(ledger_manager):
    with pytest.raises(ValueError):
        ledger_manager.add_entry("income", "10")


def test_reports_and_figures_from_ledger(financial_report_manager, ledger_manager):
    ledger_manager.add_entry(LedgerEntryType.INCOME, "1000", date(2025, 3, 1), SourceModule.CRM)
    ledger_manager.add_entry(LedgerEntryType.INCOME, "200", date(2025, 3, 2), SourceModule.MANUAL)
    ledger_manager.add_entry(LedgerEntryType.EXPENSE, "300", date(2025, 3, 3), SourceModule.HRMS)
    ledger_manager.add_entry(LedgerEntryType.EXPENSE, "100", date(2025, 3, 4), SourceModule.INVENTORY)
    ledger_manager.add_entry(LedgerEntryType.EXPENSE, "50", date(2025, 3, 5))

    figures = financial_report_manager.figures_from_ledger(date(2025, 3, 1), date(2025, 3, 31))
    assert figures == {
        "total_income": Decimal("1200.00"),
        "booking_income": Decimal("1000.00"),
        "other_income": Decimal("200.00"),
        "total_expenses": Decimal("450.00"),
        "payroll_expenses": Decimal("300.00"),
        "purchase_expenses": Decimal("100.00"),
        "operational_expenses": Decimal("50.00"),
    }

    report = financial_report_manager.create_report("March 2025", **figures)
    assert report.profit == Decimal("750.00")

    loss = financial_report_manager.create_report("April 2025", total_income="100", total_expenses="300")
    assert loss.profit == Decimal("-200.00")

    updated = financial_report_manager.update_report(loss.id, total_income="500")
    assert updated.profit == Decimal("200.00")

    assert financial_report_manager.get_aggregates() == {
        "total_income": Decimal("1700.00"),
        "total_expenses": Decimal("750.00"),
        "profit": Decimal("950.00"),
    }
    assert financial_report_manager.delete_report(loss.id) is True
    assert len(financial_report_manager.get_all_reports()) == 1


def test_report_validation(financial_report_manager):
    with pytest.raises(ValueError):
        financial_report_manager.create_report("  ")
    with pytest.raises(ValueError):
        financial_report_manager.create_report("May 2025", revenue="10")
    with pytest.raises(ValueError):
        financial_report_manager.update_report(9999, notes="x")

# charterdesk/business_logic/financial_report_manager.py

from typing import Optional, List, Dict, Any
from datetime import date
from decimal import Decimal
import logging

from charterdesk.business_logic.entities.financial_report_entity import FinancialReportEntity
from charterdesk.data_access.financial_reports_repository import FinancialReportsRepository
from charterdesk.business_logic.ledger_manager import LedgerManager
from charterdesk.business_logic.calculations.money import Money
from charterdesk.business_logic.calculations.derived_fields import derive_financial_report_fields
from charterdesk.constants import LedgerEntryType, SourceModule

logger = logging.getLogger(__name__)

FIGURE_FIELDS = ("total_income", "booking_income", "other_income", "total_expenses",
                 "payroll_expenses", "purchase_expenses", "operational_expenses")


class FinancialReportManager:
    def __init__(self,
                 financial_reports_repository: FinancialReportsRepository,
                 ledger_manager: Optional[LedgerManager] = None):
        if financial_reports_repository is None: raise ValueError("financial_reports_repository cannot be None")
        self.financial_reports_repository = financial_reports_repository
        self.ledger_manager = ledger_manager

    def create_report(self, report_period: str, notes: Optional[str] = None, **figures) -> FinancialReportEntity:
        if not report_period or not report_period.strip():
            raise ValueError("Report period cannot be empty.")
        unknown = set(figures) - set(FIGURE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown report figures: {', '.join(sorted(unknown))}")

        report = FinancialReportEntity(
            report_period=report_period.strip(),
            notes=notes,
            **{name: Money.of(figures.get(name)).as_decimal() for name in FIGURE_FIELDS}
        )
        report.profit = derive_financial_report_fields(
            {"total_income": report.total_income, "total_expenses": report.total_expenses})["profit"]

        created = self.financial_reports_repository.add(report)
        if created is None:
            raise ValueError(f"Financial report for '{report_period}' could not be saved.")
        logger.info(f"Financial report '{created.report_period}' created (ID: {created.id}). Profit: {created.profit}")
        return created

    def update_report(self, report_id: int, **kwargs) -> FinancialReportEntity:
        report = self.financial_reports_repository.get_by_id(report_id)
        if not report:
            raise ValueError(f"Financial report with ID {report_id} not found.")
        for name in FIGURE_FIELDS:
            if name in kwargs:
                setattr(report, name, Money.of(kwargs[name]).as_decimal())
        if "report_period" in kwargs:
            report.report_period = kwargs["report_period"]
        if "notes" in kwargs:
            report.notes = kwargs["notes"]
        report.profit = derive_financial_report_fields(
            {"total_income": report.total_income, "total_expenses": report.total_expenses})["profit"]

        updated = self.financial_reports_repository.update(report)
        if updated is None:
            raise ValueError(f"Financial report with ID {report_id} could not be updated.")
        logger.info(f"Financial report ID {report_id} updated. Profit: {updated.profit}")
        return updated

    def get_report_by_id(self, report_id: int) -> Optional[FinancialReportEntity]:
        return self.financial_reports_repository.get_by_id(report_id)

    def get_all_reports(self) -> List[FinancialReportEntity]:
        return self.financial_reports_repository.get_all(order_by="id DESC")

    def delete_report(self, report_id: int) -> bool:
        if not self.financial_reports_repository.get_by_id(report_id):
            raise ValueError(f"Financial report with ID {report_id} not found.")
        return self.financial_reports_repository.delete(report_id)

    def get_aggregates(self) -> Dict[str, Decimal]:
        reports = self.financial_reports_repository.get_all()
        return {
            "total_income": Money.total(r.total_income for r in reports).as_decimal(),
            "total_expenses": Money.total(r.total_expenses for r in reports).as_decimal(),
            "profit": Money.total(r.profit for r in reports).as_decimal(),
        }

    def figures_from_ledger(self, start_date: date, end_date: date) -> Dict[str, Decimal]:
        """
        Suggested report figures for a period, summed from the ledger.
        CRM and POS income count as booking income; HRMS expenses as payroll and
        inventory expenses as purchases. Everything else is other/operational.
        """
        if self.ledger_manager is None:
            raise ValueError("A ledger manager is needed to summarise ledger figures.")
        by_source = self.ledger_manager.get_totals_by_source(start_date, end_date)
        income = by_source[LedgerEntryType.INCOME]
        expense = by_source[LedgerEntryType.EXPENSE]

        booking_income = Money.total([income[SourceModule.CRM], income[SourceModule.POS]])
        total_income = Money.total(income.values())
        payroll_expenses = Money.of(expense[SourceModule.HRMS])
        purchase_expenses = Money.of(expense[SourceModule.INVENTORY])
        total_expenses = Money.total(expense.values())
        figures = {
            "total_income": total_income,
            "booking_income": booking_income,
            "other_income": total_income - booking_income,
            "total_expenses": total_expenses,
            "payroll_expenses": payroll_expenses,
            "purchase_expenses": purchase_expenses,
            "operational_expenses": total_expenses - payroll_expenses - purchase_expenses,
        }
        logger.debug(f"Ledger figures for {start_date} to {end_date}: {figures}")
        return {name: value.as_decimal() for name, value in figures.items()}

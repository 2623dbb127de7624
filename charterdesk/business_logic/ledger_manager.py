# charterdesk/business_logic/ledger_manager.py

from typing import Optional, List, Dict, Any
from datetime import date
from decimal import Decimal
import logging

from charterdesk.business_logic.entities.ledger_entry_entity import LedgerEntryEntity
from charterdesk.data_access.ledger_entries_repository import LedgerEntriesRepository
from charterdesk.business_logic.calculations.money import Money
from charterdesk.constants import LedgerEntryType, SourceModule, PaymentMethod

logger = logging.getLogger(__name__)


class LedgerManager:
    def __init__(self, ledger_entries_repository: LedgerEntriesRepository):
        if ledger_entries_repository is None: raise ValueError("ledger_entries_repository cannot be None")
        self.ledger_entries_repository = ledger_entries_repository

    def add_entry(self,
                  entry_type: LedgerEntryType,
                  amount: Any,
                  transaction_date: Optional[date] = None,
                  source_module: SourceModule = SourceModule.MANUAL,
                  category: Optional[str] = None,
                  description: Optional[str] = None,
                  payment_method: Optional[PaymentMethod] = PaymentMethod.CASH,
                  reference_id: Optional[int] = None) -> LedgerEntryEntity:
        if not isinstance(entry_type, LedgerEntryType):
            raise ValueError(f"Invalid ledger entry type: {entry_type}")
        parsed_amount = Money.of(amount)
        if parsed_amount <= Money.zero():
            raise ValueError("Ledger amount must be greater than zero.")

        entry = LedgerEntryEntity(
            transaction_date=transaction_date or date.today(),
            entry_type=entry_type,
            amount=parsed_amount.as_decimal(),
            source_module=source_module,
            category=category,
            description=description,
            payment_method=payment_method,
            reference_id=reference_id
        )
        try:
            created = self.ledger_entries_repository.add(entry)
            if created is None:
                raise ValueError("Ledger entry could not be saved.")
            logger.info(f"Ledger {created.entry_type.value} of {created.amount} recorded (ID: {created.id}, "
                        f"source: {created.source_module.value}).")
            return created
        except Exception as e:
            logger.error(f"Error recording ledger entry: {e}", exc_info=True)
            raise

    def get_entries(self,
                    start_date: Optional[date] = None,
                    end_date: Optional[date] = None,
                    entry_type: Optional[LedgerEntryType] = None) -> List[LedgerEntryEntity]:
        if start_date and end_date and end_date < start_date:
            raise ValueError("End date cannot be before start date.")
        entries = self.ledger_entries_repository.get_by_date_range(start_date, end_date)
        if entry_type is not None:
            entries = [e for e in entries if e.entry_type == entry_type]
        return entries

    def delete_entry(self, entry_id: int) -> bool:
        if not self.ledger_entries_repository.get_by_id(entry_id):
            raise ValueError(f"Ledger entry with ID {entry_id} not found.")
        return self.ledger_entries_repository.delete(entry_id)

    def get_totals(self, start_date: Optional[date] = None,
                   end_date: Optional[date] = None) -> Dict[str, Decimal]:
        entries = self.get_entries(start_date, end_date)
        income = Money.total(e.amount for e in entries if e.entry_type == LedgerEntryType.INCOME)
        expense = Money.total(e.amount for e in entries if e.entry_type == LedgerEntryType.EXPENSE)
        return {
            "income": income.as_decimal(),
            "expense": expense.as_decimal(),
            "net": (income - expense).as_decimal(),
        }

    def get_totals_by_source(self, start_date: Optional[date] = None,
                             end_date: Optional[date] = None) -> Dict[LedgerEntryType, Dict[SourceModule, Decimal]]:
        totals = {entry_type: {module: Money.zero() for module in SourceModule} for entry_type in LedgerEntryType}
        for entry in self.get_entries(start_date, end_date):
            bucket = totals[entry.entry_type]
            bucket[entry.source_module] = bucket[entry.source_module] + entry.amount
        return {entry_type: {module: amount.as_decimal() for module, amount in modules.items()}
                for entry_type, modules in totals.items()}

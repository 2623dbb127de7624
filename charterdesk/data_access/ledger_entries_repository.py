# charterdesk/data_access/ledger_entries_repository.py

from typing import List, Optional
from datetime import date

from charterdesk.data_access.base_repository import BaseRepository
from charterdesk.data_access.database_manager import DatabaseManager
from charterdesk.business_logic.entities.ledger_entry_entity import LedgerEntryEntity
import logging

logger = logging.getLogger(__name__)

class LedgerEntriesRepository(BaseRepository[LedgerEntryEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=LedgerEntryEntity,
                         table_name="ledger_entries")

    def get_by_date_range(self, start_date: Optional[date] = None,
                          end_date: Optional[date] = None) -> List[LedgerEntryEntity]:
        criteria = {}
        if start_date and end_date:
            criteria["transaction_date"] = ("BETWEEN", (start_date, end_date))
        elif start_date:
            criteria["transaction_date"] = (">=", start_date)
        elif end_date:
            criteria["transaction_date"] = ("<=", end_date)
        return self.find_by_criteria(criteria, order_by="transaction_date, id")

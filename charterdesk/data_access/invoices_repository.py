# charterdesk/data_access/invoices_repository.py

from typing import List, Optional

from charterdesk.data_access.base_repository import BaseRepository
from charterdesk.data_access.database_manager import DatabaseManager
from charterdesk.business_logic.entities.invoice_entity import InvoiceEntity
import logging

logger = logging.getLogger(__name__)

class InvoicesRepository(BaseRepository[InvoiceEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=InvoiceEntity,
                         table_name="invoices")

    def get_by_invoice_number(self, invoice_number: str) -> Optional[InvoiceEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE invoice_number = ?"
        row = self.db_manager.fetch_one(query, (invoice_number,))
        return self._entity_from_row(dict(row)) if row else None

    def get_by_booking_id(self, booking_id: int) -> List[InvoiceEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE booking_id = ? ORDER BY invoice_date"
        rows = self.db_manager.fetch_all(query, (booking_id,))
        return [self._entity_from_row(dict(row)) for row in rows if row]

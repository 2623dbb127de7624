# charterdesk/data_access/payrolls_repository.py

from typing import List, Optional

from charterdesk.data_access.base_repository import BaseRepository
from charterdesk.data_access.database_manager import DatabaseManager
from charterdesk.business_logic.entities.payroll_entity import PayrollEntity
from charterdesk.constants import PayrollStatus
import logging

logger = logging.getLogger(__name__)

class PayrollsRepository(BaseRepository[PayrollEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=PayrollEntity,
                         table_name="payrolls")

    def get_by_employee_id(self, employee_id: int) -> List[PayrollEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE employee_id = ? ORDER BY year DESC, id DESC"
        rows = self.db_manager.fetch_all(query, (employee_id,))
        return [self._entity_from_row(dict(row)) for row in rows if row]

    def get_by_status(self, status: PayrollStatus) -> List[PayrollEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE payment_status = ? ORDER BY year DESC, id DESC"
        rows = self.db_manager.fetch_all(query, (status.value,))
        return [self._entity_from_row(dict(row)) for row in rows if row]

    def get_for_period(self, employee_id: int, month: str, year: int) -> Optional[PayrollEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE employee_id = ? AND month = ? AND year = ?"
        row = self.db_manager.fetch_one(query, (employee_id, month, year))
        return self._entity_from_row(dict(row)) if row else None

# charterdesk/data_access/employees_repository.py

from typing import List

from charterdesk.data_access.base_repository import BaseRepository
from charterdesk.data_access.database_manager import DatabaseManager
from charterdesk.business_logic.entities.employee_entity import EmployeeEntity
from charterdesk.constants import EmployeeStatus
import logging

logger = logging.getLogger(__name__)

class EmployeesRepository(BaseRepository[EmployeeEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=EmployeeEntity,
                         table_name="employees")

    def get_active_employees(self) -> List[EmployeeEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE status = ? ORDER BY full_name"
        rows = self.db_manager.fetch_all(query, (EmployeeStatus.ACTIVE.value,))
        return [self._entity_from_row(dict(r)) for r in rows if r]

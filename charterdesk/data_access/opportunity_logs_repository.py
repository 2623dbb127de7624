# charterdesk/data_access/opportunity_logs_repository.py

from typing import List

from charterdesk.data_access.base_repository import BaseRepository
from charterdesk.data_access.database_manager import DatabaseManager
from charterdesk.business_logic.entities.opportunity_log_entity import OpportunityLogEntity
import logging

logger = logging.getLogger(__name__)

class OpportunityLogsRepository(BaseRepository[OpportunityLogEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=OpportunityLogEntity,
                         table_name="opportunity_logs")

    def get_by_opportunity_id(self, opportunity_id: int) -> List[OpportunityLogEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE opportunity_id = ? ORDER BY created_at, id"
        rows = self.db_manager.fetch_all(query, (opportunity_id,))
        return [self._entity_from_row(dict(r)) for r in rows if r]

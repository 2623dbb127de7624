# charterdesk/data_access/opportunities_repository.py

from typing import List, Optional

from charterdesk.data_access.base_repository import BaseRepository
from charterdesk.data_access.database_manager import DatabaseManager
from charterdesk.business_logic.entities.opportunity_entity import OpportunityEntity
from charterdesk.constants import OpportunityStage
import logging

logger = logging.getLogger(__name__)

class OpportunitiesRepository(BaseRepository[OpportunityEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=OpportunityEntity,
                         table_name="opportunities")

    def get_by_code(self, opportunity_code: str) -> Optional[OpportunityEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE opportunity_code = ?"
        row = self.db_manager.fetch_one(query, (opportunity_code,))
        return self._entity_from_row(dict(row)) if row else None

    def get_by_stage(self, stage: OpportunityStage) -> List[OpportunityEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE stage = ? ORDER BY date_of_charter, id"
        rows = self.db_manager.fetch_all(query, (stage.value,))
        return [self._entity_from_row(dict(r)) for r in rows if r]

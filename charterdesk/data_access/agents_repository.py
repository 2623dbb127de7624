# charterdesk/data_access/agents_repository.py

from typing import List

from charterdesk.data_access.base_repository import BaseRepository
from charterdesk.data_access.database_manager import DatabaseManager
from charterdesk.business_logic.entities.agent_entity import AgentEntity
import logging

logger = logging.getLogger(__name__)

class AgentsRepository(BaseRepository[AgentEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=AgentEntity,
                         table_name="agents")

    def get_active_agents(self) -> List[AgentEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE is_active = 1 ORDER BY agent_name"
        rows = self.db_manager.fetch_all(query)
        return [self._entity_from_row(dict(r)) for r in rows if r]

# charterdesk/data_access/yachts_repository.py

from typing import List, Optional

from charterdesk.data_access.base_repository import BaseRepository
from charterdesk.data_access.database_manager import DatabaseManager
from charterdesk.business_logic.entities.yacht_entity import YachtEntity
import logging

logger = logging.getLogger(__name__)

class YachtsRepository(BaseRepository[YachtEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=YachtEntity,
                         table_name="yachts")

    def get_by_name(self, name: str) -> Optional[YachtEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE name = ?"
        row = self.db_manager.fetch_one(query, (name,))
        return self._entity_from_row(dict(row)) if row else None

    def get_active_yachts(self) -> List[YachtEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE is_active = 1 ORDER BY name"
        rows = self.db_manager.fetch_all(query)
        return [self._entity_from_row(dict(r)) for r in rows if r]

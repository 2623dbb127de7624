# charterdesk/data_access/clients_repository.py

from typing import List

from charterdesk.data_access.base_repository import BaseRepository
from charterdesk.data_access.database_manager import DatabaseManager
from charterdesk.business_logic.entities.client_entity import ClientEntity
import logging

logger = logging.getLogger(__name__)

class ClientsRepository(BaseRepository[ClientEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=ClientEntity,
                         table_name="clients")

    def search_by_name(self, name_part: str) -> List[ClientEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE client_name LIKE ? ORDER BY client_name"
        rows = self.db_manager.fetch_all(query, (f"%{name_part}%",))
        return [self._entity_from_row(dict(r)) for r in rows if r]

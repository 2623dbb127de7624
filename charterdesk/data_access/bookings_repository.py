# charterdesk/data_access/bookings_repository.py

from typing import List, Optional

from charterdesk.data_access.base_repository import BaseRepository
from charterdesk.data_access.database_manager import DatabaseManager
from charterdesk.business_logic.entities.booking_entity import BookingEntity
from charterdesk.constants import CruiseType
import logging

logger = logging.getLogger(__name__)

class BookingsRepository(BaseRepository[BookingEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=BookingEntity,
                         table_name="bookings")

    def get_by_ticket_number(self, ticket_number: str) -> Optional[BookingEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE ticket_number = ?"
        row = self.db_manager.fetch_one(query, (ticket_number,))
        return self._entity_from_row(dict(row)) if row else None

    def get_by_cruise_type(self, cruise_type: CruiseType) -> List[BookingEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE cruise_type = ? ORDER BY travel_date DESC, id DESC"
        rows = self.db_manager.fetch_all(query, (cruise_type.value,))
        return [self._entity_from_row(dict(r)) for r in rows if r]

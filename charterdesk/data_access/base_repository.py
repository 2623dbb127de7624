# charterdesk/data_access/base_repository.py

import json
import logging
from typing import Generic, TypeVar, Type, List, Optional, Dict, Any, TYPE_CHECKING, Union
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from dataclasses import fields, MISSING

from charterdesk.data_access.database_manager import DatabaseManager

if TYPE_CHECKING:
    from charterdesk.business_logic.entities.base_entity import BaseEntity

logger = logging.getLogger(__name__)

T = TypeVar('T', bound='BaseEntity')


class BaseRepository(Generic[T]):
    def __init__(self, db_manager: DatabaseManager, model_type: Type[T], table_name: str):
        self.db_manager = db_manager
        self.model_type = model_type
        self._table_name = table_name
        self._db_columns = [f.name for f in fields(model_type) if f.init]
        logger.debug(f"BaseRepository for {self._table_name} initialized. Columns: {self._db_columns}")

    def get_by_id(self, entity_id: int) -> Optional[T]:
        query = f"SELECT * FROM {self._table_name} WHERE id = ?"
        with self.db_manager as conn:
            cursor = conn.execute(query, (entity_id,))
            row = cursor.fetchone()
            if row:
                row_dict = {k[0]: v for k, v in zip(cursor.description, row)}
                return self._entity_from_row(row_dict)
        return None

    def get_all(self, order_by: Optional[str] = None) -> List[T]:
        query = f"SELECT * FROM {self._table_name}"
        if order_by:
            query += f" ORDER BY {order_by}"

        with self.db_manager as conn:
            cursor = conn.execute(query)
            rows = cursor.fetchall()
            return [self._entity_from_row({k[0]: v for k, v in zip(cursor.description, row)}) for row in rows]

    def _entity_to_dict_for_db(self, entity: T) -> Dict[str, Any]:
        """
        Maps the entity's init fields to column values sqlite can store.
        Decimals go in as REAL, enums by value, bools as 0/1, dates as ISO text
        and dict fields (guest counts, package prices) as JSON text.
        """
        data_to_persist = {}
        for col in self._db_columns:
            if not hasattr(entity, col):
                continue
            v = getattr(entity, col)

            processed_v = v
            if isinstance(v, Decimal): processed_v = float(v)
            elif isinstance(v, Enum): processed_v = v.value
            elif isinstance(v, bool): processed_v = 1 if v else 0
            elif isinstance(v, (datetime, date)): processed_v = v.isoformat()
            elif isinstance(v, dict): processed_v = json.dumps(v, default=str, sort_keys=True)

            data_to_persist[col] = processed_v
        return data_to_persist

    def add(self, entity: T) -> Optional[T]:
        logger.debug(f"BaseRepository.add: Type {type(entity).__name__} to table '{self._table_name}'.")

        fields_to_insert = self._entity_to_dict_for_db(entity)
        fields_to_insert.pop('id', None)

        if not fields_to_insert:
            logger.error(f"BaseRepository.add: No valid fields to insert for entity {type(entity)}.")
            return None

        columns = ', '.join(fields_to_insert.keys())
        placeholders = ', '.join(['?'] * len(fields_to_insert))
        values_tuple = tuple(fields_to_insert.values())

        logger.debug(f"BaseRepository.add: Values for INSERT into {self._table_name}: {values_tuple}")

        query = f"INSERT INTO {self._table_name} ({columns}) VALUES ({placeholders})"

        try:
            cursor = self.db_manager.execute_query(query, values_tuple)
            if cursor and cursor.lastrowid is not None:
                entity.id = cursor.lastrowid
                logger.debug(f"BaseRepository.add: Entity ID set to {entity.id} after insert.")
                return entity
            logger.warning(f"BaseRepository.add: Could not retrieve lastrowid. Table: {self._table_name}.")
            return None
        except Exception as e:
            logger.error(f"Error during INSERT into {self._table_name}: {e}", exc_info=True)
            return None

    def update(self, entity: T) -> Optional[T]:
        if getattr(entity, 'id', None) is None:
            logger.error(f"Entity of type {type(entity).__name__} must have an ID to be updated.")
            return None

        entity_id = entity.id
        fields_to_update = self._entity_to_dict_for_db(entity)
        fields_to_update.pop('id', None)

        if not fields_to_update:
            logger.warning(f"BaseRepository.update: No fields to update for entity ID {entity_id}.")
            return entity

        set_clause = ', '.join([f"{key} = ?" for key in fields_to_update.keys()])
        values_tuple = tuple(fields_to_update.values()) + (entity_id,)

        query = f"UPDATE {self._table_name} SET {set_clause} WHERE id = ?"
        logger.debug(f"BaseRepository.update: Query: {query}, Values: {values_tuple}")

        try:
            cursor = self.db_manager.execute_query(query, values_tuple)
            if cursor.rowcount == 0:
                logger.warning(f"BaseRepository.update: No row with ID {entity_id} in {self._table_name}.")
                return None
            logger.info(f"BaseRepository.update: Entity ID {entity_id} in table {self._table_name} updated.")
            return entity
        except Exception as e:
            logger.error(f"Error during UPDATE for entity ID {entity_id} in table {self._table_name}: {e}", exc_info=True)
            return None

    def delete(self, entity_id: int) -> bool:
        query = f"DELETE FROM {self._table_name} WHERE id = ?"
        try:
            cursor = self.db_manager.execute_query(query, (entity_id,))
            deleted = cursor.rowcount > 0
            if deleted:
                logger.info(f"BaseRepository.delete: Entity ID {entity_id} removed from {self._table_name}.")
            else:
                logger.warning(f"BaseRepository.delete: No row with ID {entity_id} in {self._table_name}.")
            return deleted
        except Exception as e:
            logger.error(f"Error during DELETE for entity ID {entity_id} in table {self._table_name}: {e}", exc_info=True)
            return False

    def find_by_criteria(self, criteria: Dict[str, Any], order_by: Optional[str] = None) -> List[T]:
        """
        Finds entities matching every criterion. A value may be a plain value (equality)
        or an (operator, value) tuple such as ('>=', '2024-01-01') or ('BETWEEN', (a, b)).
        """
        if not criteria:
            return self.get_all(order_by=order_by)

        base_query = f"SELECT * FROM {self._table_name} WHERE "
        conditions = []
        params = []

        for key, value in criteria.items():
            if isinstance(value, tuple) and len(value) == 2:
                operator, val = value
                if str(operator).upper() == 'BETWEEN' and isinstance(val, (list, tuple)) and len(val) == 2:
                    conditions.append(f"{key} BETWEEN ? AND ?")
                    params.extend(self._param(v) for v in val)
                else:
                    conditions.append(f"{key} {operator} ?")
                    params.append(self._param(val))
            else:
                conditions.append(f"{key} = ?")
                params.append(self._param(value))

        query = base_query + " AND ".join(conditions)
        if order_by:
            query += f" ORDER BY {order_by}"

        logger.debug(f"BaseRepository.find_by_criteria: Query: {query}, Values: {tuple(params)}")

        with self.db_manager as conn:
            cursor = conn.execute(query, tuple(params))
            rows = cursor.fetchall()
            return [self._entity_from_row({k[0]: v for k, v in zip(cursor.description, row)}) for row in rows]

    @staticmethod
    def _param(value: Any) -> Any:
        if isinstance(value, Enum): return value.value
        if isinstance(value, Decimal): return float(value)
        if isinstance(value, (datetime, date)): return value.isoformat()
        return value

    def _entity_from_row(self, row: Dict[str, Any]) -> T:
        """
        Builds the dataclass from a database row, converting each column back to the
        field's declared type (Optional unwrapped, enums, Decimal, dates, bools, JSON dicts).
        """
        entity_data = {}

        for f in fields(self.model_type):
            if not f.init:
                continue

            field_name = f.name
            field_type = f.type
            value_from_db = row.get(field_name)

            if value_from_db is None:
                if f.default is MISSING and f.default_factory is MISSING:
                    is_optional = getattr(field_type, '__origin__', None) is Union and type(None) in getattr(field_type, '__args__', [])
                    if not is_optional:
                        raise ValueError(
                            f"Database integrity error: NULL value found for required field '{field_name}' "
                            f"in table '{self._table_name}' for row: {row}"
                        )
                continue

            try:
                actual_type = field_type
                if getattr(field_type, '__origin__', None) is Union:
                    possible_types = [arg for arg in getattr(field_type, '__args__', []) if arg is not type(None)]
                    if possible_types:
                        actual_type = possible_types[0]

                is_enum = isinstance(actual_type, type) and issubclass(actual_type, Enum)

                if is_enum:
                    entity_data[field_name] = actual_type(value_from_db)
                elif getattr(actual_type, '__origin__', None) is dict:
                    entity_data[field_name] = self._dict_from_json(actual_type, value_from_db)
                elif actual_type == Decimal:
                    entity_data[field_name] = Decimal(str(value_from_db))
                elif actual_type == datetime and isinstance(value_from_db, str):
                    entity_data[field_name] = datetime.fromisoformat(value_from_db)
                elif actual_type == date and isinstance(value_from_db, str):
                    entity_data[field_name] = date.fromisoformat(value_from_db.split(" ")[0].split("T")[0])
                elif actual_type == bool and isinstance(value_from_db, int):
                    entity_data[field_name] = bool(value_from_db)
                else:
                    entity_data[field_name] = value_from_db
            except (ValueError, TypeError) as e:
                logger.warning(f"Type conversion failed for field '{field_name}' with value '{value_from_db}'. Setting to None. Error: {e}")
                entity_data[field_name] = None

        try:
            return self.model_type(**entity_data)
        except TypeError as e:
            logger.error(f"Failed to instantiate {self.model_type.__name__}. Error: {e}. Data passed: {entity_data}")
            missing_fields = [f.name for f in fields(self.model_type) if f.init and f.name not in entity_data and f.default is MISSING and f.default_factory is MISSING]
            raise TypeError(f"Missing required arguments for {self.model_type.__name__}: {missing_fields}. Original error: {e}") from e

    @staticmethod
    def _dict_from_json(dict_type: Any, raw: Any) -> Dict[str, Any]:
        data = json.loads(raw) if isinstance(raw, str) else dict(raw)
        args = getattr(dict_type, '__args__', None) or ()
        value_type = args[1] if len(args) == 2 else None
        if value_type is Decimal:
            return {k: Decimal(str(v)) for k, v in data.items()}
        if value_type is int:
            return {k: int(v) for k, v in data.items()}
        return data

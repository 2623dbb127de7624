# charterdesk/business_logic/yacht_manager.py

from typing import Optional, List, Dict, Any, Mapping
from decimal import Decimal
import logging

from charterdesk.business_logic.entities.yacht_entity import YachtEntity
from charterdesk.data_access.yachts_repository import YachtsRepository
from charterdesk.business_logic.calculations.money import Money, to_int
from charterdesk.business_logic.permissions import Permission, require_permission
from charterdesk.constants import GuestCategory

logger = logging.getLogger(__name__)

_CATEGORY_VALUES = {category.value for category in GuestCategory}


class YachtManager:
    def __init__(self, yachts_repository: YachtsRepository):
        if yachts_repository is None:
            raise ValueError("yachts_repository cannot be None")
        self.yachts_repository = yachts_repository

    @staticmethod
    def _normalize_packages(shared_packages: Optional[Mapping]) -> Dict[str, Decimal]:
        normalized: Dict[str, Decimal] = {}
        for key, price in (shared_packages or {}).items():
            category = key.value if isinstance(key, GuestCategory) else str(key)
            if category not in _CATEGORY_VALUES:
                logger.warning(f"Ignoring unknown guest category '{key}' in yacht package prices.")
                continue
            normalized[category] = Money.of(price).as_decimal()
        return normalized

    def add_yacht(self, name: str, capacity: Any = 0,
                  private_hourly_rate: Any = None,
                  shared_packages: Optional[Mapping] = None,
                  description: Optional[str] = None,
                  role: Any = None) -> Optional[YachtEntity]:
        if not name or not name.strip():
            raise ValueError("Yacht name cannot be empty.")
        if shared_packages or private_hourly_rate not in (None, ""):
            require_permission(role, Permission.MANAGE_YACHTS)
        if self.yachts_repository.get_by_name(name.strip()):
            raise ValueError(f"A yacht named '{name.strip()}' already exists.")

        yacht = YachtEntity(
            name=name.strip(),
            capacity=to_int(capacity),
            private_hourly_rate=Money.of(private_hourly_rate).as_decimal(),
            shared_packages=self._normalize_packages(shared_packages),
            description=description
        )
        try:
            created = self.yachts_repository.add(yacht)
            if created is None:
                raise ValueError(f"Yacht '{name}' could not be saved.")
            logger.info(f"Yacht '{created.name}' added with ID {created.id}.")
            return created
        except Exception as e:
            logger.error(f"Error adding yacht '{name}': {e}", exc_info=True)
            raise

    def update_yacht(self, yacht_id: int, role: Any = None, **kwargs) -> Optional[YachtEntity]:
        yacht = self.yachts_repository.get_by_id(yacht_id)
        if not yacht:
            raise ValueError(f"Yacht with ID {yacht_id} not found.")

        if "shared_packages" in kwargs or "private_hourly_rate" in kwargs:
            require_permission(role, Permission.MANAGE_YACHTS)

        if "name" in kwargs:
            if not kwargs["name"] or not str(kwargs["name"]).strip():
                raise ValueError("Yacht name cannot be empty.")
            yacht.name = str(kwargs["name"]).strip()
        if "capacity" in kwargs:
            yacht.capacity = to_int(kwargs["capacity"])
        if "private_hourly_rate" in kwargs:
            yacht.private_hourly_rate = Money.of(kwargs["private_hourly_rate"]).as_decimal()
        if "shared_packages" in kwargs:
            yacht.shared_packages = self._normalize_packages(kwargs["shared_packages"])
        if "is_active" in kwargs:
            yacht.is_active = bool(kwargs["is_active"])
        if "description" in kwargs:
            yacht.description = kwargs["description"]

        updated = self.yachts_repository.update(yacht)
        if updated is None:
            raise ValueError(f"Yacht with ID {yacht_id} could not be updated.")
        logger.info(f"Yacht ID {yacht_id} updated.")
        return updated

    def get_yacht_by_id(self, yacht_id: int) -> Optional[YachtEntity]:
        return self.yachts_repository.get_by_id(yacht_id)

    def get_all_yachts(self, active_only: bool = False) -> List[YachtEntity]:
        if active_only:
            return self.yachts_repository.get_active_yachts()
        return self.yachts_repository.get_all(order_by="name")

    def get_unit_prices(self, yacht_id: Optional[int]) -> Dict[str, Decimal]:
        """Shared-cruise seat prices of a yacht; an unknown yacht prices every seat at zero."""
        if not yacht_id:
            return {}
        yacht = self.yachts_repository.get_by_id(yacht_id)
        if not yacht:
            logger.warning(f"Unit prices requested for unknown yacht ID {yacht_id}.")
            return {}
        return dict(yacht.shared_packages)

# charterdesk/business_logic/entities/yacht_entity.py
from dataclasses import dataclass, field
from typing import Optional, Dict
from decimal import Decimal
from .base_entity import BaseEntity

@dataclass
class YachtEntity(BaseEntity):
    name: str
    capacity: int = field(default=0)
    private_hourly_rate: Decimal = field(default_factory=lambda: Decimal("0.00"))
    # Per-seat price for shared cruises, keyed by GuestCategory value. Admin-only edit.
    shared_packages: Dict[str, Decimal] = field(default_factory=dict)
    is_active: bool = field(default=True)
    description: Optional[str] = field(default=None)

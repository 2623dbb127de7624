# charterdesk/business_logic/entities/client_entity.py
from dataclasses import dataclass, field
from typing import Optional
from decimal import Decimal
from .base_entity import BaseEntity

@dataclass
class ClientEntity(BaseEntity):
    client_name: str
    phone: Optional[str] = field(default=None)
    email: Optional[str] = field(default=None)
    discount_percentage: Decimal = field(default_factory=lambda: Decimal("0.00")) # prefilled as client discount

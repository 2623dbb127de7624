# charterdesk/business_logic/entities/agent_entity.py
from dataclasses import dataclass, field
from typing import Optional
from decimal import Decimal
from .base_entity import BaseEntity

@dataclass
class AgentEntity(BaseEntity):
    agent_name: str
    phone: Optional[str] = field(default=None)
    email: Optional[str] = field(default=None)
    commission_percentage: Decimal = field(default_factory=lambda: Decimal("0.00")) # prefilled as agent discount
    is_active: bool = field(default=True)

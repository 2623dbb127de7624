# charterdesk/business_logic/entities/opportunity_log_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import datetime
from .base_entity import BaseEntity
from charterdesk.constants import OpportunityLogType

@dataclass
class OpportunityLogEntity(BaseEntity):
    opportunity_id: int
    message_type: OpportunityLogType
    message_content: str
    previous_stage: Optional[str] = field(default=None)
    new_stage: Optional[str] = field(default=None)
    created_at: datetime = field(default_factory=lambda: datetime.now().replace(microsecond=0))

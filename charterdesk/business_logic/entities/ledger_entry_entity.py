# charterdesk/business_logic/entities/ledger_entry_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity
from charterdesk.constants import LedgerEntryType, SourceModule, PaymentMethod

@dataclass
class LedgerEntryEntity(BaseEntity):
    transaction_date: date
    entry_type: LedgerEntryType
    amount: Decimal
    source_module: SourceModule = field(default=SourceModule.MANUAL)
    category: Optional[str] = field(default=None)
    description: Optional[str] = field(default=None)
    payment_method: Optional[PaymentMethod] = field(default=None)
    reference_id: Optional[int] = field(default=None)

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.entry_type == LedgerEntryType.INCOME else -self.amount

# warehouse_ledger/business_logic/entities/journal_entry_line_entity.py
from dataclasses import dataclass, field
from typing import Optional
from decimal import Decimal
from .base_entity import BaseEntity

@dataclass
class JournalEntryLineEntity(BaseEntity):
    account_id: int
    debit_amount: Decimal = field(default_factory=lambda: Decimal("0.00"))
    credit_amount: Decimal = field(default_factory=lambda: Decimal("0.00"))
    journal_entry_id: Optional[int] = field(default=None)
    line_number: int = field(default=1)
    description: Optional[str] = field(default=None)

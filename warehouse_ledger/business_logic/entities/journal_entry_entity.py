# warehouse_ledger/business_logic/entities/journal_entry_entity.py
from dataclasses import dataclass, field
from typing import Optional, List
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity
from .journal_entry_line_entity import JournalEntryLineEntity
from warehouse_ledger.constants import JournalEntryStatus

@dataclass
class JournalEntryEntity(BaseEntity):
    entry_number: str
    entry_date: date
    description: str
    status: JournalEntryStatus = field(default=JournalEntryStatus.DRAFT)
    reference: Optional[str] = field(default=None)
    total_amount: Decimal = field(default_factory=lambda: Decimal("0.00"))
    warehouse_id: Optional[str] = field(default=None)
    lines: List[JournalEntryLineEntity] = field(default_factory=list, init=False, compare=False, repr=False)

    @property
    def total_debits(self) -> Decimal:
        return sum((line.debit_amount for line in self.lines), Decimal("0.00"))

    @property
    def total_credits(self) -> Decimal:
        return sum((line.credit_amount for line in self.lines), Decimal("0.00"))

    @property
    def is_balanced(self) -> bool:
        return self.total_debits == self.total_credits

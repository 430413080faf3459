# warehouse_ledger/business_logic/entities/account_entity.py
from dataclasses import dataclass, field
from typing import Optional
from .base_entity import BaseEntity
from warehouse_ledger.constants import AccountCategory
from decimal import Decimal

@dataclass
class AccountEntity(BaseEntity):
    code: str                       # account code, e.g. "1000"
    name: str
    category: AccountCategory

    description: Optional[str] = field(default=None)
    opening_balance: Decimal = field(default_factory=lambda: Decimal("0.00"))
    warehouse_id: Optional[str] = field(default=None)
    is_active: bool = field(default=True)
    # filled in from posted journal lines, never persisted
    current_balance: Decimal = field(default_factory=lambda: Decimal("0.00"), init=False, compare=False)

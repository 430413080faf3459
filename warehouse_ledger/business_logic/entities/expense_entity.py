# warehouse_ledger/business_logic/entities/expense_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity
from warehouse_ledger.constants import ExpenseStatus, PaymentMethod

@dataclass
class ExpenseEntity(BaseEntity):
    entry_date: date
    description: str
    category: str
    amount: Decimal
    vendor: Optional[str] = field(default=None)
    status: ExpenseStatus = field(default=ExpenseStatus.PENDING)
    payment_method: Optional[PaymentMethod] = field(default=None)
    payment_date: Optional[date] = field(default=None)
    reference: Optional[str] = field(default=None)
    warehouse_id: Optional[str] = field(default=None)
    journal_entry_id: Optional[int] = field(default=None)

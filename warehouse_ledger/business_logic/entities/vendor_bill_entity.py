# warehouse_ledger/business_logic/entities/vendor_bill_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity

@dataclass
class VendorBillEntity(BaseEntity):
    bill_number: str
    vendor_name: str
    issue_date: date
    due_date: date
    amount: Decimal
    paid_amount: Decimal = field(default_factory=lambda: Decimal("0.00"))
    description: Optional[str] = field(default=None)
    expense_account_id: Optional[int] = field(default=None)
    warehouse_id: Optional[str] = field(default=None)

    @property
    def outstanding_amount(self) -> Decimal:
        return self.amount - self.paid_amount

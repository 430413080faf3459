# warehouse_ledger/business_logic/entities/invoice_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity

@dataclass
class InvoiceEntity(BaseEntity):
    invoice_number: str
    client_name: str
    invoice_date: date
    due_date: date
    total_amount: Decimal
    paid_amount: Decimal = field(default_factory=lambda: Decimal("0.00"))
    client_contact_email: Optional[str] = field(default=None)
    description: Optional[str] = field(default=None)
    warehouse_id: Optional[str] = field(default=None)

    @property
    def remaining_amount(self) -> Decimal:
        return self.total_amount - self.paid_amount

# warehouse_ledger/business_logic/entities/invoice_payment_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity
from warehouse_ledger.constants import PaymentMethod

@dataclass
class InvoicePaymentEntity(BaseEntity):
    invoice_id: int
    amount: Decimal
    payment_date: date
    payment_method: PaymentMethod
    reference_number: Optional[str] = field(default=None)
    notes: Optional[str] = field(default=None)
    journal_entry_id: Optional[int] = field(default=None)

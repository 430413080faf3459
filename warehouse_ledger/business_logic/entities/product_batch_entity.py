# warehouse_ledger/business_logic/entities/product_batch_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity

@dataclass
class ProductBatchEntity(BaseEntity):
    product_id: int
    batch_number: str
    quantity: int
    received_date: date
    cost_price: Decimal = field(default_factory=lambda: Decimal("0.00"))
    expiration_date: Optional[date] = field(default=None)
    location: Optional[str] = field(default=None)
    supplier_reference: Optional[str] = field(default=None)
    notes: Optional[str] = field(default=None)
    warehouse_id: Optional[str] = field(default=None)

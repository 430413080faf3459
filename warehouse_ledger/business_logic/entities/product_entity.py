# warehouse_ledger/business_logic/entities/product_entity.py
from dataclasses import dataclass, field
from typing import Optional
from .base_entity import BaseEntity
from decimal import Decimal

@dataclass
class ProductEntity(BaseEntity):
    sku: str
    name: str
    unit_price: Decimal = field(default_factory=lambda: Decimal("0.00"))
    stock: int = field(default=0)  # aggregate on-hand units
    warehouse_id: Optional[str] = field(default=None)
    description: Optional[str] = field(default=None)
    is_active: bool = field(default=True)

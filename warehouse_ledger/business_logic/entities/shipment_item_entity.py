# warehouse_ledger/business_logic/entities/shipment_item_entity.py
from dataclasses import dataclass, field
from typing import Optional
from .base_entity import BaseEntity

@dataclass
class ShipmentItemEntity(BaseEntity):
    product_id: int
    quantity: int
    shipment_id: Optional[int] = field(default=None)

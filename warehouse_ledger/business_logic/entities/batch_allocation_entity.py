# warehouse_ledger/business_logic/entities/batch_allocation_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date
from .base_entity import BaseEntity
from warehouse_ledger.constants import AllocationStrategy

@dataclass
class BatchAllocationEntity(BaseEntity):
    batch_id: int
    product_id: int
    quantity: int
    allocation_date: date
    strategy: AllocationStrategy
    order_reference: Optional[str] = field(default=None)

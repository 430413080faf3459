# warehouse_ledger/business_logic/entities/outgoing_shipment_entity.py
from dataclasses import dataclass, field
from typing import Optional, List
from datetime import date
from .base_entity import BaseEntity
from .shipment_item_entity import ShipmentItemEntity
from warehouse_ledger.constants import ShipmentStatus

@dataclass
class OutgoingShipmentEntity(BaseEntity):
    shipment_number: str
    customer_name: str
    status: ShipmentStatus = field(default=ShipmentStatus.PENDING)
    carrier: Optional[str] = field(default=None)
    tracking_number: Optional[str] = field(default=None)
    expected_date: Optional[date] = field(default=None)
    shipped_date: Optional[date] = field(default=None)
    delivered_date: Optional[date] = field(default=None)
    shipping_address: Optional[str] = field(default=None)
    notes: Optional[str] = field(default=None)
    warehouse_id: Optional[str] = field(default=None)
    items: List[ShipmentItemEntity] = field(default_factory=list, init=False, compare=False, repr=False)

    @property
    def total_units(self) -> int:
        return sum(item.quantity for item in self.items)

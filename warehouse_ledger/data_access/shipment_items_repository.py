# warehouse_ledger/data_access/shipment_items_repository.py

from typing import List
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.shipment_item_entity import ShipmentItemEntity

class ShipmentItemsRepository(BaseRepository[ShipmentItemEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=ShipmentItemEntity,
                         table_name="shipment_items")

    def get_by_shipment_id(self, shipment_id: int) -> List[ShipmentItemEntity]:
        return self.find_by_criteria({"shipment_id": shipment_id}, order_by="id ASC")

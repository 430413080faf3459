# warehouse_ledger/data_access/outgoing_shipments_repository.py

from typing import Optional
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.outgoing_shipment_entity import OutgoingShipmentEntity

class OutgoingShipmentsRepository(BaseRepository[OutgoingShipmentEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=OutgoingShipmentEntity,
                         table_name="outgoing_shipments")

    def get_by_shipment_number(self, shipment_number: str) -> Optional[OutgoingShipmentEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE shipment_number = ?"
        row = self.db_manager.fetch_one(query, (shipment_number,))
        return self._entity_from_row(dict(row)) if row else None

    def count(self) -> int:
        row = self.db_manager.fetch_one(f"SELECT COUNT(*) AS cnt FROM {self._table_name}")
        return row['cnt'] if row else 0

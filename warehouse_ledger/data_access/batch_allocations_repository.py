# warehouse_ledger/data_access/batch_allocations_repository.py

from typing import List
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.batch_allocation_entity import BatchAllocationEntity

class BatchAllocationsRepository(BaseRepository[BatchAllocationEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=BatchAllocationEntity,
                         table_name="batch_allocations")

    def get_by_order_reference(self, order_reference: str) -> List[BatchAllocationEntity]:
        return self.find_by_criteria({"order_reference": order_reference}, order_by="id ASC")

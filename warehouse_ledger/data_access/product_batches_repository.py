# warehouse_ledger/data_access/product_batches_repository.py

from typing import List, Optional
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.product_batch_entity import ProductBatchEntity
import logging

logger = logging.getLogger(__name__)

class ProductBatchesRepository(BaseRepository[ProductBatchEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=ProductBatchEntity,
                         table_name="product_batches")

    def get_by_product_id(self, product_id: int) -> List[ProductBatchEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE product_id = ? ORDER BY received_date ASC, id ASC"
        rows = self.db_manager.fetch_all(query, (product_id,))
        return [self._entity_from_row(dict(row)) for row in rows]

    def sum_quantity(self, product_id: int, exclude_batch_id: Optional[int] = None) -> int:
        query = f"SELECT COALESCE(SUM(quantity), 0) AS total FROM {self._table_name} WHERE product_id = ?"
        params: tuple = (product_id,)
        if exclude_batch_id is not None:
            query += " AND id != ?"
            params = (product_id, exclude_batch_id)
        row = self.db_manager.fetch_one(query, params)
        return int(row['total']) if row else 0

    def set_quantity(self, batch_id: int, quantity: int) -> None:
        query = f"UPDATE {self._table_name} SET quantity = ? WHERE id = ?"
        self.db_manager.execute_query(query, (quantity, batch_id))

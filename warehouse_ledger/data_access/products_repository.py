# warehouse_ledger/data_access/products_repository.py

from typing import Optional
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.product_entity import ProductEntity
import logging

logger = logging.getLogger(__name__)

class ProductsRepository(BaseRepository[ProductEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=ProductEntity,
                         table_name="products")

    def get_by_sku(self, sku: str) -> Optional[ProductEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE sku = ?"
        row = self.db_manager.fetch_one(query, (sku,))
        return self._entity_from_row(dict(row)) if row else None

    def set_stock(self, product_id: int, new_stock: int) -> None:
        query = f"UPDATE {self._table_name} SET stock = ? WHERE id = ?"
        self.db_manager.execute_query(query, (new_stock, product_id))
        logger.debug(f"Stock for product ID {product_id} set to {new_stock}.")

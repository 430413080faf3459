# warehouse_ledger/data_access/vendor_bills_repository.py

from typing import Optional, List
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.vendor_bill_entity import VendorBillEntity
import logging

logger = logging.getLogger(__name__)

class VendorBillsRepository(BaseRepository[VendorBillEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=VendorBillEntity,
                         table_name="vendor_bills")

    def get_by_bill_number(self, bill_number: str) -> Optional[VendorBillEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE bill_number = ?"
        row = self.db_manager.fetch_one(query, (bill_number,))
        return self._entity_from_row(dict(row)) if row else None

    def get_open_bills(self) -> List[VendorBillEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE amount > paid_amount ORDER BY due_date ASC"
        rows = self.db_manager.fetch_all(query)
        return [self._entity_from_row(dict(row)) for row in rows]

    def get_by_vendor_name(self, vendor_name: str) -> List[VendorBillEntity]:
        return self.find_by_criteria({"vendor_name": vendor_name}, order_by="issue_date ASC, id ASC")

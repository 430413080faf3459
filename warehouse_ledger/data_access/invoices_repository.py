# warehouse_ledger/data_access/invoices_repository.py

from typing import Optional, List
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.invoice_entity import InvoiceEntity
import logging

logger = logging.getLogger(__name__)

class InvoicesRepository(BaseRepository[InvoiceEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=InvoiceEntity,
                         table_name="invoices")

    def get_by_invoice_number(self, invoice_number: str) -> Optional[InvoiceEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE invoice_number = ?"
        row = self.db_manager.fetch_one(query, (invoice_number,))
        return self._entity_from_row(dict(row)) if row else None

    def get_open_invoices(self) -> List[InvoiceEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE total_amount > paid_amount ORDER BY due_date ASC"
        rows = self.db_manager.fetch_all(query)
        return [self._entity_from_row(dict(row)) for row in rows]

    def get_by_client_name(self, client_name: str) -> List[InvoiceEntity]:
        return self.find_by_criteria({"client_name": client_name}, order_by="invoice_date ASC, id ASC")

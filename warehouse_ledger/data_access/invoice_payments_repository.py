# warehouse_ledger/data_access/invoice_payments_repository.py

from typing import List
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.invoice_payment_entity import InvoicePaymentEntity

class InvoicePaymentsRepository(BaseRepository[InvoicePaymentEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=InvoicePaymentEntity,
                         table_name="invoice_payments")

    def get_by_invoice_id(self, invoice_id: int) -> List[InvoicePaymentEntity]:
        return self.find_by_criteria({"invoice_id": invoice_id}, order_by="payment_date ASC, id ASC")

# warehouse_ledger/data_access/bill_payments_repository.py

from typing import List
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.bill_payment_entity import BillPaymentEntity

class BillPaymentsRepository(BaseRepository[BillPaymentEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=BillPaymentEntity,
                         table_name="bill_payments")

    def get_by_bill_id(self, bill_id: int) -> List[BillPaymentEntity]:
        return self.find_by_criteria({"bill_id": bill_id}, order_by="payment_date ASC, id ASC")

# warehouse_ledger/data_access/payrolls_repository.py

from typing import List
from datetime import date
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.payroll_entity import PayrollEntity
from warehouse_ledger.constants import PayrollStatus
import logging

logger = logging.getLogger(__name__)

class PayrollsRepository(BaseRepository[PayrollEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=PayrollEntity,
                         table_name="payrolls")

    def get_by_pay_period(self, start_date: date, end_date: date) -> List[PayrollEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE pay_period_start = ? AND pay_period_end = ?"
        rows = self.db_manager.fetch_all(query, (start_date.isoformat(), end_date.isoformat()))
        return [self._entity_from_row(dict(row)) for row in rows]

    def get_by_status(self, status: PayrollStatus) -> List[PayrollEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE status = ? ORDER BY pay_period_start DESC, id ASC"
        rows = self.db_manager.fetch_all(query, (status.value,))
        return [self._entity_from_row(dict(row)) for row in rows]

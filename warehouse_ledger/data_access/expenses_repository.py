# warehouse_ledger/data_access/expenses_repository.py

from typing import List
from datetime import date
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.expense_entity import ExpenseEntity

class ExpensesRepository(BaseRepository[ExpenseEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=ExpenseEntity,
                         table_name="expenses")

    def get_in_range(self, start: date, end_exclusive: date) -> List[ExpenseEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE entry_date >= ? AND entry_date < ? ORDER BY entry_date ASC"
        rows = self.db_manager.fetch_all(query, (start.isoformat(), end_exclusive.isoformat()))
        return [self._entity_from_row(dict(row)) for row in rows]

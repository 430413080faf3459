# warehouse_ledger/data_access/employees_repository.py

from typing import Optional, List
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.employee_entity import EmployeeEntity
from warehouse_ledger.constants import EmployeeStatus
import logging

logger = logging.getLogger(__name__)

class EmployeesRepository(BaseRepository[EmployeeEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=EmployeeEntity,
                         table_name="employees")

    def get_by_email(self, email: str) -> Optional[EmployeeEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE lower(email) = lower(?)"
        row = self.db_manager.fetch_one(query, (email,))
        return self._entity_from_row(dict(row)) if row else None

    def get_active_employees(self) -> List[EmployeeEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE status = ? ORDER BY name ASC"
        rows = self.db_manager.fetch_all(query, (EmployeeStatus.ACTIVE.value,))
        return [self._entity_from_row(dict(r)) for r in rows]

    def search(self, text: str) -> List[EmployeeEntity]:
        """Case-insensitive match on name, email or position."""
        pattern = f"%{text.lower()}%"
        query = (f"SELECT * FROM {self._table_name} "
                 f"WHERE lower(name) LIKE ? OR lower(email) LIKE ? OR lower(position) LIKE ? "
                 f"ORDER BY name ASC")
        rows = self.db_manager.fetch_all(query, (pattern, pattern, pattern))
        return [self._entity_from_row(dict(r)) for r in rows]

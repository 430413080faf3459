# warehouse_ledger/data_access/accounts_repository.py

from typing import Optional, List, TYPE_CHECKING
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
import logging

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from warehouse_ledger.business_logic.entities.account_entity import AccountEntity

class AccountsRepository(BaseRepository['AccountEntity']):
    def __init__(self, db_manager: DatabaseManager):
        from warehouse_ledger.business_logic.entities.account_entity import AccountEntity
        super().__init__(db_manager=db_manager,
                         model_type=AccountEntity,
                         table_name="accounts")

    def get_by_code(self, code: str) -> Optional['AccountEntity']:
        query = f"SELECT * FROM {self._table_name} WHERE code = ?"
        row = self.db_manager.fetch_one(query, (code,))
        return self._entity_from_row(dict(row)) if row else None

    def get_active_accounts(self, warehouse_id: Optional[str] = None) -> List['AccountEntity']:
        if warehouse_id is None:
            query = f"SELECT * FROM {self._table_name} WHERE is_active = 1 ORDER BY code ASC"
            params = ()
        else:
            # accounts without a warehouse are shared by all warehouses
            query = (f"SELECT * FROM {self._table_name} WHERE is_active = 1 "
                     f"AND (warehouse_id = ? OR warehouse_id IS NULL) ORDER BY code ASC")
            params = (warehouse_id,)
        rows = self.db_manager.fetch_all(query, params)
        return [self._entity_from_row(dict(row)) for row in rows]

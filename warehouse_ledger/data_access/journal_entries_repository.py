# warehouse_ledger/data_access/journal_entries_repository.py

from typing import Optional
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.journal_entry_entity import JournalEntryEntity
import logging

logger = logging.getLogger(__name__)

class JournalEntriesRepository(BaseRepository[JournalEntryEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=JournalEntryEntity,
                         table_name="journal_entries")

    def get_last_entry_number(self) -> Optional[str]:
        query = f"SELECT entry_number FROM {self._table_name} ORDER BY id DESC LIMIT 1"
        row = self.db_manager.fetch_one(query)
        return row['entry_number'] if row else None

# warehouse_ledger/data_access/journal_entry_lines_repository.py

from typing import Dict, Any, List, Optional
from datetime import date
from warehouse_ledger.data_access.base_repository import BaseRepository
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.business_logic.entities.journal_entry_line_entity import JournalEntryLineEntity
from warehouse_ledger.constants import JournalEntryStatus
import logging

logger = logging.getLogger(__name__)

class JournalEntryLinesRepository(BaseRepository[JournalEntryLineEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=JournalEntryLineEntity,
                         table_name="journal_entry_lines")

    def get_by_entry_id(self, journal_entry_id: int) -> List[JournalEntryLineEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE journal_entry_id = ? ORDER BY line_number ASC"
        rows = self.db_manager.fetch_all(query, (journal_entry_id,))
        return [self._entity_from_row(dict(row)) for row in rows]

    def count_for_account(self, account_id: int) -> int:
        query = f"SELECT COUNT(*) AS cnt FROM {self._table_name} WHERE account_id = ?"
        row = self.db_manager.fetch_one(query, (account_id,))
        return row['cnt'] if row else 0

    def get_posted_lines(self, account_id: Optional[int] = None,
                         as_of: Optional[date] = None) -> List[Dict[str, Any]]:
        """
        Posted journal lines joined with their entry's date and number,
        ordered by entry date. Returns plain dicts for ledger views.
        """
        query = (f"SELECT l.*, e.entry_date, e.entry_number, e.description AS entry_description "
                 f"FROM {self._table_name} l JOIN journal_entries e ON e.id = l.journal_entry_id "
                 f"WHERE e.status = ?")
        params: list = [JournalEntryStatus.POSTED.value]
        if account_id is not None:
            query += " AND l.account_id = ?"
            params.append(account_id)
        if as_of is not None:
            query += " AND e.entry_date <= ?"
            params.append(as_of.isoformat())
        query += " ORDER BY e.entry_date ASC, e.id ASC, l.line_number ASC"
        rows = self.db_manager.fetch_all(query, tuple(params))
        return [dict(row) for row in rows]

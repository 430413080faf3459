# warehouse_ledger/business_logic/journal_manager.py

from typing import Optional, List, Dict, Any, Union, TYPE_CHECKING
from datetime import date
from decimal import Decimal
import logging

from warehouse_ledger.business_logic.entities.journal_entry_entity import JournalEntryEntity
from warehouse_ledger.business_logic.entities.journal_entry_line_entity import JournalEntryLineEntity
from warehouse_ledger.business_logic.entities.account_entity import AccountEntity
from warehouse_ledger.business_logic.account_manager import natural_net
from warehouse_ledger.constants import JournalEntryStatus
from warehouse_ledger.utils.date_converter import to_date, month_bounds
from warehouse_ledger.utils.money import ZERO, to_money

if TYPE_CHECKING:
    from warehouse_ledger.data_access.journal_entries_repository import JournalEntriesRepository
    from warehouse_ledger.data_access.journal_entry_lines_repository import JournalEntryLinesRepository
    from warehouse_ledger.data_access.accounts_repository import AccountsRepository

logger = logging.getLogger(__name__)

ENTRY_NUMBER_PREFIX = "JE-"

LineSpec = Union[JournalEntryLineEntity, Dict[str, Any]]


class JournalManager:
    def __init__(self,
                 journal_entries_repository: 'JournalEntriesRepository',
                 journal_entry_lines_repository: 'JournalEntryLinesRepository',
                 accounts_repository: 'AccountsRepository'):
        if journal_entries_repository is None: raise ValueError("journal_entries_repository cannot be None")
        if journal_entry_lines_repository is None: raise ValueError("journal_entry_lines_repository cannot be None")
        if accounts_repository is None: raise ValueError("accounts_repository cannot be None")
        self.journal_entries_repository = journal_entries_repository
        self.journal_entry_lines_repository = journal_entry_lines_repository
        self.accounts_repository = accounts_repository

    def _next_entry_number(self) -> str:
        last = self.journal_entries_repository.get_last_entry_number()
        sequence = 1
        if last and last.startswith(ENTRY_NUMBER_PREFIX):
            try:
                sequence = int(last[len(ENTRY_NUMBER_PREFIX):]) + 1
            except ValueError:
                logger.warning(f"Unexpected journal entry number '{last}'; restarting sequence at 1.")
        return f"{ENTRY_NUMBER_PREFIX}{sequence:06d}"

    def _resolve_account(self, line_spec: Dict[str, Any]) -> AccountEntity:
        account = None
        if line_spec.get("account_id") is not None:
            account = self.accounts_repository.get_by_id(line_spec["account_id"])
        elif line_spec.get("account_code"):
            account = self.accounts_repository.get_by_code(line_spec["account_code"])
        if not account:
            ref = line_spec.get("account_id") or line_spec.get("account_code")
            raise ValueError(f"Account '{ref}' not found.")
        if not account.is_active:
            raise ValueError(f"Account '{account.code} {account.name}' is inactive.")
        return account

    def _build_lines(self, lines: List[LineSpec]) -> List[JournalEntryLineEntity]:
        if not lines or len(lines) < 2:
            raise ValueError("A journal entry needs at least two lines.")

        built = []
        for index, line in enumerate(lines, start=1):
            line_spec = line if isinstance(line, dict) else {
                "account_id": line.account_id,
                "debit": line.debit_amount,
                "credit": line.credit_amount,
                "description": line.description,
            }
            debit = to_money(line_spec.get("debit"), "debit")
            credit = to_money(line_spec.get("credit"), "credit")
            if debit < 0 or credit < 0:
                raise ValueError(f"Line {index}: amounts cannot be negative.")
            if (debit > 0) == (credit > 0):
                raise ValueError(f"Line {index}: enter either a debit or a credit amount.")

            account = self._resolve_account(line_spec)
            built.append(JournalEntryLineEntity(
                account_id=account.id,
                debit_amount=debit,
                credit_amount=credit,
                line_number=index,
                description=line_spec.get("description"),
            ))

        total_debits = sum((l.debit_amount for l in built), ZERO)
        total_credits = sum((l.credit_amount for l in built), ZERO)
        if total_debits != total_credits:
            raise ValueError(f"Entry is not balanced: debits {total_debits} != credits {total_credits}.")
        return built

    def create_entry(self,
                     entry_date: Union[date, str],
                     description: str,
                     lines: List[LineSpec],
                     reference: Optional[str] = None,
                     post: bool = True,
                     warehouse_id: Optional[str] = None) -> JournalEntryEntity:
        """
        Validates and stores a journal entry with its lines.

        Each line is a JournalEntryLineEntity or a dict with 'account_id' or
        'account_code', and either 'debit' or 'credit'. The entry is posted
        right away unless post is False.
        """
        entry_date = to_date(entry_date)
        if entry_date is None:
            raise ValueError("Entry date is required.")
        if not description or not description.strip():
            raise ValueError("Entry description is required.")

        built_lines = self._build_lines(lines)
        total = sum((l.debit_amount for l in built_lines), ZERO)

        entry = JournalEntryEntity(
            entry_number=self._next_entry_number(),
            entry_date=entry_date,
            description=description.strip(),
            status=JournalEntryStatus.POSTED if post else JournalEntryStatus.DRAFT,
            reference=reference,
            total_amount=total,
            warehouse_id=warehouse_id,
        )

        # --- Start Transactional Block (Conceptual) ---
        created_entry = self.journal_entries_repository.add(entry)
        try:
            for line in built_lines:
                line.journal_entry_id = created_entry.id
                self.journal_entry_lines_repository.add(line)
        except Exception as e:
            logger.error(f"Failed to store lines for journal entry {created_entry.entry_number}: {e}. Rolling back header.", exc_info=True)
            self.journal_entries_repository.delete(created_entry.id)  # lines cascade
            raise
        # --- End Transactional Block (Conceptual) ---

        created_entry.lines = built_lines
        logger.info(f"Journal entry {created_entry.entry_number} ({created_entry.status.value}) created: "
                    f"'{created_entry.description}' for {total}.")
        return created_entry

    def record_transfer(self,
                        entry_date: date,
                        description: str,
                        debit_account_code: str,
                        credit_account_code: str,
                        amount: Decimal,
                        reference: Optional[str] = None,
                        warehouse_id: Optional[str] = None) -> JournalEntryEntity:
        """Posts a two-line entry: debit one account, credit another."""
        return self.create_entry(
            entry_date=entry_date,
            description=description,
            lines=[
                {"account_code": debit_account_code, "debit": amount},
                {"account_code": credit_account_code, "credit": amount},
            ],
            reference=reference,
            warehouse_id=warehouse_id,
        )

    def get_entry(self, entry_id: int) -> Optional[JournalEntryEntity]:
        entry = self.journal_entries_repository.get_by_id(entry_id)
        if entry:
            entry.lines = self.journal_entry_lines_repository.get_by_entry_id(entry_id)
        return entry

    def get_all_entries(self) -> List[JournalEntryEntity]:
        entries = self.journal_entries_repository.get_all(order_by="entry_date DESC, id DESC")
        for entry in entries:
            entry.lines = self.journal_entry_lines_repository.get_by_entry_id(entry.id)
        return entries

    def _change_status(self, entry_id: int, expected: JournalEntryStatus,
                       new_status: JournalEntryStatus) -> JournalEntryEntity:
        entry = self.get_entry(entry_id)
        if not entry:
            raise ValueError(f"Journal entry with ID {entry_id} not found.")
        if entry.status != expected:
            raise ValueError(f"Cannot change journal entry {entry.entry_number} from "
                             f"'{entry.status.value}' to '{new_status.value}'.")
        entry.status = new_status
        self.journal_entries_repository.update(entry)
        logger.info(f"Journal entry {entry.entry_number} is now {new_status.value}.")
        return entry

    def post_entry(self, entry_id: int) -> JournalEntryEntity:
        return self._change_status(entry_id, JournalEntryStatus.DRAFT, JournalEntryStatus.POSTED)

    def void_entry(self, entry_id: int) -> JournalEntryEntity:
        return self._change_status(entry_id, JournalEntryStatus.POSTED, JournalEntryStatus.VOID)

    def get_trial_balance(self, as_of: Optional[date] = None) -> Dict[str, Any]:
        """
        Debit and credit totals of posted lines per account, up to as_of.
        Accounts with neither movement nor an opening balance are left out.
        """
        totals: Dict[int, Dict[str, Decimal]] = {}
        for line in self.journal_entry_lines_repository.get_posted_lines(as_of=as_of):
            bucket = totals.setdefault(line["account_id"], {"debit": ZERO, "credit": ZERO})
            bucket["debit"] += to_money(line["debit_amount"])
            bucket["credit"] += to_money(line["credit_amount"])

        rows = []
        total_debits = ZERO
        total_credits = ZERO
        for account in self.accounts_repository.get_all(order_by="code ASC"):
            movement = totals.get(account.id)
            if movement is None and account.opening_balance == ZERO:
                continue
            debit = movement["debit"] if movement else ZERO
            credit = movement["credit"] if movement else ZERO
            rows.append({
                "account_id": account.id,
                "code": account.code,
                "name": account.name,
                "category": account.category,
                "debit": debit,
                "credit": credit,
                "balance": account.opening_balance + natural_net(account.category, debit, credit),
            })
            total_debits += debit
            total_credits += credit

        return {
            "rows": rows,
            "total_debits": total_debits,
            "total_credits": total_credits,
            "balanced": total_debits == total_credits,
        }

    def get_summary(self, as_of: Optional[date] = None) -> Dict[str, Any]:
        as_of = as_of or date.today()
        month_start, next_month = month_bounds(as_of)

        total_debits = ZERO
        total_credits = ZERO
        unbalanced = 0
        this_month = 0
        entries = [e for e in self.get_all_entries()
                   if e.status != JournalEntryStatus.VOID and e.entry_date <= as_of]
        for entry in entries:
            if not entry.is_balanced:
                unbalanced += 1
            if month_start <= entry.entry_date < next_month:
                this_month += 1
            if entry.status == JournalEntryStatus.POSTED:
                total_debits += entry.total_debits
                total_credits += entry.total_credits

        return {
            "total_debits": total_debits,
            "total_credits": total_credits,
            "entry_count": len(entries),
            "unbalanced_count": unbalanced,
            "entries_this_month": this_month,
        }

# warehouse_ledger/business_logic/account_manager.py

from typing import Optional, List, Dict, Any, TYPE_CHECKING
from datetime import date
from decimal import Decimal
import logging

from warehouse_ledger.business_logic.entities.account_entity import AccountEntity
from warehouse_ledger.constants import AccountCategory
from warehouse_ledger.utils.money import ZERO, to_money

if TYPE_CHECKING:
    from warehouse_ledger.data_access.accounts_repository import AccountsRepository
    from warehouse_ledger.data_access.journal_entry_lines_repository import JournalEntryLinesRepository

logger = logging.getLogger(__name__)

EDITABLE_ACCOUNT_FIELDS = {"code", "name", "category", "description", "opening_balance", "warehouse_id", "is_active"}


def natural_net(category: AccountCategory, debit: Decimal, credit: Decimal) -> Decimal:
    """Net movement on the account's normal side (debit for assets and expenses)."""
    return debit - credit if category.is_debit_normal else credit - debit


class AccountManager:
    def __init__(self,
                 accounts_repository: 'AccountsRepository',
                 journal_entry_lines_repository: 'JournalEntryLinesRepository'):
        if accounts_repository is None: raise ValueError("accounts_repository cannot be None")
        if journal_entry_lines_repository is None: raise ValueError("journal_entry_lines_repository cannot be None")
        self.accounts_repository = accounts_repository
        self.journal_entry_lines_repository = journal_entry_lines_repository

    def add_account(self,
                    code: str,
                    name: str,
                    category: AccountCategory,
                    opening_balance: Any = ZERO,
                    warehouse_id: Optional[str] = None,
                    description: Optional[str] = None) -> AccountEntity:
        if not code or not str(code).strip():
            raise ValueError("Account code cannot be empty.")
        if not name or not name.strip():
            raise ValueError("Account name cannot be empty.")
        if not isinstance(category, AccountCategory):
            logger.error(f"Invalid account category: {category}")
            raise ValueError("Invalid account category.")

        code = str(code).strip()
        if self.accounts_repository.get_by_code(code):
            raise ValueError(f"An account with code '{code}' already exists.")

        account_entity = AccountEntity(
            code=code,
            name=name.strip(),
            category=category,
            description=description,
            opening_balance=to_money(opening_balance, "opening_balance"),
            warehouse_id=warehouse_id,
        )
        try:
            created_account = self.accounts_repository.add(account_entity)
            logger.info(f"Account '{created_account.code} {created_account.name}' (ID: {created_account.id}, "
                        f"category: {category.value}) added with opening balance {created_account.opening_balance}.")
            return created_account
        except Exception as e:
            logger.error(f"Error adding account '{code}': {e}", exc_info=True)
            raise

    def update_account(self, account_id: int, **changes: Any) -> AccountEntity:
        account = self.get_account_by_id(account_id)
        if not account:
            raise ValueError(f"Account with ID {account_id} not found.")
        unknown = set(changes) - EDITABLE_ACCOUNT_FIELDS
        if unknown:
            raise ValueError(f"Unknown account field(s): {', '.join(sorted(unknown))}.")

        if "code" in changes:
            new_code = str(changes["code"] or "").strip()
            if not new_code:
                raise ValueError("Account code cannot be empty.")
            other = self.accounts_repository.get_by_code(new_code)
            if other and other.id != account.id:
                raise ValueError(f"An account with code '{new_code}' already exists.")
            changes["code"] = new_code
        if "name" in changes and not (changes["name"] or "").strip():
            raise ValueError("Account name cannot be empty.")
        if "category" in changes and not isinstance(changes["category"], AccountCategory):
            raise ValueError("Invalid account category.")
        if "opening_balance" in changes:
            changes["opening_balance"] = to_money(changes["opening_balance"], "opening_balance")

        for key, value in changes.items():
            setattr(account, key, value)
        self.accounts_repository.update(account)
        logger.info(f"Account ID {account_id} updated: {sorted(changes)}.")
        return account

    def delete_account(self, account_id: int) -> str:
        """
        Removes an account that has never been used in the journal.
        Accounts referenced by journal lines are deactivated instead.
        Returns "deleted" or "deactivated".
        """
        account = self.get_account_by_id(account_id)
        if not account:
            raise ValueError(f"Account with ID {account_id} not found.")

        if self.journal_entry_lines_repository.count_for_account(account_id) > 0:
            account.is_active = False
            self.accounts_repository.update(account)
            logger.info(f"Account ID {account_id} has journal lines; deactivated instead of deleted.")
            return "deactivated"

        self.accounts_repository.delete(account_id)
        logger.info(f"Account ID {account_id} ('{account.code}') deleted.")
        return "deleted"

    def get_account_by_id(self, account_id: int) -> Optional[AccountEntity]:
        if not isinstance(account_id, int) or account_id <= 0:
            logger.error(f"Invalid account_id: {account_id}")
            return None
        return self.accounts_repository.get_by_id(account_id)

    def get_account_by_code(self, code: str) -> Optional[AccountEntity]:
        return self.accounts_repository.get_by_code(code)

    def get_all_accounts(self) -> List[AccountEntity]:
        return self.accounts_repository.get_all(order_by="code ASC")

    def _posted_totals(self, as_of: Optional[date] = None) -> Dict[int, Dict[str, Decimal]]:
        totals: Dict[int, Dict[str, Decimal]] = {}
        for line in self.journal_entry_lines_repository.get_posted_lines(as_of=as_of):
            bucket = totals.setdefault(line["account_id"], {"debit": ZERO, "credit": ZERO})
            bucket["debit"] += to_money(line["debit_amount"])
            bucket["credit"] += to_money(line["credit_amount"])
        return totals

    def get_account_balances(self,
                             warehouse_id: Optional[str] = None,
                             as_of: Optional[date] = None) -> List[AccountEntity]:
        """
        Active accounts (optionally scoped to a warehouse) with current_balance
        set to the opening balance plus the net of posted journal lines.
        """
        accounts = self.accounts_repository.get_active_accounts(warehouse_id)
        totals = self._posted_totals(as_of)
        for account in accounts:
            movement = totals.get(account.id, {"debit": ZERO, "credit": ZERO})
            account.current_balance = account.opening_balance + natural_net(
                account.category, movement["debit"], movement["credit"])
        return accounts

    def get_account_balance(self, account_id: int, as_of: Optional[date] = None) -> Decimal:
        account = self.get_account_by_id(account_id)
        if not account:
            raise ValueError(f"Account with ID {account_id} not found.")
        balance = account.opening_balance
        for line in self.journal_entry_lines_repository.get_posted_lines(account_id=account_id, as_of=as_of):
            balance += natural_net(account.category, to_money(line["debit_amount"]), to_money(line["credit_amount"]))
        return balance

    def get_running_balance(self, account_id: int, as_of: Optional[date] = None) -> List[Dict[str, Any]]:
        """Ledger of posted lines for an account with the balance after each line."""
        account = self.get_account_by_id(account_id)
        if not account:
            raise ValueError(f"Account with ID {account_id} not found.")

        balance = account.opening_balance
        ledger = []
        for line in self.journal_entry_lines_repository.get_posted_lines(account_id=account_id, as_of=as_of):
            debit = to_money(line["debit_amount"])
            credit = to_money(line["credit_amount"])
            balance += natural_net(account.category, debit, credit)
            ledger.append({
                "entry_date": date.fromisoformat(line["entry_date"]),
                "entry_number": line["entry_number"],
                "description": line["description"] or line["entry_description"],
                "debit": debit,
                "credit": credit,
                "balance": balance,
            })
        return ledger

    def group_by_category(self, warehouse_id: Optional[str] = None) -> Dict[AccountCategory, Dict[str, Any]]:
        groups = {category: {"accounts": [], "count": 0, "total": ZERO} for category in AccountCategory}
        for account in self.get_account_balances(warehouse_id):
            group = groups[account.category]
            group["accounts"].append(account)
            group["count"] += 1
            group["total"] += account.current_balance
        return groups

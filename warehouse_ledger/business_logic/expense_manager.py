# warehouse_ledger/business_logic/expense_manager.py

import logging
from typing import Optional, List, Dict, Any, Union, TYPE_CHECKING
from datetime import date, timedelta
from decimal import Decimal

from warehouse_ledger.business_logic.entities.expense_entity import ExpenseEntity
from warehouse_ledger.business_logic.journal_manager import JournalManager
from warehouse_ledger.config import EXPENSE_OVERDUE_AFTER_DAYS
from warehouse_ledger.constants import ExpenseStatus, PaymentMethod, DEFAULT_ACCOUNTS_CONFIG_FOR_EXPENSES
from warehouse_ledger.utils.date_converter import to_date, month_bounds
from warehouse_ledger.utils.money import ZERO, to_money

if TYPE_CHECKING:
    from warehouse_ledger.data_access.expenses_repository import ExpensesRepository

logger = logging.getLogger(__name__)

TOP_CATEGORY_COUNT = 5
EDITABLE_EXPENSE_FIELDS = {"entry_date", "description", "category", "amount", "vendor", "reference", "warehouse_id"}


def expense_status(expense: ExpenseEntity, as_of: Optional[date] = None) -> ExpenseStatus:
    """Pending expenses older than the overdue window are reported as overdue."""
    if expense.status == ExpenseStatus.PAID:
        return ExpenseStatus.PAID
    as_of = as_of or date.today()
    if (as_of - expense.entry_date).days > EXPENSE_OVERDUE_AFTER_DAYS:
        return ExpenseStatus.OVERDUE
    return ExpenseStatus.PENDING


class ExpenseManager:
    def __init__(self,
                 expenses_repository: 'ExpensesRepository',
                 journal_manager: JournalManager,
                 accounts_config: Optional[Dict[str, str]] = None):
        if expenses_repository is None: raise ValueError("expenses_repository cannot be None")
        if journal_manager is None: raise ValueError("journal_manager cannot be None")
        self.expenses_repository = expenses_repository
        self.journal_manager = journal_manager
        self.accounts_config = accounts_config if accounts_config is not None else DEFAULT_ACCOUNTS_CONFIG_FOR_EXPENSES

    @staticmethod
    def _validate(expense: ExpenseEntity) -> None:
        if expense.entry_date is None:
            raise ValueError("Expense date is required.")
        if not expense.description or not expense.description.strip():
            raise ValueError("Expense description is required.")
        if not expense.category or not expense.category.strip():
            raise ValueError("Expense category is required.")
        if expense.amount <= ZERO:
            raise ValueError("Expense amount must be greater than zero.")

    def add_expense(self,
                    entry_date: Union[date, str],
                    description: str,
                    category: str,
                    amount: Any,
                    vendor: Optional[str] = None,
                    reference: Optional[str] = None,
                    warehouse_id: Optional[str] = None) -> ExpenseEntity:
        expense = ExpenseEntity(
            entry_date=to_date(entry_date),
            description=(description or "").strip(),
            category=(category or "").strip(),
            amount=to_money(amount),
            vendor=vendor,
            reference=reference,
            warehouse_id=warehouse_id,
        )
        self._validate(expense)
        created = self.expenses_repository.add(expense)
        logger.info(f"Expense ID {created.id} '{created.description}' ({created.category}) for {created.amount} added.")
        return created

    def get_expense(self, expense_id: int) -> Optional[ExpenseEntity]:
        return self.expenses_repository.get_by_id(expense_id)

    def _get_existing(self, expense_id: int) -> ExpenseEntity:
        expense = self.get_expense(expense_id)
        if not expense:
            raise ValueError(f"Expense with ID {expense_id} not found.")
        return expense

    def update_expense(self, expense_id: int, **changes: Any) -> ExpenseEntity:
        expense = self._get_existing(expense_id)
        if expense.status == ExpenseStatus.PAID and "amount" in changes:
            raise ValueError("The amount of a paid expense cannot be changed.")
        unknown = set(changes) - EDITABLE_EXPENSE_FIELDS
        if unknown:
            raise ValueError(f"Unknown expense field(s): {', '.join(sorted(unknown))}.")
        for key, value in changes.items():
            if key == "entry_date":
                value = to_date(value)
            elif key == "amount":
                value = to_money(value)
            setattr(expense, key, value)
        self._validate(expense)
        self.expenses_repository.update(expense)
        logger.info(f"Expense ID {expense_id} updated: {sorted(changes)}.")
        return expense

    def delete_expense(self, expense_id: int) -> bool:
        expense = self._get_existing(expense_id)
        if expense.journal_entry_id:
            # keep the ledger consistent with the removed expense
            self.journal_manager.void_entry(expense.journal_entry_id)
        deleted = self.expenses_repository.delete(expense_id)
        logger.info(f"Expense ID {expense_id} deleted.")
        return deleted

    def mark_paid(self,
                  expense_id: int,
                  payment_date: Union[date, str, None] = None,
                  payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER) -> ExpenseEntity:
        """Marks an expense paid and posts Dr operating expense / Cr cash."""
        expense = self._get_existing(expense_id)
        if expense.status == ExpenseStatus.PAID:
            raise ValueError(f"Expense {expense_id} is already paid.")
        if not isinstance(payment_method, PaymentMethod):
            raise ValueError(f"Invalid payment method: {payment_method}")
        payment_date = to_date(payment_date) or date.today()

        journal_entry = self.journal_manager.record_transfer(
            entry_date=payment_date,
            description=f"Expense: {expense.description}",
            debit_account_code=self.accounts_config["default_expense"],
            credit_account_code=self.accounts_config["cash"],
            amount=expense.amount,
            reference=expense.reference or f"EXP-{expense.id}",
            warehouse_id=expense.warehouse_id,
        )
        expense.status = ExpenseStatus.PAID
        expense.payment_date = payment_date
        expense.payment_method = payment_method
        expense.journal_entry_id = journal_entry.id
        try:
            self.expenses_repository.update(expense)
        except Exception:
            logger.error(f"Failed to mark expense {expense_id} paid. Voiding journal entry.", exc_info=True)
            self.journal_manager.void_entry(journal_entry.id)
            raise
        logger.info(f"Expense ID {expense_id} paid on {payment_date} ({journal_entry.entry_number}).")
        return expense

    def list_expenses(self,
                      search: Optional[str] = None,
                      category: Optional[str] = None,
                      status: Optional[ExpenseStatus] = None,
                      as_of: Optional[date] = None) -> List[Dict[str, Any]]:
        needle = (search or "").strip().lower()
        rows = []
        for expense in self.expenses_repository.get_all(order_by="entry_date DESC, id DESC"):
            if needle and needle not in expense.description.lower() and needle not in (expense.vendor or "").lower():
                continue
            if category and expense.category != category:
                continue
            current = expense_status(expense, as_of)
            if status is not None and current != status:
                continue
            rows.append({"expense": expense, "status": current})
        return rows

    def get_metrics(self, as_of: Optional[date] = None) -> Dict[str, Any]:
        """
        Dashboard figures: this month's total and its change against last
        month in percent, what is still unpaid, and the categories and vendor
        with the most spend this month.
        """
        as_of = as_of or date.today()
        month_start, next_month = month_bounds(as_of)
        last_month_start, _ = month_bounds(month_start - timedelta(days=1))

        this_month = self.expenses_repository.get_in_range(month_start, next_month)
        last_month = self.expenses_repository.get_in_range(last_month_start, month_start)
        total_this_month = sum((e.amount for e in this_month), ZERO)
        total_last_month = sum((e.amount for e in last_month), ZERO)

        if total_last_month > ZERO:
            change = float((total_this_month - total_last_month) / total_last_month * Decimal("100"))
        else:
            change = 100.0 if total_this_month > ZERO else 0.0

        by_category: Dict[str, Decimal] = {}
        by_vendor: Dict[str, Decimal] = {}
        for expense in this_month:
            by_category[expense.category] = by_category.get(expense.category, ZERO) + expense.amount
            if expense.vendor:
                by_vendor[expense.vendor] = by_vendor.get(expense.vendor, ZERO) + expense.amount

        ranked = sorted(by_category.items(), key=lambda item: (-item[1], item[0]))
        top_categories = [
            {
                "name": name,
                "amount": amount,
                "percentage": float(amount / total_this_month * Decimal("100")) if total_this_month else 0.0,
            }
            for name, amount in ranked[:TOP_CATEGORY_COUNT]
        ]
        top_vendor = None
        if by_vendor:
            name, amount = sorted(by_vendor.items(), key=lambda item: (-item[1], item[0]))[0]
            top_vendor = {"name": name, "amount": amount}

        total_unpaid = sum((e.amount for e in self.expenses_repository.get_all()
                            if e.status != ExpenseStatus.PAID), ZERO)

        return {
            "total_this_month": total_this_month,
            "total_last_month": total_last_month,
            "last_month_change": round(change, 1),
            "total_unpaid": total_unpaid,
            "top_categories": top_categories,
            "top_vendor": top_vendor,
            "category_breakdown": dict(ranked),
        }

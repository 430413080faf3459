# warehouse_ledger/business_logic/payables_manager.py

from typing import Optional, List, Dict, Any, Union, TYPE_CHECKING
from datetime import date
from decimal import Decimal
import logging

from warehouse_ledger.business_logic.entities.vendor_bill_entity import VendorBillEntity
from warehouse_ledger.business_logic.entities.bill_payment_entity import BillPaymentEntity
from warehouse_ledger.business_logic.journal_manager import JournalManager
from warehouse_ledger.business_logic.aging import days_past_due, classify_aging, build_aging_summary
from warehouse_ledger.business_logic.party_ledger import build_party_ledger
from warehouse_ledger.constants import BillStatus, PaymentMethod, DEFAULT_ACCOUNTS_CONFIG_FOR_PAYABLES
from warehouse_ledger.utils.date_converter import to_date
from warehouse_ledger.utils.money import ZERO, to_money

if TYPE_CHECKING:
    from warehouse_ledger.data_access.vendor_bills_repository import VendorBillsRepository
    from warehouse_ledger.data_access.bill_payments_repository import BillPaymentsRepository
    from warehouse_ledger.data_access.accounts_repository import AccountsRepository

logger = logging.getLogger(__name__)


def bill_status(bill: VendorBillEntity, as_of: Optional[date] = None) -> BillStatus:
    """
    Derived status of a bill. A fully paid bill is always PAID, even when
    its due date has passed.
    """
    as_of = as_of or date.today()
    if bill.outstanding_amount <= ZERO:
        return BillStatus.PAID
    if bill.due_date < as_of:
        return BillStatus.OVERDUE
    if bill.paid_amount > ZERO:
        return BillStatus.PARTIALLY_PAID
    return BillStatus.UNPAID


class PayablesManager:
    def __init__(self,
                 vendor_bills_repository: 'VendorBillsRepository',
                 bill_payments_repository: 'BillPaymentsRepository',
                 accounts_repository: 'AccountsRepository',
                 journal_manager: JournalManager,
                 accounts_config: Optional[Dict[str, str]] = None):
        if vendor_bills_repository is None: raise ValueError("vendor_bills_repository cannot be None")
        if bill_payments_repository is None: raise ValueError("bill_payments_repository cannot be None")
        if accounts_repository is None: raise ValueError("accounts_repository cannot be None")
        if journal_manager is None: raise ValueError("journal_manager cannot be None")

        self.vendor_bills_repository = vendor_bills_repository
        self.bill_payments_repository = bill_payments_repository
        self.accounts_repository = accounts_repository
        self.journal_manager = journal_manager
        self.accounts_config = accounts_config if accounts_config is not None else DEFAULT_ACCOUNTS_CONFIG_FOR_PAYABLES

    def create_bill(self,
                    bill_number: str,
                    vendor_name: str,
                    amount: Any,
                    issue_date: Union[date, str],
                    due_date: Union[date, str],
                    description: Optional[str] = None,
                    expense_account_id: Optional[int] = None,
                    warehouse_id: Optional[str] = None) -> VendorBillEntity:
        """Stores a vendor bill and posts Dr expense / Cr accounts payable."""
        if not bill_number or not bill_number.strip():
            raise ValueError("Bill number is required.")
        if not vendor_name or not vendor_name.strip():
            raise ValueError("Vendor name is required.")
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValueError("Bill amount must be greater than zero.")
        issue_date = to_date(issue_date)
        due_date = to_date(due_date)
        if issue_date is None or due_date is None:
            raise ValueError("Issue date and due date are required.")
        if due_date < issue_date:
            raise ValueError("Due date cannot be before the issue date.")
        if self.vendor_bills_repository.get_by_bill_number(bill_number.strip()):
            raise ValueError(f"A bill with number '{bill_number}' already exists.")

        expense_code = self.accounts_config["default_expense"]
        if expense_account_id is not None:
            expense_account = self.accounts_repository.get_by_id(expense_account_id)
            if not expense_account:
                raise ValueError(f"Expense account with ID {expense_account_id} not found.")
            expense_code = expense_account.code

        bill = VendorBillEntity(
            bill_number=bill_number.strip(),
            vendor_name=vendor_name.strip(),
            issue_date=issue_date,
            due_date=due_date,
            amount=amount,
            description=description,
            expense_account_id=expense_account_id,
            warehouse_id=warehouse_id,
        )

        # --- Start Transactional Block (Conceptual) ---
        created_bill = self.vendor_bills_repository.add(bill)
        try:
            self.journal_manager.record_transfer(
                entry_date=issue_date,
                description=f"Bill {created_bill.bill_number} from {created_bill.vendor_name}",
                debit_account_code=expense_code,
                credit_account_code=self.accounts_config["accounts_payable"],
                amount=amount,
                reference=created_bill.bill_number,
                warehouse_id=warehouse_id,
            )
        except Exception as e:
            logger.error(f"Error posting bill {created_bill.bill_number}. Rolling back.", exc_info=True)
            self.vendor_bills_repository.delete(created_bill.id)
            raise
        # --- End Transactional Block (Conceptual) ---

        logger.info(f"Bill {created_bill.bill_number} (ID: {created_bill.id}) for {amount} from "
                    f"'{created_bill.vendor_name}' created, due {due_date}.")
        return created_bill

    def get_bill(self, bill_id: int) -> Optional[VendorBillEntity]:
        if not isinstance(bill_id, int) or bill_id <= 0:
            logger.error(f"Invalid bill_id: {bill_id}")
            return None
        return self.vendor_bills_repository.get_by_id(bill_id)

    def record_payment(self,
                       bill_id: int,
                       amount: Any,
                       payment_date: Union[date, str, None] = None,
                       payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
                       reference_number: Optional[str] = None,
                       notes: Optional[str] = None) -> BillPaymentEntity:
        """
        Records a payment against a bill. The amount must be positive and may
        not exceed what is still outstanding.
        """
        bill = self.get_bill(bill_id)
        if not bill:
            raise ValueError(f"Bill with ID {bill_id} not found.")
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValueError("Payment amount must be greater than zero.")
        outstanding = bill.outstanding_amount
        if amount > outstanding:
            raise ValueError(f"Payment of {amount} exceeds the outstanding balance of {outstanding} "
                             f"on bill {bill.bill_number}.")
        if not isinstance(payment_method, PaymentMethod):
            raise ValueError(f"Invalid payment method: {payment_method}")
        payment_date = to_date(payment_date) or date.today()

        # --- Start Transactional Block (Conceptual) ---
        journal_entry = self.journal_manager.record_transfer(
            entry_date=payment_date,
            description=f"Payment for bill {bill.bill_number} to {bill.vendor_name}",
            debit_account_code=self.accounts_config["accounts_payable"],
            credit_account_code=self.accounts_config["cash"],
            amount=amount,
            reference=reference_number or bill.bill_number,
            warehouse_id=bill.warehouse_id,
        )
        created_payment = None
        try:
            created_payment = self.bill_payments_repository.add(BillPaymentEntity(
                bill_id=bill.id,
                payment_amount=amount,
                payment_date=payment_date,
                payment_method=payment_method,
                reference_number=reference_number,
                notes=notes,
                journal_entry_id=journal_entry.id,
            ))
            bill.paid_amount = bill.paid_amount + amount
            self.vendor_bills_repository.update(bill)
        except Exception as e:
            logger.error(f"Error recording payment for bill {bill.bill_number}. Rolling back.", exc_info=True)
            if created_payment and created_payment.id:
                self.bill_payments_repository.delete(created_payment.id)
            self.journal_manager.void_entry(journal_entry.id)
            raise
        # --- End Transactional Block (Conceptual) ---

        logger.info(f"Payment of {amount} recorded for bill {bill.bill_number}. "
                    f"Outstanding now {bill.outstanding_amount}.")
        return created_payment

    def get_payments(self, bill_id: int) -> List[BillPaymentEntity]:
        return self.bill_payments_repository.get_by_bill_id(bill_id)

    def list_bills(self,
                   status: Optional[BillStatus] = None,
                   search: Optional[str] = None,
                   as_of: Optional[date] = None) -> List[Dict[str, Any]]:
        """Bills with their derived status, filtered by status and vendor/number search."""
        as_of = as_of or date.today()
        needle = (search or "").strip().lower()
        rows = []
        for bill in self.vendor_bills_repository.get_all(order_by="due_date ASC, id ASC"):
            if needle and needle not in bill.vendor_name.lower() and needle not in bill.bill_number.lower():
                continue
            current_status = bill_status(bill, as_of)
            if status is not None and current_status != status:
                continue
            rows.append({
                "bill": bill,
                "status": current_status,
                "outstanding": bill.outstanding_amount,
                "days_past_due": days_past_due(bill.due_date, as_of) if bill.outstanding_amount > ZERO else 0,
                "aging_bucket": classify_aging(bill.due_date, as_of) if bill.outstanding_amount > ZERO else None,
            })
        return rows

    def get_summary(self, as_of: Optional[date] = None) -> Dict[str, Any]:
        as_of = as_of or date.today()
        bills = self.vendor_bills_repository.get_all()
        open_bills = [b for b in bills if b.outstanding_amount > ZERO]
        summary = build_aging_summary(((b.due_date, b.outstanding_amount) for b in open_bills), as_of)
        statuses = [bill_status(b, as_of) for b in bills]
        summary.update({
            "bill_count": len(bills),
            "open_count": len(open_bills),
            "overdue_count": statuses.count(BillStatus.OVERDUE),
            "paid_count": statuses.count(BillStatus.PAID),
            "total_paid": sum((b.paid_amount for b in bills), ZERO),
        })
        return summary

    def get_vendor_ledger(self, vendor_name: str) -> Dict[str, Any]:
        """Every bill from one vendor and every payment against them, with a running balance."""
        if not vendor_name or not vendor_name.strip():
            raise ValueError("Vendor name is required.")
        bills = self.vendor_bills_repository.get_by_vendor_name(vendor_name.strip())
        payments = []
        for bill in bills:
            for payment in self.bill_payments_repository.get_by_bill_id(bill.id):
                payments.append((payment.payment_date, payment.reference_number or bill.bill_number,
                                 f"Payment - {payment.payment_method.value}", payment.payment_amount))
        return build_party_ledger(
            vendor_name.strip(),
            "bill",
            ((b.issue_date, b.bill_number, b.description or f"Bill from {b.vendor_name}",
              b.amount, b.due_date, b.outstanding_amount) for b in bills),
            payments,
        )

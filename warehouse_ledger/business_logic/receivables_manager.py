# warehouse_ledger/business_logic/receivables_manager.py

from typing import Optional, List, Dict, Any, Union, TYPE_CHECKING
from datetime import date
import logging

from warehouse_ledger.business_logic.entities.invoice_entity import InvoiceEntity
from warehouse_ledger.business_logic.entities.invoice_payment_entity import InvoicePaymentEntity
from warehouse_ledger.business_logic.journal_manager import JournalManager
from warehouse_ledger.business_logic.aging import days_past_due, classify_aging, build_aging_summary
from warehouse_ledger.business_logic.party_ledger import build_party_ledger
from warehouse_ledger.constants import (
    AgingBucket, InvoiceStatus, PaymentMethod, DEFAULT_ACCOUNTS_CONFIG_FOR_RECEIVABLES
)
from warehouse_ledger.utils.date_converter import to_date
from warehouse_ledger.utils.money import ZERO, to_money

if TYPE_CHECKING:
    from warehouse_ledger.data_access.invoices_repository import InvoicesRepository
    from warehouse_ledger.data_access.invoice_payments_repository import InvoicePaymentsRepository

logger = logging.getLogger(__name__)


def invoice_status(invoice: InvoiceEntity, as_of: Optional[date] = None) -> InvoiceStatus:
    as_of = as_of or date.today()
    if invoice.remaining_amount <= ZERO:
        return InvoiceStatus.PAID
    if invoice.due_date < as_of:
        return InvoiceStatus.OVERDUE
    if invoice.paid_amount > ZERO:
        return InvoiceStatus.PARTIALLY_PAID
    return InvoiceStatus.SENT


class ReceivablesManager:
    def __init__(self,
                 invoices_repository: 'InvoicesRepository',
                 invoice_payments_repository: 'InvoicePaymentsRepository',
                 journal_manager: JournalManager,
                 accounts_config: Optional[Dict[str, str]] = None):
        if invoices_repository is None: raise ValueError("invoices_repository cannot be None")
        if invoice_payments_repository is None: raise ValueError("invoice_payments_repository cannot be None")
        if journal_manager is None: raise ValueError("journal_manager cannot be None")

        self.invoices_repository = invoices_repository
        self.invoice_payments_repository = invoice_payments_repository
        self.journal_manager = journal_manager
        self.accounts_config = accounts_config if accounts_config is not None else DEFAULT_ACCOUNTS_CONFIG_FOR_RECEIVABLES

    def create_invoice(self,
                       invoice_number: str,
                       client_name: str,
                       total_amount: Any,
                       invoice_date: Union[date, str],
                       due_date: Union[date, str],
                       client_contact_email: Optional[str] = None,
                       description: Optional[str] = None,
                       warehouse_id: Optional[str] = None) -> InvoiceEntity:
        """Stores a client invoice and posts Dr accounts receivable / Cr sales revenue."""
        if not invoice_number or not invoice_number.strip():
            raise ValueError("Invoice number is required.")
        if not client_name or not client_name.strip():
            raise ValueError("Client name is required.")
        total_amount = to_money(total_amount)
        if total_amount <= ZERO:
            raise ValueError("Invoice amount must be greater than zero.")
        invoice_date = to_date(invoice_date)
        due_date = to_date(due_date)
        if invoice_date is None or due_date is None:
            raise ValueError("Invoice date and due date are required.")
        if due_date < invoice_date:
            raise ValueError("Due date cannot be before the invoice date.")
        if self.invoices_repository.get_by_invoice_number(invoice_number.strip()):
            raise ValueError(f"An invoice with number '{invoice_number}' already exists.")

        invoice = InvoiceEntity(
            invoice_number=invoice_number.strip(),
            client_name=client_name.strip(),
            invoice_date=invoice_date,
            due_date=due_date,
            total_amount=total_amount,
            client_contact_email=client_contact_email,
            description=description,
            warehouse_id=warehouse_id,
        )

        created_invoice = self.invoices_repository.add(invoice)
        try:
            self.journal_manager.record_transfer(
                entry_date=invoice_date,
                description=f"Invoice {created_invoice.invoice_number} to {created_invoice.client_name}",
                debit_account_code=self.accounts_config["accounts_receivable"],
                credit_account_code=self.accounts_config["sales_revenue"],
                amount=total_amount,
                reference=created_invoice.invoice_number,
                warehouse_id=warehouse_id,
            )
        except Exception as e:
            logger.error(f"Error posting invoice {created_invoice.invoice_number}. Rolling back.", exc_info=True)
            self.invoices_repository.delete(created_invoice.id)
            raise

        logger.info(f"Invoice {created_invoice.invoice_number} (ID: {created_invoice.id}) for {total_amount} "
                    f"to '{created_invoice.client_name}' created, due {due_date}.")
        return created_invoice

    def get_invoice(self, invoice_id: int) -> Optional[InvoiceEntity]:
        if not isinstance(invoice_id, int) or invoice_id <= 0:
            logger.error(f"Invalid invoice_id: {invoice_id}")
            return None
        return self.invoices_repository.get_by_id(invoice_id)

    def record_payment(self,
                       invoice_id: int,
                       amount: Any,
                       payment_date: Union[date, str, None] = None,
                       payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
                       reference_number: Optional[str] = None,
                       notes: Optional[str] = None) -> InvoicePaymentEntity:
        invoice = self.get_invoice(invoice_id)
        if not invoice:
            raise ValueError(f"Invoice with ID {invoice_id} not found.")
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValueError("Payment amount must be greater than zero.")
        remaining = invoice.remaining_amount
        if amount > remaining:
            raise ValueError(f"Payment of {amount} exceeds the remaining balance of {remaining} "
                             f"on invoice {invoice.invoice_number}.")
        if not isinstance(payment_method, PaymentMethod):
            raise ValueError(f"Invalid payment method: {payment_method}")
        payment_date = to_date(payment_date) or date.today()

        # --- Start Transactional Block (Conceptual) ---
        journal_entry = self.journal_manager.record_transfer(
            entry_date=payment_date,
            description=f"Payment received for invoice {invoice.invoice_number} from {invoice.client_name}",
            debit_account_code=self.accounts_config["cash"],
            credit_account_code=self.accounts_config["accounts_receivable"],
            amount=amount,
            reference=reference_number or invoice.invoice_number,
            warehouse_id=invoice.warehouse_id,
        )
        created_payment = None
        try:
            created_payment = self.invoice_payments_repository.add(InvoicePaymentEntity(
                invoice_id=invoice.id,
                amount=amount,
                payment_date=payment_date,
                payment_method=payment_method,
                reference_number=reference_number,
                notes=notes,
                journal_entry_id=journal_entry.id,
            ))
            invoice.paid_amount = invoice.paid_amount + amount
            self.invoices_repository.update(invoice)
        except Exception as e:
            logger.error(f"Error recording payment for invoice {invoice.invoice_number}. Rolling back.", exc_info=True)
            if created_payment and created_payment.id:
                self.invoice_payments_repository.delete(created_payment.id)
            self.journal_manager.void_entry(journal_entry.id)
            raise
        # --- End Transactional Block (Conceptual) ---

        logger.info(f"Payment of {amount} received for invoice {invoice.invoice_number}. "
                    f"Remaining {invoice.remaining_amount}.")
        return created_payment

    def get_payments(self, invoice_id: int) -> List[InvoicePaymentEntity]:
        return self.invoice_payments_repository.get_by_invoice_id(invoice_id)

    def list_invoices(self,
                      status: Optional[InvoiceStatus] = None,
                      search: Optional[str] = None,
                      as_of: Optional[date] = None) -> List[Dict[str, Any]]:
        as_of = as_of or date.today()
        needle = (search or "").strip().lower()
        rows = []
        for invoice in self.invoices_repository.get_all(order_by="due_date ASC, id ASC"):
            if needle and needle not in invoice.client_name.lower() and needle not in invoice.invoice_number.lower():
                continue
            current_status = invoice_status(invoice, as_of)
            if status is not None and current_status != status:
                continue
            rows.append({"invoice": invoice, "status": current_status, "remaining": invoice.remaining_amount})
        return rows

    def list_open_invoices(self, as_of: Optional[date] = None) -> List[Dict[str, Any]]:
        """Unpaid invoices with days past due and their aging bucket."""
        as_of = as_of or date.today()
        return [
            {
                "invoice": invoice,
                "remaining": invoice.remaining_amount,
                "days_past_due": days_past_due(invoice.due_date, as_of),
                "aging_bucket": classify_aging(invoice.due_date, as_of),
            }
            for invoice in self.invoices_repository.get_open_invoices()
        ]

    def get_summary(self, as_of: Optional[date] = None) -> Dict[str, Any]:
        as_of = as_of or date.today()
        aging = build_aging_summary(
            ((inv.due_date, inv.remaining_amount) for inv in self.invoices_repository.get_open_invoices()), as_of)
        buckets = aging["buckets"]
        return {
            "total_outstanding": aging["total_outstanding"],
            "current": aging["current"],
            "past_due": aging["past_due"],
            "days_1_30": buckets[AgingBucket.DAYS_1_30.value],
            "days_31_60": buckets[AgingBucket.DAYS_31_60.value],
            "days_61_90": buckets[AgingBucket.DAYS_61_90.value],
            "days_90_plus": buckets[AgingBucket.DAYS_90_PLUS.value],
            "counts": aging["counts"],
            "due_within": aging["due_within"],
        }

    def get_customer_ledger(self, client_name: str) -> Dict[str, Any]:
        """Every invoice for one client and every payment received on them, with a running balance."""
        if not client_name or not client_name.strip():
            raise ValueError("Client name is required.")
        invoices = self.invoices_repository.get_by_client_name(client_name.strip())
        payments = []
        for invoice in invoices:
            for payment in self.invoice_payments_repository.get_by_invoice_id(invoice.id):
                payments.append((payment.payment_date, payment.reference_number or invoice.invoice_number,
                                 f"Payment - {payment.payment_method.value}", payment.amount))
        return build_party_ledger(
            client_name.strip(),
            "invoice",
            ((i.invoice_date, i.invoice_number, i.description or f"Invoice to {i.client_name}",
              i.total_amount, i.due_date, i.remaining_amount) for i in invoices),
            payments,
        )

# warehouse_ledger/main_app.py
import sys
import logging
import logging.config
from types import SimpleNamespace

# --- Configuration and Constants ---
from warehouse_ledger.config import DATABASE_PATH, LOGGING_CONFIG, ensure_directories
from warehouse_ledger.constants import (
    DEFAULT_ACCOUNTS_CONFIG_FOR_PAYABLES, DEFAULT_ACCOUNTS_CONFIG_FOR_RECEIVABLES,
    DEFAULT_ACCOUNTS_CONFIG_FOR_PAYROLL, DEFAULT_ACCOUNTS_CONFIG_FOR_EXPENSES,
)

# --- Data Access Layer (DAL) ---
from warehouse_ledger.data_access.database_manager import DatabaseManager
from warehouse_ledger.data_access.employees_repository import EmployeesRepository
from warehouse_ledger.data_access.accounts_repository import AccountsRepository
from warehouse_ledger.data_access.journal_entries_repository import JournalEntriesRepository
from warehouse_ledger.data_access.journal_entry_lines_repository import JournalEntryLinesRepository
from warehouse_ledger.data_access.vendor_bills_repository import VendorBillsRepository
from warehouse_ledger.data_access.bill_payments_repository import BillPaymentsRepository
from warehouse_ledger.data_access.invoices_repository import InvoicesRepository
from warehouse_ledger.data_access.invoice_payments_repository import InvoicePaymentsRepository
from warehouse_ledger.data_access.payrolls_repository import PayrollsRepository
from warehouse_ledger.data_access.products_repository import ProductsRepository
from warehouse_ledger.data_access.product_batches_repository import ProductBatchesRepository
from warehouse_ledger.data_access.batch_allocations_repository import BatchAllocationsRepository
from warehouse_ledger.data_access.expenses_repository import ExpensesRepository
from warehouse_ledger.data_access.outgoing_shipments_repository import OutgoingShipmentsRepository
from warehouse_ledger.data_access.shipment_items_repository import ShipmentItemsRepository

# --- Business Logic Layer (BLL) ---
from warehouse_ledger.business_logic.employee_manager import EmployeeManager
from warehouse_ledger.business_logic.account_manager import AccountManager
from warehouse_ledger.business_logic.journal_manager import JournalManager
from warehouse_ledger.business_logic.payables_manager import PayablesManager
from warehouse_ledger.business_logic.receivables_manager import ReceivablesManager
from warehouse_ledger.business_logic.payroll_manager import PayrollManager
from warehouse_ledger.business_logic.batch_manager import BatchManager
from warehouse_ledger.business_logic.expense_manager import ExpenseManager
from warehouse_ledger.business_logic.shipment_manager import ShipmentManager
from warehouse_ledger.business_logic.reports_manager import ReportsManager

logger = logging.getLogger(__name__)


def build_managers(db_path: str = DATABASE_PATH) -> SimpleNamespace:
    """
    Creates the database schema at db_path and wires every repository and
    manager together. Managers are returned as attributes of a namespace.
    """
    logger.info(f"Initializing Database Manager at {db_path} and creating tables...")
    db_manager = DatabaseManager(db_path)
    db_manager.create_tables()

    logger.info("Initializing Repositories...")
    employees_repo = EmployeesRepository(db_manager)
    accounts_repo = AccountsRepository(db_manager)
    journal_entries_repo = JournalEntriesRepository(db_manager)
    journal_lines_repo = JournalEntryLinesRepository(db_manager)
    vendor_bills_repo = VendorBillsRepository(db_manager)
    bill_payments_repo = BillPaymentsRepository(db_manager)
    invoices_repo = InvoicesRepository(db_manager)
    invoice_payments_repo = InvoicePaymentsRepository(db_manager)
    payrolls_repo = PayrollsRepository(db_manager)
    products_repo = ProductsRepository(db_manager)
    batches_repo = ProductBatchesRepository(db_manager)
    allocations_repo = BatchAllocationsRepository(db_manager)
    expenses_repo = ExpensesRepository(db_manager)
    shipments_repo = OutgoingShipmentsRepository(db_manager)
    shipment_items_repo = ShipmentItemsRepository(db_manager)

    logger.info("Initializing Managers...")
    employee_manager = EmployeeManager(employees_repo)
    account_manager = AccountManager(accounts_repository=accounts_repo,
                                     journal_entry_lines_repository=journal_lines_repo)
    journal_manager = JournalManager(journal_entries_repository=journal_entries_repo,
                                     journal_entry_lines_repository=journal_lines_repo,
                                     accounts_repository=accounts_repo)
    payables_manager = PayablesManager(
        vendor_bills_repository=vendor_bills_repo,
        bill_payments_repository=bill_payments_repo,
        accounts_repository=accounts_repo,
        journal_manager=journal_manager,
        accounts_config=DEFAULT_ACCOUNTS_CONFIG_FOR_PAYABLES,
    )
    receivables_manager = ReceivablesManager(
        invoices_repository=invoices_repo,
        invoice_payments_repository=invoice_payments_repo,
        journal_manager=journal_manager,
        accounts_config=DEFAULT_ACCOUNTS_CONFIG_FOR_RECEIVABLES,
    )
    payroll_manager = PayrollManager(
        payrolls_repository=payrolls_repo,
        employee_manager=employee_manager,
        journal_manager=journal_manager,
        accounts_config=DEFAULT_ACCOUNTS_CONFIG_FOR_PAYROLL,
    )
    batch_manager = BatchManager(products_repository=products_repo,
                                 product_batches_repository=batches_repo,
                                 batch_allocations_repository=allocations_repo)
    expense_manager = ExpenseManager(expenses_repository=expenses_repo,
                                     journal_manager=journal_manager,
                                     accounts_config=DEFAULT_ACCOUNTS_CONFIG_FOR_EXPENSES)
    shipment_manager = ShipmentManager(outgoing_shipments_repository=shipments_repo,
                                       shipment_items_repository=shipment_items_repo,
                                       batch_manager=batch_manager)
    reports_manager = ReportsManager(
        account_manager=account_manager,
        journal_manager=journal_manager,
        payables_manager=payables_manager,
        receivables_manager=receivables_manager,
        payroll_manager=payroll_manager,
    )

    return SimpleNamespace(
        db_manager=db_manager,
        employee_manager=employee_manager,
        account_manager=account_manager,
        journal_manager=journal_manager,
        payables_manager=payables_manager,
        receivables_manager=receivables_manager,
        payroll_manager=payroll_manager,
        batch_manager=batch_manager,
        expense_manager=expense_manager,
        shipment_manager=shipment_manager,
        reports_manager=reports_manager,
    )


def main():
    ensure_directories()
    logging.config.dictConfig(LOGGING_CONFIG)
    logger.info("Application starting...")
    try:
        managers = build_managers(DATABASE_PATH)
    except Exception as e:
        logger.error(f"FATAL: Could not initialize database: {e}", exc_info=True)
        sys.exit(1)

    summary = managers.journal_manager.get_summary()
    trial_balance = managers.reports_manager.get_trial_balance()
    logger.info(f"Ledger ready: {summary['entry_count']} journal entries, "
                f"trial balance {'balanced' if trial_balance['balanced'] else 'NOT balanced'}.")


if __name__ == '__main__':
    main()

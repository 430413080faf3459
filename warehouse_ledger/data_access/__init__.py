# warehouse_ledger/data_access/__init__.py

from .database_manager import DatabaseManager
from .base_repository import BaseRepository

from .employees_repository import EmployeesRepository
from .accounts_repository import AccountsRepository
from .journal_entries_repository import JournalEntriesRepository
from .journal_entry_lines_repository import JournalEntryLinesRepository
from .vendor_bills_repository import VendorBillsRepository
from .bill_payments_repository import BillPaymentsRepository
from .invoices_repository import InvoicesRepository
from .invoice_payments_repository import InvoicePaymentsRepository
from .payrolls_repository import PayrollsRepository
from .products_repository import ProductsRepository
from .product_batches_repository import ProductBatchesRepository
from .batch_allocations_repository import BatchAllocationsRepository
from .expenses_repository import ExpensesRepository
from .outgoing_shipments_repository import OutgoingShipmentsRepository
from .shipment_items_repository import ShipmentItemsRepository

ALL_REPOSITORIES = [
    EmployeesRepository, AccountsRepository, JournalEntriesRepository, JournalEntryLinesRepository,
    VendorBillsRepository, BillPaymentsRepository, InvoicesRepository, InvoicePaymentsRepository,
    PayrollsRepository, ProductsRepository, ProductBatchesRepository, BatchAllocationsRepository,
    ExpensesRepository, OutgoingShipmentsRepository, ShipmentItemsRepository,
]

# warehouse_ledger/business_logic/entities/__init__.py
from .base_entity import BaseEntity
from .employee_entity import EmployeeEntity
from .account_entity import AccountEntity
from .journal_entry_line_entity import JournalEntryLineEntity
from .journal_entry_entity import JournalEntryEntity
from .vendor_bill_entity import VendorBillEntity
from .bill_payment_entity import BillPaymentEntity
from .invoice_entity import InvoiceEntity
from .invoice_payment_entity import InvoicePaymentEntity
from .payroll_entity import PayrollEntity
from .product_entity import ProductEntity
from .product_batch_entity import ProductBatchEntity
from .batch_allocation_entity import BatchAllocationEntity
from .expense_entity import ExpenseEntity
from .shipment_item_entity import ShipmentItemEntity
from .outgoing_shipment_entity import OutgoingShipmentEntity

__all__ = [
    "BaseEntity", "EmployeeEntity", "AccountEntity",
    "JournalEntryEntity", "JournalEntryLineEntity",
    "VendorBillEntity", "BillPaymentEntity",
    "InvoiceEntity", "InvoicePaymentEntity",
    "PayrollEntity", "ProductEntity", "ProductBatchEntity", "BatchAllocationEntity",
    "ExpenseEntity", "OutgoingShipmentEntity", "ShipmentItemEntity",
]

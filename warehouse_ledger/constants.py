# warehouse_ledger/constants.py

from enum import Enum
from decimal import Decimal

# General
DATE_FORMAT = "%Y-%m-%d"
CENT = Decimal("0.01")


class AccountCategory(Enum):
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @property
    def is_debit_normal(self) -> bool:
        return self in (AccountCategory.ASSET, AccountCategory.EXPENSE)


class JournalEntryStatus(Enum):
    DRAFT = "draft"
    POSTED = "posted"
    VOID = "void"


class EmployeeRole(Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class EmployeeStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class PayType(Enum):
    HOURLY = "hourly"
    SALARY = "salary"


class PayrollStatus(Enum):
    DRAFT = "draft"
    PROCESSED = "processed"
    PAID = "paid"


# Forward-only payroll lifecycle
PAYROLL_TRANSITIONS = {
    PayrollStatus.DRAFT: PayrollStatus.PROCESSED,
    PayrollStatus.PROCESSED: PayrollStatus.PAID,
}


class BillStatus(Enum):
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"


class InvoiceStatus(Enum):
    SENT = "sent"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"


class AgingBucket(Enum):
    CURRENT = "current"
    DAYS_1_30 = "1-30"
    DAYS_31_60 = "31-60"
    DAYS_61_90 = "61-90"
    DAYS_90_PLUS = "90+"


class PaymentMethod(Enum):
    CASH = "cash"
    CHECK = "check"
    BANK_TRANSFER = "bank_transfer"
    CREDIT_CARD = "credit_card"
    ACH = "ach"


class ExpirationStatus(Enum):
    NONE = "none"
    EXPIRED = "expired"
    CRITICAL = "critical"
    WARNING = "warning"
    NORMAL = "normal"


class AllocationStrategy(Enum):
    FIFO = "FIFO"
    LIFO = "LIFO"
    FEFO = "FEFO"


class ExpenseStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class ShipmentStatus(Enum):
    PENDING = "pending"
    READY_TO_SHIP = "ready-to-ship"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


SHIPMENT_TRANSITIONS = {
    ShipmentStatus.PENDING: {ShipmentStatus.READY_TO_SHIP, ShipmentStatus.CANCELLED},
    ShipmentStatus.READY_TO_SHIP: {ShipmentStatus.SHIPPED, ShipmentStatus.CANCELLED},
    ShipmentStatus.SHIPPED: {ShipmentStatus.DELIVERED},
    ShipmentStatus.DELIVERED: set(),
    ShipmentStatus.CANCELLED: set(),
}


# Page access flags carried on each employee
DEFAULT_PAGE_PERMISSIONS = {
    "dashboard": False,
    "inventory": True,
    "orders": False,
    "shipments": False,
    "locations": False,
    "predictive-inventory": False,
    "todos": True,
    "clients": False,
    "vendors": False,
    "financial": False,
    "integrations": False,
}


# Default chart of accounts seeded by DatabaseManager.create_tables
# (code, name, category)
DEFAULT_CHART_OF_ACCOUNTS = [
    ("1000", "Cash", AccountCategory.ASSET),
    ("1100", "Accounts Receivable", AccountCategory.ASSET),
    ("1200", "Inventory", AccountCategory.ASSET),
    ("2000", "Accounts Payable", AccountCategory.LIABILITY),
    ("2100", "Payroll Liabilities", AccountCategory.LIABILITY),
    ("3000", "Owner's Equity", AccountCategory.EQUITY),
    ("4000", "Sales Revenue", AccountCategory.REVENUE),
    ("4100", "Storage & Handling Revenue", AccountCategory.REVENUE),
    ("5000", "Cost of Goods Sold", AccountCategory.EXPENSE),
    ("6000", "Operating Expenses", AccountCategory.EXPENSE),
    ("6100", "Salaries & Wages", AccountCategory.EXPENSE),
]

DEFAULT_ACCOUNTS_CONFIG_FOR_PAYABLES = {
    "accounts_payable": "2000",
    "default_expense": "6000",
    "cash": "1000",
}

DEFAULT_ACCOUNTS_CONFIG_FOR_RECEIVABLES = {
    "accounts_receivable": "1100",
    "sales_revenue": "4000",
    "cash": "1000",
}

DEFAULT_ACCOUNTS_CONFIG_FOR_PAYROLL = {
    "salary_expense_account": "6100",
    "payroll_cash_account": "1000",
}

DEFAULT_ACCOUNTS_CONFIG_FOR_EXPENSES = {
    "default_expense": "6000",
    "cash": "1000",
}

# warehouse_ledger/business_logic/__init__.py
from .employee_manager import EmployeeManager
from .account_manager import AccountManager
from .journal_manager import JournalManager
from .payables_manager import PayablesManager
from .receivables_manager import ReceivablesManager
from .payroll_manager import PayrollManager
from .batch_manager import BatchManager
from .expense_manager import ExpenseManager
from .shipment_manager import ShipmentManager
from .reports_manager import ReportsManager

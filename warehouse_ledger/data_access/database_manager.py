# warehouse_ledger/data_access/database_manager.py

import sqlite3
import logging
from warehouse_ledger.config import DATABASE_PATH, LOGGING_CONFIG, ensure_directories
from warehouse_ledger.constants import (
    AccountCategory, JournalEntryStatus, EmployeeRole, EmployeeStatus, PayType,
    PayrollStatus, PaymentMethod, AllocationStrategy, ExpenseStatus, ShipmentStatus,
    DEFAULT_CHART_OF_ACCOUNTS
)

logger = logging.getLogger(__name__)


def _enum_values(enum_cls) -> str:
    return ', '.join(f"'{member.value}'" for member in enum_cls)


class DatabaseManager:
    def __init__(self, db_path=DATABASE_PATH):
        self.db_path = db_path
        self.conn = None

    def __enter__(self):
        try:
            self.conn = sqlite3.connect(self.db_path)
            self.conn.row_factory = sqlite3.Row # Access columns by name
            self.conn.execute("PRAGMA foreign_keys = ON;") # Enforce foreign key constraints
            logger.debug(f"Database connection established to {self.db_path}")
            return self.conn
        except sqlite3.Error as e:
            logger.error(f"Error connecting to database {self.db_path}: {e}")
            raise

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.debug("Database connection closed.")

    def execute_query(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                conn.commit()
                return cursor
        except sqlite3.Error as e:
            logger.error(f"Query execution failed: {query} with params {params} - {e}")
            raise

    def fetch_one(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                return cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Fetch one failed: {query} with params {params} - {e}")
            raise

    def fetch_all(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                return cursor.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Fetch all failed: {query} with params {params} - {e}")
            raise

    def create_tables(self):
        queries = [
            """
            CREATE TABLE IF NOT EXISTS employees (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                email TEXT NOT NULL UNIQUE,
                position TEXT NOT NULL,
                role TEXT NOT NULL CHECK(role IN ({roles})),
                status TEXT NOT NULL CHECK(status IN ({statuses})),
                department TEXT,
                phone TEXT,
                hire_date TEXT,
                assigned_warehouse_id TEXT,
                pay_type TEXT NOT NULL CHECK(pay_type IN ({pay_types})),
                hourly_rate REAL NOT NULL DEFAULT 0.0,
                annual_salary REAL NOT NULL DEFAULT 0.0,
                federal_withholding REAL NOT NULL DEFAULT 0.0,
                state_withholding REAL NOT NULL DEFAULT 0.0,
                social_security_rate REAL NOT NULL DEFAULT 0.0,
                medicare_rate REAL NOT NULL DEFAULT 0.0,
                retirement_401k_rate REAL NOT NULL DEFAULT 0.0,
                health_insurance_amount REAL NOT NULL DEFAULT 0.0,
                dental_insurance_amount REAL NOT NULL DEFAULT 0.0,
                page_permissions TEXT -- JSON object of page -> bool
            );
            """.format(roles=_enum_values(EmployeeRole), statuses=_enum_values(EmployeeStatus),
                       pay_types=_enum_values(PayType)),
            """
            CREATE TABLE IF NOT EXISTS accounts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                code TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                category TEXT NOT NULL CHECK(category IN ({})),
                description TEXT,
                opening_balance REAL NOT NULL DEFAULT 0.0,
                warehouse_id TEXT,
                is_active INTEGER NOT NULL DEFAULT 1
            );
            """.format(_enum_values(AccountCategory)),
            """
            CREATE TABLE IF NOT EXISTS journal_entries (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                entry_number TEXT NOT NULL UNIQUE,
                entry_date TEXT NOT NULL, -- ISO Date
                description TEXT NOT NULL,
                status TEXT NOT NULL CHECK(status IN ({})),
                reference TEXT,
                total_amount REAL NOT NULL DEFAULT 0.0,
                warehouse_id TEXT
            );
            """.format(_enum_values(JournalEntryStatus)),
            """
            CREATE TABLE IF NOT EXISTS journal_entry_lines (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                journal_entry_id INTEGER NOT NULL,
                account_id INTEGER NOT NULL,
                line_number INTEGER NOT NULL DEFAULT 1,
                debit_amount REAL NOT NULL DEFAULT 0.0,
                credit_amount REAL NOT NULL DEFAULT 0.0,
                description TEXT,
                FOREIGN KEY (journal_entry_id) REFERENCES journal_entries(id) ON DELETE CASCADE,
                FOREIGN KEY (account_id) REFERENCES accounts(id) ON DELETE RESTRICT
            );
            """,
            """
            CREATE TABLE IF NOT EXISTS vendor_bills (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                bill_number TEXT NOT NULL UNIQUE,
                vendor_name TEXT NOT NULL,
                issue_date TEXT NOT NULL,
                due_date TEXT NOT NULL,
                amount REAL NOT NULL,
                paid_amount REAL NOT NULL DEFAULT 0.0,
                description TEXT,
                expense_account_id INTEGER,
                warehouse_id TEXT,
                FOREIGN KEY (expense_account_id) REFERENCES accounts(id) ON DELETE SET NULL
            );
            """,
            """
            CREATE TABLE IF NOT EXISTS bill_payments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                bill_id INTEGER NOT NULL,
                payment_amount REAL NOT NULL,
                payment_date TEXT NOT NULL,
                payment_method TEXT NOT NULL CHECK(payment_method IN ({})),
                reference_number TEXT,
                notes TEXT,
                journal_entry_id INTEGER,
                FOREIGN KEY (bill_id) REFERENCES vendor_bills(id) ON DELETE CASCADE,
                FOREIGN KEY (journal_entry_id) REFERENCES journal_entries(id) ON DELETE SET NULL
            );
            """.format(_enum_values(PaymentMethod)),
            """
            CREATE TABLE IF NOT EXISTS invoices (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                invoice_number TEXT NOT NULL UNIQUE,
                client_name TEXT NOT NULL,
                invoice_date TEXT NOT NULL,
                due_date TEXT NOT NULL,
                total_amount REAL NOT NULL,
                paid_amount REAL NOT NULL DEFAULT 0.0,
                client_contact_email TEXT,
                description TEXT,
                warehouse_id TEXT
            );
            """,
            """
            CREATE TABLE IF NOT EXISTS invoice_payments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                invoice_id INTEGER NOT NULL,
                amount REAL NOT NULL,
                payment_date TEXT NOT NULL,
                payment_method TEXT NOT NULL CHECK(payment_method IN ({})),
                reference_number TEXT,
                notes TEXT,
                journal_entry_id INTEGER,
                FOREIGN KEY (invoice_id) REFERENCES invoices(id) ON DELETE CASCADE,
                FOREIGN KEY (journal_entry_id) REFERENCES journal_entries(id) ON DELETE SET NULL
            );
            """.format(_enum_values(PaymentMethod)),
            """
            CREATE TABLE IF NOT EXISTS payrolls (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                employee_id INTEGER NOT NULL,
                pay_period_start TEXT NOT NULL,
                pay_period_end TEXT NOT NULL,
                hours_worked REAL NOT NULL DEFAULT 0.0,
                overtime_hours REAL NOT NULL DEFAULT 0.0,
                hourly_rate REAL NOT NULL DEFAULT 0.0,
                overtime_rate REAL NOT NULL DEFAULT 0.0,
                bonus REAL NOT NULL DEFAULT 0.0,
                gross_pay REAL NOT NULL DEFAULT 0.0,
                federal_tax REAL NOT NULL DEFAULT 0.0,
                state_tax REAL NOT NULL DEFAULT 0.0,
                social_security REAL NOT NULL DEFAULT 0.0,
                medicare REAL NOT NULL DEFAULT 0.0,
                retirement_401k REAL NOT NULL DEFAULT 0.0,
                health_insurance REAL NOT NULL DEFAULT 0.0,
                dental_insurance REAL NOT NULL DEFAULT 0.0,
                other_deductions REAL NOT NULL DEFAULT 0.0,
                total_deductions REAL NOT NULL DEFAULT 0.0,
                net_pay REAL NOT NULL DEFAULT 0.0,
                status TEXT NOT NULL CHECK(status IN ({})),
                pay_date TEXT,
                notes TEXT,
                journal_entry_id INTEGER,
                FOREIGN KEY (employee_id) REFERENCES employees(id) ON DELETE RESTRICT,
                FOREIGN KEY (journal_entry_id) REFERENCES journal_entries(id) ON DELETE SET NULL
            );
            """.format(_enum_values(PayrollStatus)),
            """
            CREATE TABLE IF NOT EXISTS products (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                sku TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                unit_price REAL NOT NULL DEFAULT 0.0,
                stock INTEGER NOT NULL DEFAULT 0,
                warehouse_id TEXT,
                description TEXT,
                is_active INTEGER NOT NULL DEFAULT 1
            );
            """,
            """
            CREATE TABLE IF NOT EXISTS product_batches (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                product_id INTEGER NOT NULL,
                batch_number TEXT NOT NULL,
                quantity INTEGER NOT NULL CHECK(quantity >= 0),
                received_date TEXT NOT NULL,
                cost_price REAL NOT NULL DEFAULT 0.0,
                expiration_date TEXT,
                location TEXT,
                supplier_reference TEXT,
                notes TEXT,
                warehouse_id TEXT,
                FOREIGN KEY (product_id) REFERENCES products(id) ON DELETE CASCADE
            );
            """,
            """
            CREATE TABLE IF NOT EXISTS batch_allocations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                batch_id INTEGER, -- kept after the batch is emptied and removed
                product_id INTEGER NOT NULL,
                quantity INTEGER NOT NULL,
                allocation_date TEXT NOT NULL,
                strategy TEXT NOT NULL CHECK(strategy IN ({})),
                order_reference TEXT,
                FOREIGN KEY (product_id) REFERENCES products(id) ON DELETE CASCADE
            );
            """.format(_enum_values(AllocationStrategy)),
            """
            CREATE TABLE IF NOT EXISTS expenses (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                entry_date TEXT NOT NULL,
                description TEXT NOT NULL,
                category TEXT NOT NULL,
                amount REAL NOT NULL,
                vendor TEXT,
                status TEXT NOT NULL CHECK(status IN ({statuses})),
                payment_method TEXT CHECK(payment_method IS NULL OR payment_method IN ({methods})),
                payment_date TEXT,
                reference TEXT,
                warehouse_id TEXT,
                journal_entry_id INTEGER,
                FOREIGN KEY (journal_entry_id) REFERENCES journal_entries(id) ON DELETE SET NULL
            );
            """.format(statuses=_enum_values(ExpenseStatus), methods=_enum_values(PaymentMethod)),
            """
            CREATE TABLE IF NOT EXISTS outgoing_shipments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                shipment_number TEXT NOT NULL UNIQUE,
                customer_name TEXT NOT NULL,
                status TEXT NOT NULL CHECK(status IN ({})),
                carrier TEXT,
                tracking_number TEXT,
                expected_date TEXT,
                shipped_date TEXT,
                delivered_date TEXT,
                shipping_address TEXT,
                notes TEXT,
                warehouse_id TEXT
            );
            """.format(_enum_values(ShipmentStatus)),
            """
            CREATE TABLE IF NOT EXISTS shipment_items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                shipment_id INTEGER NOT NULL,
                product_id INTEGER NOT NULL,
                quantity INTEGER NOT NULL CHECK(quantity > 0),
                FOREIGN KEY (shipment_id) REFERENCES outgoing_shipments(id) ON DELETE CASCADE,
                FOREIGN KEY (product_id) REFERENCES products(id) ON DELETE RESTRICT
            );
            """,
        ]

        insert_account_query = (
            "INSERT OR IGNORE INTO accounts (code, name, category, opening_balance, is_active) "
            "VALUES (?, ?, ?, 0.0, 1);"
        )

        try:
            with self as conn:
                cursor = conn.cursor()
                logger.info("Checking/Creating database tables...")
                for query_index, query in enumerate(queries):
                    table_name_log = "Unknown Table"
                    first_line = query.strip().splitlines()[0]
                    if "CREATE TABLE IF NOT EXISTS" in first_line.upper():
                        table_name_log = first_line.upper().split("CREATE TABLE IF NOT EXISTS")[1].split("(")[0].strip()

                    logger.debug(f"Executing table creation for: {table_name_log.lower()} (Query {query_index+1}/{len(queries)})")
                    try:
                        cursor.execute(query)
                    except sqlite3.Error as e_table:
                        logger.error(f"Error creating table {table_name_log.lower()}: {e_table}\nSQL:\n{query[:200]}...")
                        raise

                logger.info("Database tables checked/created successfully.")

                logger.info("Seeding default chart of accounts if missing...")
                for code, name, category in DEFAULT_CHART_OF_ACCOUNTS:
                    cursor.execute(insert_account_query, (code, name, category.value))
                    if cursor.rowcount > 0:
                        logger.info(f"Default account '{name}' (code: {code}) seeded.")

                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize database schema or seed data: {e}", exc_info=True)
            raise


if __name__ == '__main__':
    import logging.config
    ensure_directories()
    logging.config.dictConfig(LOGGING_CONFIG)

    main_logger = logging.getLogger()
    db_manager = DatabaseManager()
    try:
        main_logger.info("Initializing database setup...")
        db_manager.create_tables()
        rows = db_manager.fetch_all("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;")
        main_logger.info(f"Tables found in database ({len(rows)}): {[row[0] for row in rows]}")
    except Exception as e:
        main_logger.error(f"An error occurred during database setup: {e}", exc_info=True)

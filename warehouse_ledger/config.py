# warehouse_ledger/config.py

import os
import logging
from decimal import Decimal

# --- Database Configuration ---
BASE_DIR = os.environ.get("WAREHOUSE_LEDGER_HOME", os.path.join(os.path.expanduser("~"), ".warehouse_ledger"))
DATA_DIR = os.path.join(BASE_DIR, "data")
DB_NAME = "warehouse_ledger.db"
DATABASE_PATH = os.path.join(DATA_DIR, DB_NAME)

# --- Logging Configuration ---
LOGS_DIR = os.path.join(BASE_DIR, "logs")
LOG_FILE_NAME = "app.log"
LOG_FILE_PATH = os.path.join(LOGS_DIR, LOG_FILE_NAME)

LOG_LEVEL = logging.INFO
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s'

LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': LOG_FORMAT,
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
            'level': logging.DEBUG,
        },
        'file': {
            'class': 'logging.handlers.RotatingFileHandler',
            'formatter': 'standard',
            'filename': LOG_FILE_PATH,
            'maxBytes': 1024*1024*5,  # 5 MB
            'backupCount': 5,
            'level': logging.INFO,
            'encoding': 'utf-8',
        },
    },
    'root': {
        'handlers': ['console', 'file'],
        'level': LOG_LEVEL,
    },
}


def ensure_directories() -> None:
    """Creates the data and log directories if they don't exist yet."""
    for directory in (DATA_DIR, LOGS_DIR):
        if not os.path.exists(directory):
            os.makedirs(directory)


# --- Application Settings ---
DEFAULT_CURRENCY = "USD"
COMPANY_NAME = "Warehouse Ledger"

# --- Payroll ---
PAY_PERIODS_PER_YEAR = 24  # semi-monthly: 1st-15th, 16th-end of month
OVERTIME_MULTIPLIER = Decimal("1.5")

# --- Expenses ---
EXPENSE_OVERDUE_AFTER_DAYS = 30

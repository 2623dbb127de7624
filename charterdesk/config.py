# charterdesk/config.py

import os
import logging
from decimal import Decimal

# --- Database Configuration ---
BASE_DIR = os.environ.get(
    "CHARTERDESK_HOME",
    os.path.dirname(os.path.dirname(os.path.abspath(__file__)))  # charterdesk/ -> project root
)
DATA_DIR = os.path.join(BASE_DIR, "data")
DB_NAME = "charterdesk.db"
DATABASE_PATH = os.path.join(DATA_DIR, DB_NAME)

# Create data directory if it doesn't exist
os.makedirs(DATA_DIR, exist_ok=True)

# --- Logging Configuration ---
LOGS_DIR = os.path.join(BASE_DIR, "logs")
LOG_FILE_NAME = "charterdesk.log"
LOG_FILE_PATH = os.path.join(LOGS_DIR, LOG_FILE_NAME)

LOG_LEVEL = logging.DEBUG
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s'

LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': LOG_FORMAT,
            'datefmt': '%Y-%m-%d %H:%M:%S',
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

# --- Application Settings ---
COMPANY_NAME = "CharterDesk Yachts LLC"
APP_NAME = "CharterDesk"
DEFAULT_CURRENCY = "AED"
DEFAULT_VAT_PERCENTAGE = Decimal("5")         # UAE VAT, prefilled on new opportunities
DEFAULT_PROBABILITY_PERCENTAGE = Decimal("50")

# Role of the desktop user until a login screen exists
USER_ROLE = os.environ.get("CHARTERDESK_ROLE", "Admin")

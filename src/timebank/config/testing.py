import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timebank_test"),
}

DEBUG = False
LOG_LEVEL = "WARNING"
AUTO_INIT_DB = False

ADJUSTMENT_MAX_MINUTES = 240
JUSTIFICATION_MIN_LENGTH = 10
JUSTIFICATION_MAX_LENGTH = 500
CYCLE_SAFETY_LIMIT = 20
DEFAULT_EXPECTED_MINUTES = 480

import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "timebank"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timebank_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

ADJUSTMENT_MAX_MINUTES = int(os.getenv("ADJUSTMENT_MAX_MINUTES", "240"))
JUSTIFICATION_MIN_LENGTH = 10
JUSTIFICATION_MAX_LENGTH = 500
CYCLE_SAFETY_LIMIT = int(os.getenv("CYCLE_SAFETY_LIMIT", "20"))
DEFAULT_EXPECTED_MINUTES = int(os.getenv("DEFAULT_EXPECTED_MINUTES", "480"))

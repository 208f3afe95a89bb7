import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timebank_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Apply database/schema.sql on startup (idempotent: CREATE TABLE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

ADJUSTMENT_MAX_MINUTES = int(os.getenv("ADJUSTMENT_MAX_MINUTES", "240"))
JUSTIFICATION_MIN_LENGTH = 10
JUSTIFICATION_MAX_LENGTH = 500
CYCLE_SAFETY_LIMIT = 20
DEFAULT_EXPECTED_MINUTES = int(os.getenv("DEFAULT_EXPECTED_MINUTES", "480"))

import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timesheet_test"),
}

DEBUG = False
TESTING = True

DEV_TEST_TOKEN = "test-token"

BACKFILL_DAYS = 7
REGULAR_HOURS_PER_DAY = 8.0
MAX_EXPORT_DAYS = 730

ENABLE_MIDNIGHT_SCHEDULER = False

AUTO_INIT_DB = False

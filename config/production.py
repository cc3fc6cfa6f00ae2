import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timesheet_db"),
}

DEBUG = False

DEV_TEST_TOKEN = os.getenv("DEV_TEST_TOKEN", "")

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")

BACKFILL_DAYS = int(os.getenv("BACKFILL_DAYS", "7"))
REGULAR_HOURS_PER_DAY = float(os.getenv("REGULAR_HOURS_PER_DAY", "8"))
MAX_EXPORT_DAYS = int(os.getenv("MAX_EXPORT_DAYS", "730"))

ENABLE_MIDNIGHT_SCHEDULER = bool(int(os.getenv("ENABLE_MIDNIGHT_SCHEDULER", "1")))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

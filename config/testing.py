import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "clinical_attendance_test"),
}

DEBUG = False
TESTING = True

STORE_BACKEND = "memory"
CATALOG_SEED_PATH = os.getenv("CATALOG_SEED_PATH", "database/catalog_seed.json")

AUTO_INIT_DB = False
AUTO_SEED_DB = False

LOCK_TIMEOUT_SECONDS = 1.0
GPS_ACCURACY_RISK_M = 100.0
LOCAL_TIMEZONE = "America/New_York"

LOG_LEVEL = "WARNING"

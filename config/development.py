import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "clinical_attendance"),
}

DEBUG = True

# "mysql" or "memory"; memory loads the catalog from CATALOG_SEED_PATH
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")
CATALOG_SEED_PATH = os.getenv("CATALOG_SEED_PATH", "database/catalog_seed.json")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

LOCK_TIMEOUT_SECONDS = float(os.getenv("LOCK_TIMEOUT_SECONDS", "5"))
GPS_ACCURACY_RISK_M = float(os.getenv("GPS_ACCURACY_RISK_M", "100"))
LOCAL_TIMEZONE = os.getenv("LOCAL_TIMEZONE", "America/New_York")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

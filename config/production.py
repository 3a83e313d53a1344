import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "clinical_attendance"),
}

DEBUG = False

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")
CATALOG_SEED_PATH = os.getenv("CATALOG_SEED_PATH", "")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

LOCK_TIMEOUT_SECONDS = float(os.getenv("LOCK_TIMEOUT_SECONDS", "5"))
GPS_ACCURACY_RISK_M = float(os.getenv("GPS_ACCURACY_RISK_M", "100"))
LOCAL_TIMEZONE = os.getenv("LOCAL_TIMEZONE", "America/New_York")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

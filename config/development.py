import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "labour_ledger"),
}

# "mysql" or "memory" (in-process store, data is lost on restart)
STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

# Owning account scope for the roster and the ledger
TENANT_ID = os.getenv("TENANT_ID", "default")

# Attendance dates are tenant-local calendar days
TIMEZONE = os.getenv("TIMEZONE", "Asia/Kolkata")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

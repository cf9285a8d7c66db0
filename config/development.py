import os

from werkzeug.security import generate_password_hash

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "print_today_epos"),
}

# "mysql" or "memory" (process-local, lost on restart)
STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

# PIN guarding the admin endpoints; prefer a precomputed ADMIN_PIN_HASH.
ADMIN_PIN_HASH = os.getenv("ADMIN_PIN_HASH") or generate_password_hash(os.getenv("ADMIN_PIN", "0000"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

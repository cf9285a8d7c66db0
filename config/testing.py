import os

from werkzeug.security import generate_password_hash

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "print_today_epos_test"),
}

STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")

ADMIN_PIN = "2468"
ADMIN_PIN_HASH = generate_password_hash(ADMIN_PIN)

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = False

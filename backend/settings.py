"""
Application settings.

Values are read from the environment (a local .env file is loaded first).
A few of them can be overridden at runtime through the app_config table,
see crud/app_config.py.
"""

import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

# Database
POSTGRES_USER = os.getenv("POSTGRES_USER", "postgres")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
POSTGRES_SERVER = os.getenv("POSTGRES_SERVER", "localhost")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")
POSTGRES_DB = os.getenv("POSTGRES_DB", "medstock_db")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+psycopg2://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_SERVER}:{POSTGRES_PORT}/{POSTGRES_DB}",
)

# Logging
LOG_DIR = os.getenv("LOG_DIR", "logs")

# All timestamps are stored and compared in this timezone
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "Asia/Kolkata")

# Billing
GST_RATE = Decimal(os.getenv("GST_RATE", "0.18"))
INVOICE_PREFIX = os.getenv("INVOICE_PREFIX", "INV-")
INVOICE_NUMBER_PADDING = int(os.getenv("INVOICE_NUMBER_PADDING", "6"))

# Stock alerts and reorder advice
EXPIRING_SOON_DAYS = int(os.getenv("EXPIRING_SOON_DAYS", "30"))
REORDER_WINDOW_DAYS = int(os.getenv("REORDER_WINDOW_DAYS", "30"))
REORDER_COVER_DAYS = int(os.getenv("REORDER_COVER_DAYS", "30"))
DEFAULT_REORDER_LEVEL = 2

# Tokens are issued by the external auth service and only verified here
AUTH_SECRET_KEY = os.getenv("AUTH_SECRET_KEY", "change-me")
AUTH_ALGORITHM = os.getenv("AUTH_ALGORITHM", "HS256")

CORS_ALLOWED_ORIGINS = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000"
)

ENABLE_SCHEDULER = os.getenv("ENABLE_SCHEDULER", "false").lower() in ("1", "true", "yes")

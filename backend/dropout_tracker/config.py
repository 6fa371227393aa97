"""
Application configuration.

All settings are read from environment variables (a local .env file is
loaded first if present). Edit the .env file to change the database
location, log verbosity, CORS origins or listing page sizes.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# ──────────────────────────────────────────────────────────────
# Persistence
# ──────────────────────────────────────────────────────────────
# Fallback to SQLite for local development when PostgreSQL is not available
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./student_dropout.db")

# ──────────────────────────────────────────────────────────────
# Logging
# ──────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ──────────────────────────────────────────────────────────────
# HTTP
# ──────────────────────────────────────────────────────────────
ALLOW_ORIGINS = [o.strip() for o in os.getenv("ALLOW_ORIGINS", "*").split(",") if o.strip()]

# Listing pagination
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

SERVICE_NAME = "student-dropout-tracker"
SERVICE_VERSION = "1.0.0"

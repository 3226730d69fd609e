"""
MindPal API Configuration

Loads environment variables used by the backend. Import settings from here
instead of calling os.getenv around the codebase.
"""

import os

from dotenv import load_dotenv

load_dotenv()


# ----------------------
# Helpers
# ----------------------

def _int(env_value: str | None, default: int = 0) -> int:
    """Safely convert an environment variable to int."""
    try:
        return int(env_value) if env_value else default
    except ValueError:
        return default


# ----------------------
# Database
# ----------------------
DATABASE_URL: str | None = os.getenv("DATABASE_URL")
DATABASE_NAME: str | None = os.getenv("DATABASE_NAME")

# ----------------------
# Auth
# ----------------------
JWT_SECRET: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS: int = _int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS"), 7)

# ----------------------
# HTTP
# ----------------------
FRONTEND_ORIGIN: str | None = os.getenv("FRONTEND_ORIGIN")
PORT: int = _int(os.getenv("PORT"), 8000)
APP_VERSION: str = os.getenv("APP_VERSION", "0.1.0")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

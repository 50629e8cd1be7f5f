"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from urllib.parse import quote

from dotenv import load_dotenv

load_dotenv()


# ── HTTP ──────────────────────────────────────────────────
APP_PORT: int = int(os.getenv("APP_PORT", "8080"))

# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "postgres")
DB_USER: str = os.getenv("DB_USER", "postgres")
DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
DB_SSLMODE: str = os.getenv("DB_SSLMODE", "disable")

DATABASE_URL: str = (
    f"postgresql://{quote(DB_USER, safe='')}:{quote(DB_PASSWORD, safe='')}"
    f"@{DB_HOST}:{DB_PORT}/{DB_NAME}?sslmode={DB_SSLMODE}"
)

# ── Connection pool ───────────────────────────────────────
# libpq rounds connect_timeout values below 2 seconds up to 2.
DB_CONNECT_TIMEOUT: int = int(os.getenv("DB_CONNECT_TIMEOUT", "2"))
DB_PING_TIMEOUT_MS: int = int(os.getenv("DB_PING_TIMEOUT_MS", "10"))
DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "10"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

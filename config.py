"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── Telegram ──────────────────────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

# ── Backend REST API ──────────────────────────────────────
API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:3000").rstrip("/")

# ── Local storage ─────────────────────────────────────────
# 'file' keeps everything in one JSON document, 'postgres' uses a key/value table.
STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "file").lower()
STORAGE_PATH: str = os.getenv("STORAGE_PATH", "data/local_storage.json")

# ── PostgreSQL (only for STORAGE_BACKEND=postgres) ────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "lifexp_tracker")
DB_USER: str = os.getenv("DB_USER", "lifexp_user")
DB_PASS: str = os.getenv("DB_PASS", "")

DATABASE_URL: str = (
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

# ── Security ──────────────────────────────────────────────
_raw_ids = os.getenv("ALLOWED_USER_IDS", "")
ALLOWED_USER_IDS: list[int] = (
    [int(uid.strip()) for uid in _raw_ids.split(",") if uid.strip()]
    if _raw_ids
    else []
)

# ── Rate Limiting ─────────────────────────────────────────
RATE_LIMIT_MESSAGES: int = int(os.getenv("RATE_LIMIT_MESSAGES", "30"))
RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

# ── Reminder thresholds (days) ────────────────────────────
BUCKET_DUE_SOON_DAYS: int = int(os.getenv("BUCKET_DUE_SOON_DAYS", "7"))
PLAN_DUE_SOON_DAYS: int = int(os.getenv("PLAN_DUE_SOON_DAYS", "15"))
PLAN_EXPIRING_SOON_DAYS: int = int(os.getenv("PLAN_EXPIRING_SOON_DAYS", "60"))
REMINDER_HOUR: int = int(os.getenv("REMINDER_HOUR", "9"))

# ── Activity log ──────────────────────────────────────────
ACTIVITY_LOG_MAX_ENTRIES: int = int(os.getenv("ACTIVITY_LOG_MAX_ENTRIES", "500"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ── Currency ──────────────────────────────────────────────
DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "INR")

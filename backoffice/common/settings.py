from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


# ============================================================
# Readers (the only place that touches os.environ)
# ============================================================

def env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def env_flag(name: str) -> bool:
    return env_str(name, "0") == "1"


# ============================================================
# Database
# ============================================================

DEFAULT_DATABASE_URL = "sqlite:///./app.db"


def database_url() -> str:
    return env_str("DATABASE_URL", DEFAULT_DATABASE_URL)


def pool_size() -> int:
    return env_int("DB_POOL_SIZE", 10)


def pool_max_overflow() -> int:
    return env_int("DB_MAX_OVERFLOW", 0)


def pool_timeout() -> int:
    return env_int("DB_POOL_TIMEOUT", 30)


# ============================================================
# App
# ============================================================

def dev_mode() -> bool:
    return env_flag("DEV_MODE")


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()


def log_format() -> str:
    return env_str("LOG_FORMAT", "text").lower()


def cors_origins() -> List[str]:
    origins = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    for key in ("FRONTEND_URL", "ADMIN_FRONTEND_URL"):
        url = env_str(key)
        if url:
            origins.append(url.rstrip("/"))
    return sorted(set(origins))


# ============================================================
# Payments
# ============================================================

def default_payment_env() -> str:
    return env_str("PAYMENT_ENV", "test")

# scoreboard_api/config.py
from __future__ import annotations

import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _get_env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


# -------------------------
# Hosted table store (Supabase / PostgREST)
# -------------------------
SUPABASE_URL: str = _get_env("SUPABASE_URL")
SUPABASE_KEY: str = _get_env("SUPABASE_KEY")

# REST prefix under the project URL
SUPABASE_REST_PATH: str = _get_env("SUPABASE_REST_PATH", "/rest/v1")

STORE_TIMEOUT_SECONDS: int = _get_env_int("STORE_TIMEOUT_SECONDS", 12)

# Store reads are cached briefly; every mutation clears the cache
STORE_CACHE_TTL_SECONDS: int = _get_env_int("STORE_CACHE_TTL_SECONDS", 30)


# -------------------------
# Admin surface
# -------------------------
# Empty means the admin endpoints are open (local development)
SCOREBOARD_ADMIN_TOKEN: str = _get_env("SCOREBOARD_ADMIN_TOKEN")


# -------------------------
# Logging
# -------------------------
LOG_LEVEL: str = _get_env("LOG_LEVEL", "INFO").upper()


def validate_config() -> None:
    if not SUPABASE_URL:
        raise RuntimeError("SUPABASE_URL is not configured")
    if not SUPABASE_URL.startswith("http"):
        raise RuntimeError("SUPABASE_URL must start with http/https")

    if not SUPABASE_KEY or SUPABASE_KEY in {"DUMMY_KEY", "PASTE_YOUR_KEY_HERE"}:
        raise RuntimeError("SUPABASE_KEY missing/placeholder")

    if not SUPABASE_REST_PATH.startswith("/"):
        raise RuntimeError("SUPABASE_REST_PATH must start with '/'")

    if STORE_TIMEOUT_SECONDS <= 0:
        raise RuntimeError("STORE_TIMEOUT_SECONDS must be positive")

    if STORE_CACHE_TTL_SECONDS < 0:
        raise RuntimeError("STORE_CACHE_TTL_SECONDS must not be negative")

# scoreboard_api/cache.py
from __future__ import annotations

import threading
import time
from typing import Any, Dict, Optional, Tuple

# Process-local store read cache. Sync route handlers run on the server's
# threadpool, so every access goes through _lock.
# key -> (expires_at_epoch, value)
_cache: Dict[str, Tuple[float, Any]] = {}
_lock = threading.Lock()


def make_key(*parts: str) -> str:
    """
    Joins the non-blank parts with ":", so make_key("store", "matches")
    gives "store:matches". The first part is the namespace that
    invalidate() works on.
    """
    cleaned = [str(p).strip() for p in parts if str(p).strip()]
    if not cleaned:
        raise ValueError("Cache key must have at least one non-empty part")
    return ":".join(cleaned)


def get(key: str) -> Optional[Any]:
    """Cached value for key, or None when it is missing or past its expiry."""
    with _lock:
        item = _cache.get(key)
        if item is None:
            return None

        expires_at, value = item
        if time.time() > expires_at:
            del _cache[key]
            return None
        return value


def set(key: str, value: Any, ttl_seconds: int = 60) -> None:
    # ttl <= 0 means reads are never kept
    if ttl_seconds <= 0:
        return
    with _lock:
        _cache[key] = (time.time() + ttl_seconds, value)


def invalidate(prefix: str) -> int:
    """
    Removes the key equal to prefix and every "prefix:..." key.
    Returns the number removed.
    """
    with _lock:
        stale = [k for k in list(_cache) if k == prefix or k.startswith(prefix + ":")]
        for k in stale:
            del _cache[k]
    return len(stale)


def clear() -> None:
    with _lock:
        _cache.clear()


def debug_snapshot() -> Dict[str, float]:
    """Seconds left before each live key expires, for the admin cache view."""
    with _lock:
        entries = list(_cache.items())
    now = time.time()
    return {k: max(0.0, expires_at - now) for k, (expires_at, _) in entries}

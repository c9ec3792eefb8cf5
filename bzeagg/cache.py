"""Thread-safe in-memory cache with per-key expiry."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import timedelta


class InMemoryCache:
    """Stores bytes by key; entries vanish once their expiration has passed."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[bytes, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            data, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return data

    def set(self, key: str, data: bytes, expiration: float | timedelta) -> None:
        seconds = (
            expiration.total_seconds() if isinstance(expiration, timedelta) else float(expiration)
        )
        with self._lock:
            now = self._clock()
            expired = [k for k, (_, at) in self._entries.items() if now >= at]
            for k in expired:
                del self._entries[k]
            self._entries[key] = (data, now + seconds)
"""
cache/store.py -- In-memory TTL cache shared by the API worker threads.

Entries carry an absolute expiry. An entry is never returned once the clock
reaches its expiry; expired entries simply read as absent and are left in
place until overwritten or until purge_expired() trims them.

Usage:
    cache = TTLCache(ttl=30 * 60)
    cache.set("weather:london", result)
    cache.get("weather:london")      # returns the stored value or None
    cache.purge_expired()            # call periodically to trim old entries

Keys are stored as given; callers canonicalize them (see cache/weather.py).
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

_DEFAULT_TTL = 30 * 60  # 30 minutes in seconds


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    expires_at: float


class TTLCache:
    def __init__(self, ttl: float = _DEFAULT_TTL, clock: Callable[[], float] = time.time) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value for key if it exists and hasn't expired."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or self._clock() >= entry.expires_at:
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> CacheEntry:
        """Store value under key, replacing any existing entry."""
        entry = CacheEntry(key=key, value=value, expires_at=self._clock() + (self.ttl if ttl is None else ttl))
        with self._lock:
            self._entries[key] = entry
        return entry

    def purge_expired(self) -> int:
        """Delete all expired entries. Returns number of entries removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if now >= e.expires_at]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def close(self) -> None:
        with self._lock:
            self._entries.clear()

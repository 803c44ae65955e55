"""Process-local session store with per-key expiry"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple


class InMemorySessionStore:
    """
    Thread-safe dict with TTLs, for single-instance deployments.

    Expired keys are invisible to reads immediately and physically removed by
    purge_expired(). Expiry is checked against the live entry under the lock,
    so a key refreshed by put()/touch() just before a purge survives it.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[Any, Optional[float]]] = {}

    def _expired(self, expires_at: Optional[float], now: float) -> bool:
        return expires_at is not None and expires_at <= now

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._expired(expires_at, self._clock()):
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        with self._lock:
            expires_at = self._clock() + ttl_seconds if ttl_seconds is not None else None
            self._entries[key] = (value, expires_at)

    def touch(self, key: str, ttl_seconds: float) -> bool:
        """Extend a live key's lifetime; False if it is missing or expired"""
        with self._lock:
            entry = self._entries.get(key)
            now = self._clock()
            if entry is None or self._expired(entry[1], now):
                return False
            self._entries[key] = (entry[0], now + ttl_seconds)
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def delete_prefix(self, prefix: str) -> int:
        with self._lock:
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def keys(self, prefix: str = "") -> List[str]:
        with self._lock:
            now = self._clock()
            return [
                key
                for key, (_, expires_at) in self._entries.items()
                if key.startswith(prefix) and not self._expired(expires_at, now)
            ]

    def purge_expired(self) -> int:
        """Drop every expired key; returns how many were removed"""
        with self._lock:
            now = self._clock()
            doomed = [key for key, (_, expires_at) in self._entries.items() if self._expired(expires_at, now)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def __len__(self) -> int:
        return len(self.keys())

"""A thread-safe in-memory map whose entries expire, and cache settings."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable


@dataclass
class _Entry:
    value: Any
    expires_at: float


class TTLMap:
    """Map of string keys to values that expire after a fixed time to live."""

    def __init__(self, ttl: float | timedelta, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)
        self._clock = clock
        self._data: dict[str, _Entry] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Any:
        """Return the live value for a key, or None if absent or expired."""
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._data[key]
                return None
            return entry.value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = _Entry(value, self._clock() + self.ttl)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None


@dataclass
class CacheKeys:
    """Standard cache key formats."""

    gateway: str = "gateway:%s"
    rules: str = "rules:%s"
    plugin: str = "plugin:%s"


@dataclass
class CacheConfig:
    """Connection settings for the shared cache."""

    host: str = ""
    port: int = 0
    password: str = ""
    db: int = 0
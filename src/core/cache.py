"""Small in-memory TTL cache with per-entry expiry.

Each value carries its own monotonic expiration timestamp. Expired entries
are dropped lazily on read or in bulk by `cleanup()`; an optional maxsize
evicts the least recently used entry on overflow.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    # Stores value + monotonic expiration time; replaced wholesale on overwrite
    value: T
    expires_at: float  # time.monotonic()

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class TTLCache(Generic[T]):
    def __init__(self, *, ttl_seconds: float = 10.0, maxsize: Optional[int] = None) -> None:
        self._ttl = float(ttl_seconds)
        self._maxsize = max(1, int(maxsize)) if maxsize else None
        self._store: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()
        self._lock = threading.Lock()

    @property
    def default_ttl(self) -> float:
        return self._ttl

    def get(self, key: str, default: Any = None) -> Any:
        # Pass a private sentinel as `default` to tell a cached None from a miss
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return default

            # Expire entries using time.monotonic to avoid time-shift issues
            if not entry.is_valid(time.monotonic()):
                self._store.pop(key, None)
                return default

            # Move to end to mark as recently used
            self._store.move_to_end(key, last=True)
            return entry.value

    def set(self, key: str, value: T, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._ttl if ttl_seconds is None else float(ttl_seconds)
        entry = CacheEntry(value=value, expires_at=time.monotonic() + ttl)

        with self._lock:
            self._store[key] = entry
            self._store.move_to_end(key, last=True)

            if self._maxsize is not None:
                while len(self._store) > self._maxsize:
                    self._store.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def size(self) -> int:
        # Storage metric: includes expired entries nobody has read yet
        with self._lock:
            return len(self._store)

    def cleanup(self) -> int:
        """Remove every expired entry and return how many were dropped."""
        now = time.monotonic()
        with self._lock:
            expired = [k for k, entry in self._store.items() if not entry.is_valid(now)]
            for k in expired:
                del self._store[k]
        return len(expired)

"""Client-side sliding-window rate limiting for the Bitkub public API.

This encapsulates two small concerns:
- A sliding-window limiter that admits at most `max_calls` per window and
  fails fast with a wait hint instead of sleeping.
- Reading the upstream's Retry-After header on 429 responses so the
  transport can report how long the server wants us to back off.
"""

from __future__ import annotations

import math
import threading
import time
from collections import deque
from datetime import datetime, timedelta, timezone
from typing import Deque, Mapping, Optional

from core.errors import RateLimitExceeded


class SlidingWindowRateLimiter:
    # One instance guards one upstream quota; timestamps are oldest-first
    def __init__(self, *, max_calls: int = 100, window_seconds: float = 60.0) -> None:
        if int(max_calls) <= 0:
            raise ValueError("max_calls must be positive")
        if float(window_seconds) <= 0:
            raise ValueError("window_seconds must be positive")

        self._max_calls = int(max_calls)
        self._window = float(window_seconds)
        self._calls: Deque[float] = deque()
        self._lock = threading.Lock()

    @property
    def max_calls(self) -> int:
        return self._max_calls

    @property
    def window_seconds(self) -> float:
        return self._window

    def check_limit(self) -> None:
        """Admit one call or raise RateLimitExceeded with the wait in seconds."""
        with self._lock:
            now = time.monotonic()
            self._prune(now)

            if len(self._calls) >= self._max_calls:
                wait = math.ceil(self._calls[0] + self._window - now)
                # A timestamp sitting exactly on the boundary still counts
                raise RateLimitExceeded(max(1, wait))

            self._calls.append(now)

    def get_remaining_requests(self) -> int:
        with self._lock:
            self._prune(time.monotonic())
            return max(0, self._max_calls - len(self._calls))

    def seconds_until_reset(self) -> float:
        with self._lock:
            if not self._calls:
                return 0.0
            return max(0.0, self._calls[0] + self._window - time.monotonic())

    def get_reset_time(self) -> datetime:
        # Wall-clock instant at which the oldest counted call frees its slot
        return datetime.now(timezone.utc) + timedelta(seconds=self.seconds_until_reset())

    def _prune(self, now: float) -> None:
        # Chronological order makes this a prefix trim; boundary is inclusive
        window_start = now - self._window
        while self._calls and self._calls[0] < window_start:
            self._calls.popleft()


def parse_retry_after(headers: Mapping[str, str]) -> Optional[int]:
    """Return the Retry-After header as whole seconds, if present and numeric."""
    value = headers.get("Retry-After")
    if not value:
        return None
    value = value.strip()
    if not value.isdigit():
        return None
    try:
        return int(value)
    except ValueError:
        return None

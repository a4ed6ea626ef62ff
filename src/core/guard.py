"""Fetch-through guard: TTL cache in front of a sliding-window rate limiter.

`GuardedFetcher.fetch_through` answers from the cache when it can and only
spends a rate-limit slot on a miss. Failed fetches are never cached and the
spent slot is not refunded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from core.cache import TTLCache
from core.errors import RateLimitExceeded
from core.rate_limiter import SlidingWindowRateLimiter

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]

logger = logging.getLogger(__name__)

_MISSING = object()


class GuardedFetcher:
    """Cache -> rate limiter -> upstream call.

    Holds no state of its own besides references to the shared cache and
    limiter. With `single_flight=True`, concurrent misses on the same key
    share one in-flight upstream call (and one limiter slot).
    """

    def __init__(
        self,
        cache: TTLCache[Any],
        rate_limiter: SlidingWindowRateLimiter,
        *,
        default_ttl_seconds: Optional[float] = None,
        single_flight: bool = False,
    ) -> None:
        self._cache = cache
        self._rate_limiter = rate_limiter
        self._default_ttl = cache.default_ttl if default_ttl_seconds is None else float(default_ttl_seconds)
        self._single_flight = bool(single_flight)

        self._inflight: Dict[str, "asyncio.Task[Any]"] = {}
        self._inflight_lock = asyncio.Lock()

    @property
    def cache(self) -> TTLCache[Any]:
        return self._cache

    @property
    def rate_limiter(self) -> SlidingWindowRateLimiter:
        return self._rate_limiter

    async def fetch_through(self, key: str, ttl_seconds: Optional[float], operation: Operation[T]) -> T:
        cached = self._cache.get(key, _MISSING)
        if cached is not _MISSING:
            logger.debug("cache hit: %s", key)
            return cached

        ttl = self._default_ttl if ttl_seconds is None else float(ttl_seconds)
        logger.debug("cache miss: %s", key)

        if self._single_flight:
            return await self._coalesced(key, ttl, operation)
        return await self._fetch_and_store(key, ttl, operation)

    async def _fetch_and_store(self, key: str, ttl: float, operation: Operation[T]) -> T:
        try:
            self._rate_limiter.check_limit()
        except RateLimitExceeded as e:
            logger.warning("rate limit reached, rejecting fetch for %s (retry in %ss)", key, e.wait_seconds)
            raise

        # Upstream I/O runs with no cache/limiter lock held
        value = await operation()

        self._cache.set(key, value, ttl)
        return value

    async def _coalesced(self, key: str, ttl: float, operation: Operation[T]) -> T:
        async with self._inflight_lock:
            # Another caller may have stored the value while we waited for the lock
            cached = self._cache.get(key, _MISSING)
            if cached is not _MISSING:
                return cached

            task = self._inflight.get(key)
            if task is None:
                task = asyncio.create_task(self._fetch_and_store(key, ttl, operation))
                self._inflight[key] = task
                task.add_done_callback(lambda t, k=key: self._forget(k, t))
            else:
                logger.debug("joining in-flight fetch: %s", key)

        # Shield so one cancelled waiter does not cancel the shared fetch
        return await asyncio.shield(task)

    def _forget(self, key: str, task: "asyncio.Task[Any]") -> None:
        # Mark the outcome as retrieved even if every waiter was cancelled
        if not task.cancelled():
            task.exception()
        if self._inflight.get(key) is task:
            del self._inflight[key]

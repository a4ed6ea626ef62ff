"""Bitkub public market-data client behind the cache + rate-limit guard.

This module provides a small async client for the unauthenticated Bitkub
market endpoints (ticker, depth, trades, symbols, coins). Every upstream
request goes through `core.guard.GuardedFetcher`, so repeated reads are
served from `core.cache.TTLCache` and only cache misses spend a slot of
`core.rate_limiter.SlidingWindowRateLimiter`.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Sequence

import httpx

from core.errors import ExternalServiceError
from core.guard import GuardedFetcher
from core.rate_limiter import parse_retry_after

from .inputs import normalize_limit, normalize_symbol

logger = logging.getLogger(__name__)

# Per-endpoint freshness: order books move fastest, symbol lists barely move
TICKER_TTL = 10.0
ORDERBOOK_TTL = 5.0
TRADES_TTL = 5.0
SYMBOLS_TTL = 3600.0
SERVERTIME_TTL = 60.0
COINS_TTL = 300.0


class BitkubClient:
    """Async Bitkub public API client.

    Purpose:
      - get_ticker(symbol=None) -> {symbol: ticker}
      - get_orderbook(symbol, limit=100) -> {"bids": [...], "asks": [...]}
      - get_trades(symbol, limit=100) -> raw trades payload
      - get_symbols() / get_coins(symbols=None) -> raw listings
      - get_server_time() -> {"timestamp": <unix seconds>}

    Key behavior:
      - Cache keys are derived from the endpoint and its normalized params.
      - Upstream/network failures surface as ExternalServiceError and are
        never cached.
    """

    BASE_URL = "https://api.bitkub.com"
    USER_AGENT = "bitkub-mcp/0.1.0"

    def __init__(
        self,
        guard: GuardedFetcher,
        *,
        base_url: str = BASE_URL,
        timeout: float = 10.0,
        verify: bool = True,
    ) -> None:
        self._guard = guard
        self._base_url = (base_url or self.BASE_URL).rstrip("/")
        self._timeout = float(timeout)
        self._verify = bool(verify)
        self._headers = {"Accept": "application/json", "User-Agent": self.USER_AGENT}

    # --- Market data ---

    async def get_ticker(self, symbol: Optional[str] = None) -> Dict[str, Any]:
        sym = normalize_symbol(symbol) if symbol else None
        params = {"sym": sym} if sym else None
        return await self._guard.fetch_through(
            f"ticker:{sym or 'all'}",
            TICKER_TTL,
            lambda: self._get_json("/api/market/ticker", params=params),
        )

    async def get_orderbook(self, symbol: str, limit: int = 100) -> Dict[str, Any]:
        sym = normalize_symbol(symbol)
        lmt = normalize_limit(limit)
        return await self._guard.fetch_through(
            f"orderbook:{sym}:{lmt}",
            ORDERBOOK_TTL,
            lambda: self._get_json("/api/market/depth", params={"sym": sym, "lmt": lmt}),
        )

    async def get_trades(self, symbol: str, limit: int = 100) -> Dict[str, Any]:
        sym = normalize_symbol(symbol)
        lmt = normalize_limit(limit)
        return await self._guard.fetch_through(
            f"trades:{sym}:{lmt}",
            TRADES_TTL,
            lambda: self._get_json("/api/market/trades", params={"sym": sym, "lmt": lmt}),
        )

    async def get_symbols(self) -> Dict[str, Any]:
        return await self._guard.fetch_through(
            "symbols",
            SYMBOLS_TTL,
            lambda: self._get_json("/api/market/symbols"),
        )

    async def get_coins(self, symbols: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        syms = [s.strip().upper() for s in (symbols or []) if s and s.strip()]
        joined = ",".join(syms)
        params = {"symbols": joined} if syms else None
        return await self._guard.fetch_through(
            f"coins:{joined or 'all'}",
            COINS_TTL,
            lambda: self._get_json("/api/v4/crypto/coins", params=params),
        )

    async def get_server_time(self) -> Dict[str, int]:
        # Local clock, no upstream call: cached but never spends a rate-limit slot
        cache = self._guard.cache
        cached = cache.get("servertime")
        if cached is not None:
            return cached
        data = {"timestamp": int(time.time())}
        cache.set("servertime", data, SERVERTIME_TTL)
        return data

    # --- Guard introspection ---

    def remaining_requests(self) -> int:
        return self._guard.rate_limiter.get_remaining_requests()

    def rate_limit_reset(self) -> datetime:
        return self._guard.rate_limiter.get_reset_time()

    def clear_cache(self) -> None:
        self._guard.cache.clear()

    def cache_size(self) -> int:
        return self._guard.cache.size()

    # --- HTTP helpers ---

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            verify=self._verify,
        )

    async def _get_json(self, path: str, *, params: Optional[Mapping[str, Any]] = None) -> Any:
        try:
            async with self._create_client() as client:
                resp = await client.get(path, params=dict(params or {}))
        except httpx.TimeoutException as e:
            raise ExternalServiceError(f"Request timeout: GET {path}", code="TIMEOUT") from e
        except httpx.ConnectError as e:
            raise ExternalServiceError("Bitkub API unreachable", code="SERVICE_UNAVAILABLE") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Bitkub request failed (GET {path}): {e}") from e

        self._raise_for_status(resp)

        try:
            return resp.json()
        except ValueError as e:
            raise ExternalServiceError(
                f"Invalid JSON from Bitkub (GET {path})",
                code="INVALID_RESPONSE",
                status_code=resp.status_code,
            ) from e

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.is_success:
            return

        status = resp.status_code
        if status == 429:
            retry_after = parse_retry_after(resp.headers)
            logger.warning("Bitkub returned 429 (retry_after=%s)", retry_after)
            raise ExternalServiceError(
                "Rate limit exceeded",
                code="RATE_LIMIT_EXCEEDED",
                status_code=status,
                retry_after=retry_after,
            )

        api_error = self._error_field(resp)
        if api_error is not None:
            raise ExternalServiceError(
                f"Bitkub API error: {api_error}",
                code="BITKUB_API_ERROR",
                status_code=status,
            )

        raise ExternalServiceError(
            f"HTTP {status}: {resp.reason_phrase}",
            code="HTTP_ERROR",
            status_code=status,
        )

    @staticmethod
    def _error_field(resp: httpx.Response) -> Optional[Any]:
        try:
            data = resp.json()
        except ValueError:
            return None
        if isinstance(data, dict) and data.get("error"):
            return data["error"]
        return None

"""MCP tool analyzing bid-ask spreads and liquidity across Bitkub pairs.

Registers 'bitkub_spread_analysis'. Like the batch ticker it reads the
cached all-market ticker, so one analysis costs at most one rate-limit slot.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from mcp.server.fastmcp import FastMCP

from clients.bitkub import BitkubClient
from clients.bitkub.inputs import normalize_symbol
from core.errors import ValidationError
from tools.batch_ticker import summarize_ticker

SortBy = Literal["spread", "spread_percent", "volume"]

MAJOR_PAIRS = frozenset({"THB_BTC", "THB_ETH", "THB_USDT"})
MAX_RESULTS = 100


def categorize_liquidity(volume: float, symbol: str) -> str:
    # Major pairs trade far more, so they need more volume to count as liquid
    high, medium = (100, 10) if symbol in MAJOR_PAIRS else (10, 1)
    if volume > high:
        return "high"
    if volume > medium:
        return "medium"
    return "low"


def base_volume(ticker: Dict[str, Any]) -> float:
    try:
        return float(ticker.get("baseVolume"))
    except (TypeError, ValueError):
        return 0.0


def spread_row(symbol: str, ticker: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    s = summarize_ticker(symbol, ticker)
    if s["bid"] == 0 or s["ask"] == 0:
        return None

    return {
        "symbol": symbol,
        "bid": s["bid"],
        "ask": s["ask"],
        "spread": s["spread"],
        "spread_percent": s["spread_percent"],
        "mid_price": round((s["bid"] + s["ask"]) / 2, 2),
        "volume": s["volume"],
        "liquidity": categorize_liquidity(base_volume(ticker), symbol),
    }


def summarize_spreads(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    if not rows:
        return {
            "avg_spread": 0.0,
            "avg_spread_percent": 0.0,
            "tightest_spread": "N/A",
            "widest_spread": "N/A",
            "total_symbols": 0,
        }

    return {
        "avg_spread": round(sum(r["spread"] for r in rows) / len(rows), 2),
        "avg_spread_percent": round(sum(r["spread_percent"] for r in rows) / len(rows), 4),
        "tightest_spread": min(rows, key=lambda r: r["spread_percent"])["symbol"],
        "widest_spread": max(rows, key=lambda r: r["spread_percent"])["symbol"],
        "total_symbols": len(rows),
    }


def register(mcp: FastMCP, *, bitkub_client: BitkubClient) -> None:
    @mcp.tool(name="bitkub_spread_analysis")
    async def bitkub_spread_analysis(
        symbol: Optional[str] = None,
        min_volume: float = 0.1,
        sort_by: SortBy = "spread_percent",
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Analyze bid-ask spreads and market liquidity across trading pairs.

        Params:
          - symbol: one pair to analyze; omit to scan every THB_ pair.
          - min_volume: skip pairs whose 24h base volume is below this (default: 0.1).
          - sort_by: "spread" or "spread_percent" (ascending), or "volume"
            (descending). Default: "spread_percent".
          - limit: maximum rows returned, 1-100 (default: 20).

        Returns:
          {"spreads": [...], "summary": {...}}. The summary covers every
          matching pair, not only the rows kept by `limit`.

        Raises:
          ValidationError for bad parameters; RateLimitExceeded or
          ExternalServiceError from the ticker fetch.
        """
        sym = normalize_symbol(symbol) if symbol and symbol.strip() else None
        if min_volume < 0:
            raise ValidationError("min_volume must be non-negative")
        if limit < 1 or limit > MAX_RESULTS:
            raise ValidationError(f"limit must be between 1 and {MAX_RESULTS}")
        if sort_by not in ("spread", "spread_percent", "volume"):
            raise ValidationError("sort_by must be one of: spread, spread_percent, volume")

        all_tickers = await bitkub_client.get_ticker()

        rows = []
        for name, ticker in all_tickers.items():
            if sym is not None and name != sym:
                continue
            if sym is None and not name.startswith("THB_"):
                continue
            if base_volume(ticker) < min_volume:
                continue
            row = spread_row(name, ticker)
            if row is None:
                continue
            rows.append(row)

        if sort_by == "volume":
            rows.sort(key=lambda r: r["volume"], reverse=True)
        else:
            rows.sort(key=lambda r: r[sort_by])

        return {"spreads": rows[:limit], "summary": summarize_spreads(rows)}

"""MCP tool returning ticker summaries for several pairs at once.

Registers 'bitkub_batch_ticker'. All symbols are answered from a single
all-market ticker fetch, so a batch costs at most one rate-limit slot.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from mcp.server.fastmcp import FastMCP

from clients.bitkub import BitkubClient
from clients.bitkub.inputs import normalize_symbols


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def pick_tickers(all_tickers: Mapping[str, Any], symbols: List[str]) -> Dict[str, Any]:
    # Keep only the requested symbols from an all-market ticker payload
    return {s: all_tickers[s] for s in symbols if s in all_tickers}


def summarize_ticker(symbol: str, ticker: Mapping[str, Any]) -> Dict[str, Any]:
    price = _to_float(ticker.get("last"))
    bid = _to_float(ticker.get("highestBid"))
    ask = _to_float(ticker.get("lowestAsk"))
    spread = ask - bid
    spread_percent = (spread / bid) * 100 if bid > 0 else 0.0

    return {
        "symbol": symbol,
        "price": price,
        "change": round(_to_float(ticker.get("percentChange")), 2),
        "volume": round(_to_float(ticker.get("baseVolume")), 2),
        "bid": bid,
        "ask": ask,
        "spread": round(spread, 2),
        "spread_percent": round(spread_percent, 4),
    }


def analyze(summaries: List[Dict[str, Any]]) -> Dict[str, Any]:
    by_change = sorted(summaries, key=lambda s: s["change"], reverse=True)
    by_volume = sorted(summaries, key=lambda s: s["volume"], reverse=True)
    avg_change = sum(s["change"] for s in summaries) / len(summaries)

    return {
        "best_performer": by_change[0]["symbol"],
        "worst_performer": by_change[-1]["symbol"],
        "highest_volume": by_volume[0]["symbol"],
        "avg_change": round(avg_change, 2),
        "total_symbols": len(summaries),
    }


def register(mcp: FastMCP, *, bitkub_client: BitkubClient) -> None:
    @mcp.tool(name="bitkub_batch_ticker")
    async def bitkub_batch_ticker(symbols: List[str], include_analysis: bool = False) -> Dict[str, Any]:
        """Get ticker data for multiple symbols with optional comparative analysis.

        Params:
          - symbols: 1-50 trading pairs, e.g. ["THB_BTC", "THB_ETH"].
          - include_analysis: add best/worst performer, highest volume and
            average change across the found symbols (default: False).

        Returns:
          {"tickers": {symbol: summary}, "missing": [...], "analysis": {...}}.
          Symbols unknown to Bitkub are listed under "missing".
        """
        wanted = normalize_symbols(symbols)

        all_tickers = await bitkub_client.get_ticker()
        found = pick_tickers(all_tickers, wanted)

        summaries = [summarize_ticker(s, found[s]) for s in wanted if s in found]
        result: Dict[str, Any] = {
            "tickers": {s["symbol"]: s for s in summaries},
            "missing": [s for s in wanted if s not in found],
        }
        if include_analysis and summaries:
            result["analysis"] = analyze(summaries)
        return result

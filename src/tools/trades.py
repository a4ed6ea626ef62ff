"""MCP tool returning recent trades for one Bitkub trading pair."""

from __future__ import annotations

from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from clients.bitkub import BitkubClient
from clients.bitkub.inputs import normalize_limit, normalize_symbol


def register(mcp: FastMCP, *, bitkub_client: BitkubClient) -> None:
    @mcp.tool(name="bitkub_trades")
    async def bitkub_trades(symbol: str, limit: int = 100) -> Dict[str, Any]:
        """Get recent trades for a specific trading pair.

        Params:
          - symbol: trading pair such as "THB_BTC" (required).
          - limit: number of trades, 1-1000 (default: 100).
        """
        sym = normalize_symbol(symbol)
        lmt = normalize_limit(limit)
        return await bitkub_client.get_trades(sym, lmt)

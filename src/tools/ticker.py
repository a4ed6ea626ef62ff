"""MCP tool returning Bitkub ticker data.

Registers 'bitkub_ticker' which returns the ticker for one trading pair
or for the whole market when no symbol is given.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from clients.bitkub import BitkubClient
from clients.bitkub.inputs import normalize_symbol


def register(mcp: FastMCP, *, bitkub_client: BitkubClient) -> None:
    @mcp.tool(name="bitkub_ticker")
    async def bitkub_ticker(symbol: Optional[str] = None) -> Dict[str, Any]:
        """Get current ticker information for all symbols or a specific trading pair.

        Params:
          - symbol: trading pair such as "THB_BTC". Omit to get every pair.

        Returns:
          Mapping of symbol -> ticker (last, lowestAsk, highestBid,
          percentChange, baseVolume, quoteVolume, high24hr, low24hr, ...).

        Raises:
          ValidationError for a malformed symbol; RateLimitExceeded when the
          local request quota is spent; ExternalServiceError on API failures.
        """
        sym = normalize_symbol(symbol) if symbol and symbol.strip() else None
        return await bitkub_client.get_ticker(sym)

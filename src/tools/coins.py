from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from clients.bitkub import BitkubClient


def register(mcp: FastMCP, *, bitkub_client: BitkubClient) -> None:
    @mcp.tool(name="bitkub_coins")
    async def bitkub_coins(symbols: Optional[List[str]] = None) -> Dict[str, Any]:
        """Get coin metadata (networks, deposit/withdraw status) from Bitkub.

        Params:
          - symbols: optional list of coin symbols such as ["BTC", "ETH"].
            Omit to get every coin.
        """
        return await bitkub_client.get_coins(symbols)

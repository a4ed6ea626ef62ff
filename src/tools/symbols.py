from __future__ import annotations

from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from clients.bitkub import BitkubClient


def register(mcp: FastMCP, *, bitkub_client: BitkubClient) -> None:
    @mcp.tool(name="bitkub_symbols")
    async def bitkub_symbols() -> Dict[str, Any]:
        """List all trading pairs available on Bitkub (cached for an hour)."""
        return await bitkub_client.get_symbols()

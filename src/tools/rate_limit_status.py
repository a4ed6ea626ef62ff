from __future__ import annotations

from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from clients.bitkub import BitkubClient


def register(mcp: FastMCP, *, bitkub_client: BitkubClient) -> None:
    @mcp.tool(name="bitkub_rate_limit_status")
    async def bitkub_rate_limit_status() -> Dict[str, Any]:
        """Report the local request quota and response cache usage.

        Returns:
          remaining_requests: calls still allowed in the current window.
          reset_at: ISO-8601 UTC instant when the oldest counted call expires.
          cache_size: number of cached responses currently stored.
        """
        return {
            "remaining_requests": bitkub_client.remaining_requests(),
            "reset_at": bitkub_client.rate_limit_reset().isoformat(),
            "cache_size": bitkub_client.cache_size(),
        }

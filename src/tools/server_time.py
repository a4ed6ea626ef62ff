"""MCP tool reporting the server timestamp.

Registers 'bitkub_servertime'; adds an ISO-8601 rendering next to the
raw unix timestamp.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from clients.bitkub import BitkubClient
from core.errors import ExternalServiceError


def register(mcp: FastMCP, *, bitkub_client: BitkubClient) -> None:
    @mcp.tool(name="bitkub_servertime")
    async def bitkub_servertime() -> Dict[str, Any]:
        """Get the current server timestamp (unix seconds) and its ISO form."""
        data = await bitkub_client.get_server_time()

        ts = data.get("timestamp")
        if not isinstance(ts, int):
            raise ExternalServiceError("Invalid timestamp format", code="INVALID_RESPONSE")

        formatted = datetime.fromtimestamp(ts, tz=timezone.utc).isoformat().replace("+00:00", "Z")
        return {**data, "formatted": formatted}

"""Server bootstrap for the Bitkub market-data MCP service.

Builds the shared cache, rate limiter and guard once per process, wires
them into the Bitkub client, registers the tools on a FastMCP instance
and starts the MCP server (stdio transport).
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

from mcp.server.fastmcp import FastMCP

from clients.bitkub import BitkubClient
from config import (
    BITKUB_BASE_URL,
    BITKUB_TIMEOUT,
    CACHE_MAXSIZE,
    CACHE_SWEEP_INTERVAL,
    CACHE_TTL_SECONDS,
    HTTP_VERIFY,
    LOG_LEVEL,
    RATE_LIMIT_PER_MINUTE,
    RATE_LIMIT_WINDOW_SECONDS,
    SINGLE_FLIGHT,
)
from core.cache import TTLCache
from core.guard import GuardedFetcher
from core.rate_limiter import SlidingWindowRateLimiter
from core.sweeper import CacheSweeper

from tools.batch_ticker import register as register_batch_ticker
from tools.coins import register as register_coins
from tools.orderbook import register as register_orderbook
from tools.rate_limit_status import register as register_rate_limit_status
from tools.server_time import register as register_server_time
from tools.spread_analysis import register as register_spread_analysis
from tools.symbols import register as register_symbols
from tools.ticker import register as register_ticker
from tools.trades import register as register_trades

logger = logging.getLogger(__name__)

# One cache and one quota per process, shared by every tool
cache = TTLCache(ttl_seconds=CACHE_TTL_SECONDS, maxsize=CACHE_MAXSIZE or None)
rate_limiter = SlidingWindowRateLimiter(
    max_calls=RATE_LIMIT_PER_MINUTE,
    window_seconds=RATE_LIMIT_WINDOW_SECONDS,
)
guard = GuardedFetcher(cache, rate_limiter, single_flight=SINGLE_FLIGHT)
sweeper = CacheSweeper(cache, interval_seconds=CACHE_SWEEP_INTERVAL)


@asynccontextmanager
async def lifespan(_server: FastMCP) -> AsyncIterator[None]:
    sweeper.start()
    try:
        yield
    finally:
        await sweeper.stop()


mcp = FastMCP("bitkub-mcp", lifespan=lifespan)


def register_tools() -> None:
    bitkub_client = BitkubClient(
        guard,
        base_url=BITKUB_BASE_URL,
        timeout=BITKUB_TIMEOUT,
        verify=HTTP_VERIFY,
    )

    register_ticker(mcp, bitkub_client=bitkub_client)
    register_orderbook(mcp, bitkub_client=bitkub_client)
    register_trades(mcp, bitkub_client=bitkub_client)
    register_symbols(mcp, bitkub_client=bitkub_client)
    register_coins(mcp, bitkub_client=bitkub_client)
    register_server_time(mcp, bitkub_client=bitkub_client)
    register_batch_ticker(mcp, bitkub_client=bitkub_client)
    register_spread_analysis(mcp, bitkub_client=bitkub_client)
    register_rate_limit_status(mcp, bitkub_client=bitkub_client)


register_tools()


def configure_logging() -> None:
    # stdout carries the MCP protocol, so logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, LOG_LEVEL, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    configure_logging()
    logger.warning("Unofficial Bitkub community tool; not financial advice")
    logger.info(
        "Bitkub MCP server starting (quota %d/%ss, default TTL %ss)",
        RATE_LIMIT_PER_MINUTE,
        RATE_LIMIT_WINDOW_SECONDS,
        CACHE_TTL_SECONDS,
    )
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()

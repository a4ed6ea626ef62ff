"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (e.g.
BITKUB_BASE_URL, HTTP_VERIFY, rate-limit quota and cache TTLs).
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# Network / HTTP
BITKUB_BASE_URL = os.environ.get("BITKUB_BASE_URL", "https://api.bitkub.com").strip()
BITKUB_TIMEOUT = _env_float("BITKUB_TIMEOUT", 10.0)
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)

# Rate limiting (Bitkub public API quota)
RATE_LIMIT_PER_MINUTE = _env_int("RATE_LIMIT_PER_MINUTE", 100)
RATE_LIMIT_WINDOW_SECONDS = _env_float("RATE_LIMIT_WINDOW_SECONDS", 60.0)

# Response cache
CACHE_TTL_SECONDS = _env_float("CACHE_TTL_SECONDS", 10.0)
CACHE_MAXSIZE = _env_int("CACHE_MAXSIZE", 0)  # 0 = unbounded
CACHE_SWEEP_INTERVAL = _env_float("CACHE_SWEEP_INTERVAL", 60.0)  # 0 = disabled
SINGLE_FLIGHT = _env_bool("SINGLE_FLIGHT", False)

# Logging goes to stderr; stdout is the MCP stdio channel
LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING").strip().upper()

from __future__ import annotations

import re
from typing import Iterable, List

from core.errors import ValidationError


_SYMBOL_RE = re.compile(r"^[A-Z]+_[A-Z]+$")

MAX_LIMIT = 1000
MAX_BATCH_SYMBOLS = 50


def normalize_symbol(symbol: str) -> str:
    # Bitkub pairs look like THB_BTC; accept lower-case input
    sym = (symbol or "").strip().upper()
    if not _SYMBOL_RE.match(sym):
        raise ValidationError(
            f"Invalid symbol format: {symbol!r}. Expected format: FIAT_CRYPTO (e.g., THB_BTC)"
        )
    return sym


def normalize_limit(limit: int) -> int:
    n = int(limit)
    if n < 1 or n > MAX_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_LIMIT}")
    return n


def normalize_symbols(symbols: Iterable[str]) -> List[str]:
    syms = [normalize_symbol(s) for s in (symbols or [])]
    if not syms:
        raise ValidationError("At least one symbol is required")
    if len(syms) > MAX_BATCH_SYMBOLS:
        raise ValidationError(f"Maximum {MAX_BATCH_SYMBOLS} symbols allowed per batch request")
    return syms

"""Validation of untrusted symbol input."""

import operator
import re
from collections.abc import Callable, Iterable

from finance_mcp.errors import InvalidSymbolError

# Tickers, share classes (BRK.B), indices (^GSPC), FX/futures (EURUSD=X)
SYMBOL_PATTERN = re.compile(r"^[A-Z0-9.^=\-]{1,12}$")

MIN_COMPARE_SYMBOLS = 2
MAX_COMPARE_SYMBOLS = 5


def normalize_symbol(symbol: str) -> str:
    """
    Normalize a symbol: strip whitespace, uppercase, validate characters.

    Raises:
        InvalidSymbolError: If the symbol is empty or has invalid characters
    """
    if not isinstance(symbol, str):
        raise InvalidSymbolError(f"Symbol must be a string, got {type(symbol).__name__}")
    normalized = symbol.upper().strip()
    if not normalized:
        raise InvalidSymbolError("Symbol must be a non-empty string")
    if not SYMBOL_PATTERN.match(normalized):
        raise InvalidSymbolError(f"Invalid symbol '{symbol}'", normalized)
    return normalized


def normalize_symbol_list(
    symbols: Iterable[str],
    min_count: int = MIN_COMPARE_SYMBOLS,
    max_count: int = MAX_COMPARE_SYMBOLS,
) -> tuple[str, ...]:
    """
    Normalize a list of symbols for comparison.

    Symbols are uppercased and de-duplicated preserving first occurrence.
    Malformed entries are kept as-is (uppercased) so the caller can report
    them as per-symbol failures.

    Raises:
        ValueError: If the de-duplicated count is outside [min_count, max_count]
    """
    if isinstance(symbols, str):
        raise ValueError("symbols must be a list of strings, not a single string")

    seen: dict[str, None] = {}
    for s in symbols:
        key = str(s).upper().strip()
        if key:
            seen.setdefault(key, None)
    result = tuple(seen)

    if not min_count <= len(result) <= max_count:
        raise ValueError(
            f"Compare requires {min_count}-{max_count} distinct symbols, got {len(result)}"
        )
    return result


def check_rule(
    value: float | None,
    threshold: float,
    comparator: Callable[[float, float], bool] = operator.gt,
) -> bool | None:
    """
    Check a rule with nullable boolean semantics.

    If value is None, returns None (not False).
    """
    if value is None:
        return None
    return comparator(value, threshold)

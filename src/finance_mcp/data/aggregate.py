"""Multi-indicator and multi-symbol aggregation with partial-success semantics."""

import asyncio
import logging
from collections.abc import Iterable

from finance_mcp.data.context import DataAccessContext
from finance_mcp.data.fetch import fetch_fundamentals, fetch_indicator, fetch_quote
from finance_mcp.errors import (
    BatchFailedError,
    ConfigurationError,
    FinanceDataError,
)
from finance_mcp.models import (
    ComparisonEntry,
    IndicatorKind,
    MacdValue,
    StockComparison,
    TechnicalIndicatorSet,
)
from finance_mcp.utils.provenance import utc_now_iso
from finance_mcp.utils.validators import normalize_symbol, normalize_symbol_list

logger = logging.getLogger(__name__)

DEFAULT_INDICATORS: tuple[IndicatorKind, ...] = (IndicatorKind.SMA50, IndicatorKind.RSI)

_FIELD_BY_KIND = {
    IndicatorKind.SMA50: "sma50",
    IndicatorKind.SMA200: "sma200",
    IndicatorKind.RSI: "rsi",
    IndicatorKind.MACD: "macd",
}


async def fetch_indicator_set(
    ctx: DataAccessContext,
    symbol: str,
    indicators: Iterable[IndicatorKind | str] = DEFAULT_INDICATORS,
) -> TechnicalIndicatorSet:
    """
    Fetch several indicators for one symbol.

    Indicators are fetched one after another (they share one rate-limit gate
    anyway). A failed indicator is logged and left out of the result.

    Args:
        ctx: Data access context
        symbol: Stock ticker symbol
        indicators: Indicator kinds or names (duplicates ignored)

    Returns:
        TechnicalIndicatorSet with the indicators that succeeded

    Raises:
        InvalidSymbolError: Malformed symbol string
        ConfigurationError: ALPHA_VANTAGE_API_KEY missing
        ValueError: Unknown indicator name
    """
    normalized = normalize_symbol(symbol)
    kinds = list(dict.fromkeys(IndicatorKind.parse(k) for k in indicators))
    if kinds:
        ctx.alpha_vantage  # fail fast on a missing credential

    values: dict[str, float | MacdValue] = {}
    failed: list[IndicatorKind] = []
    for kind in kinds:
        try:
            reading = await fetch_indicator(ctx, normalized, kind)
        except ConfigurationError:
            raise
        except FinanceDataError as e:
            logger.warning(f"Failed to fetch {kind.value} for {normalized}: {e}")
            failed.append(kind)
            continue
        values[_FIELD_BY_KIND[kind]] = reading.value

    logger.info(f"Fetched {len(values)}/{len(kinds)} technical indicators for {normalized}")
    return TechnicalIndicatorSet(
        symbol=normalized,
        as_of=utc_now_iso(),
        failed=tuple(failed),
        **values,  # type: ignore[arg-type]
    )


async def _compare_one(ctx: DataAccessContext, symbol: str) -> ComparisonEntry:
    quote, metrics = await asyncio.gather(
        fetch_quote(ctx, symbol),
        fetch_fundamentals(ctx, symbol),
    )
    return ComparisonEntry.from_parts(quote, metrics)


async def compare_stocks(
    ctx: DataAccessContext,
    symbols: Iterable[str],
    require_any: bool = False,
) -> StockComparison:
    """
    Compare 2-5 symbols side by side.

    All symbols are fetched in parallel, and quote + fundamentals in parallel
    within each symbol. A symbol that fails (unknown ticker, persistent
    network error) is dropped from `metrics`; the batch itself does not fail.

    Args:
        ctx: Data access context
        symbols: Symbols to compare
        require_any: Raise BatchFailedError when no symbol resolved
            (default: return an empty comparison)

    Returns:
        StockComparison whose metrics keys are the resolved symbols

    Raises:
        ValueError: Fewer than 2 or more than 5 distinct symbols
        BatchFailedError: Only with require_any=True and nothing resolved
    """
    requested = normalize_symbol_list(symbols)

    results = await asyncio.gather(
        *(_compare_one(ctx, s) for s in requested),
        return_exceptions=True,
    )

    metrics: dict[str, ComparisonEntry] = {}
    failures: dict[str, str] = {}
    for symbol, result in zip(requested, results):
        if isinstance(result, ConfigurationError):
            raise result
        if isinstance(result, FinanceDataError):
            logger.warning(f"compare_stocks: dropping {symbol}: {result}")
            failures[symbol] = str(result)
        elif isinstance(result, BaseException):
            raise result
        else:
            metrics[symbol] = result

    if not metrics and require_any:
        raise BatchFailedError(
            f"None of {', '.join(requested)} could be resolved",
            failures,
        )

    return StockComparison(
        symbols=requested,
        metrics=metrics,
        failures=failures,
        as_of=utc_now_iso(),
    )

"""Stock comparison tool."""

from collections.abc import Sequence
from time import perf_counter
from typing import Any

from finance_mcp.data.aggregate import compare_stocks
from finance_mcp.data.context import DataAccessContext
from finance_mcp.errors import FinanceDataError
from finance_mcp.utils.provenance import build_envelope, build_provenance, error_response_for


async def stock_comparison(ctx: DataAccessContext, symbols: Sequence[str]) -> dict[str, Any]:
    """
    Compare 2-5 stocks side by side.

    Symbols that cannot be resolved are left out of `metrics` and listed in
    `unresolved`; the comparison still succeeds.

    Args:
        ctx: Data access context
        symbols: Stock ticker symbols

    Returns:
        Dict with per-symbol price, change, market cap, P/E, EPS, margin, beta
    """
    start_time = perf_counter()

    try:
        comparison = await compare_stocks(ctx, symbols)
    except (ValueError, FinanceDataError) as e:
        return error_response_for(e)

    return build_envelope(
        "stock_comparison",
        start_time,
        {
            "comparison": build_provenance(
                source="alpha_vantage",
                as_of=comparison.as_of,
                warnings=[f"{symbol}: {reason}" for symbol, reason in comparison.failures.items()],
            ),
        },
        symbols=list(comparison.symbols),
        metrics={s: entry.to_dict() for s, entry in comparison.metrics.items()},
        unresolved=sorted(comparison.failures),
    )

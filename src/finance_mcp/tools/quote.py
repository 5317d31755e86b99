"""Stock price tool."""

from time import perf_counter
from typing import Any

from finance_mcp.data.context import DataAccessContext
from finance_mcp.data.fetch import fetch_quote
from finance_mcp.errors import FinanceDataError
from finance_mcp.utils.provenance import build_envelope, build_provenance, error_response_for


async def stock_price(ctx: DataAccessContext, symbol: str) -> dict[str, Any]:
    """
    Get the latest quote for a symbol.

    Args:
        ctx: Data access context
        symbol: Stock ticker symbol

    Returns:
        Dict with price, change, daily range and volume
    """
    start_time = perf_counter()

    try:
        quote = await fetch_quote(ctx, symbol)
    except FinanceDataError as e:
        return error_response_for(e, symbol)

    return build_envelope(
        "stock_price",
        start_time,
        {
            "quote": build_provenance(
                source="alpha_vantage",
                as_of=quote.latest_trading_day or None,
                cache_ttl_seconds=ctx.settings.quote_ttl,
            ),
        },
        symbol=quote.symbol,
        quote=quote.to_dict(),
    )

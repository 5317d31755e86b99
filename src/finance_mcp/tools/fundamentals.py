"""Financial metrics tool."""

import operator
from time import perf_counter
from typing import Any

from finance_mcp.data.context import DataAccessContext
from finance_mcp.data.fetch import fetch_fundamentals
from finance_mcp.errors import FinanceDataError
from finance_mcp.utils.provenance import (
    build_envelope,
    build_provenance,
    error_response_for,
    utc_now_iso,
)
from finance_mcp.utils.validators import check_rule

HIGH_PE = 30.0
LOW_BETA = 1.0


async def financial_metrics(ctx: DataAccessContext, symbol: str) -> dict[str, Any]:
    """
    Get fundamental financial metrics for a symbol.

    Rule flags are null, not false, when the underlying ratio is missing.

    Args:
        ctx: Data access context
        symbol: Stock ticker symbol

    Returns:
        Dict with valuation, profitability and range metrics plus rule flags
    """
    start_time = perf_counter()

    try:
        metrics = await fetch_fundamentals(ctx, symbol)
    except FinanceDataError as e:
        return error_response_for(e, symbol)

    warnings: list[str] = []
    missing = [
        name
        for name in ("pe_ratio", "eps", "profit_margin", "beta")
        if getattr(metrics, name) is None
    ]
    if missing:
        warnings.append(f"Provider reported no value for: {', '.join(missing)}")

    return build_envelope(
        "financial_metrics",
        start_time,
        {
            "fundamentals": build_provenance(
                source="alpha_vantage",
                as_of=utc_now_iso(),
                cache_ttl_seconds=ctx.settings.fundamentals_ttl,
                warnings=warnings,
            ),
        },
        symbol=metrics.symbol,
        metrics=metrics.to_dict(),
        rules={
            "profitable": {
                "triggered": check_rule(metrics.profit_margin, 0, operator.gt),
                "threshold": "profit_margin > 0",
            },
            "high_pe": {
                "triggered": check_rule(metrics.pe_ratio, HIGH_PE, operator.gt),
                "threshold": HIGH_PE,
            },
            "low_beta": {
                "triggered": check_rule(metrics.beta, LOW_BETA, operator.lt),
                "threshold": LOW_BETA,
            },
        },
    )

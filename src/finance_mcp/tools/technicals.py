"""Technical indicators tool."""

import operator
from collections.abc import Sequence
from time import perf_counter
from typing import Any

from finance_mcp.data.aggregate import DEFAULT_INDICATORS, fetch_indicator_set
from finance_mcp.data.context import DataAccessContext
from finance_mcp.errors import FinanceDataError
from finance_mcp.models import TechnicalIndicatorSet
from finance_mcp.utils.provenance import build_envelope, build_provenance, error_response_for
from finance_mcp.utils.validators import check_rule

RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0


def _signals(result: TechnicalIndicatorSet) -> dict[str, bool | None]:
    golden_cross = None
    if result.sma50 is not None and result.sma200 is not None:
        golden_cross = result.sma50 > result.sma200
    return {
        "rsi_overbought": check_rule(result.rsi, RSI_OVERBOUGHT, operator.gt),
        "rsi_oversold": check_rule(result.rsi, RSI_OVERSOLD, operator.lt),
        "macd_bullish": (
            check_rule(result.macd.value, result.macd.signal, operator.gt)
            if result.macd is not None
            else None
        ),
        "golden_cross": golden_cross,
    }


async def technical_indicators(
    ctx: DataAccessContext,
    symbol: str,
    indicators: Sequence[str] | None = None,
) -> dict[str, Any]:
    """
    Get SMA(50/200), RSI(14) and MACD for a symbol.

    Indicators that fail upstream are omitted and listed in warnings.

    Args:
        ctx: Data access context
        symbol: Stock ticker symbol
        indicators: Subset of SMA50, SMA200, RSI, MACD (default: SMA50, RSI)

    Returns:
        Dict with indicator values and rule-based signals
    """
    start_time = perf_counter()

    try:
        result = await fetch_indicator_set(
            ctx, symbol, indicators if indicators else DEFAULT_INDICATORS
        )
    except (ValueError, FinanceDataError) as e:
        return error_response_for(e, symbol)

    return build_envelope(
        "technical_indicators",
        start_time,
        {
            "indicators": build_provenance(
                source="alpha_vantage",
                as_of=result.as_of,
                cache_ttl_seconds=ctx.settings.indicator_ttl,
                warnings=[f"{kind.value} unavailable" for kind in result.failed],
            ),
        },
        symbol=result.symbol,
        indicators={
            "sma50": result.sma50,
            "sma200": result.sma200,
            "rsi": result.rsi,
            "macd": result.macd.to_dict() if result.macd is not None else None,
        },
        signals=_signals(result),
    )

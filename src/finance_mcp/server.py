"""Finance MCP Server using FastMCP."""

import json
import logging
import os

from fastmcp import FastMCP

from finance_mcp import SCHEMA_VERSION, SERVER_VERSION
from finance_mcp.config import Settings
from finance_mcp.data.context import DataAccessContext
from finance_mcp.tools import (
    financial_metrics,
    news_sentiment,
    stock_comparison,
    stock_price,
    technical_indicators,
)

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

# Create FastMCP server instance
mcp = FastMCP(
    name="finance-tools",
)

_context: DataAccessContext | None = None


def get_context() -> DataAccessContext:
    """Process-wide data access context, created on first use."""
    global _context
    if _context is None:
        _context = DataAccessContext(Settings.from_env())
    return _context


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool
async def get_stock_price(symbol: str) -> str:
    """
    Fetch the current stock quote for a ticker symbol.

    Args:
        symbol: Stock ticker symbol (e.g., AAPL, TSLA, MSFT, GOOGL)

    Returns:
        JSON with price, change, change percent, daily high/low, volume
    """
    result = await stock_price(get_context(), symbol=symbol)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_financial_metrics(symbol: str) -> str:
    """
    Fetch fundamental metrics: market cap, P/E, PEG, EPS, margins, ROA/ROE, beta.

    Args:
        symbol: Stock ticker symbol

    Returns:
        JSON with fundamentals and rule flags (missing ratios are null)
    """
    result = await financial_metrics(get_context(), symbol=symbol)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def calculate_technical_indicators(
    symbol: str,
    indicators: list[str] | None = None,
) -> str:
    """
    Fetch technical indicators: SMA(50), SMA(200), RSI(14), MACD.

    Args:
        symbol: Stock ticker symbol
        indicators: Any of SMA50, SMA200, RSI, MACD (default: SMA50, RSI)

    Returns:
        JSON with indicator values and signals; unavailable indicators are omitted
    """
    result = await technical_indicators(get_context(), symbol=symbol, indicators=indicators)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def analyze_news_sentiment(symbol: str, limit: int = 10) -> str:
    """
    Fetch recent news for a stock and score headline sentiment.

    Args:
        symbol: Stock ticker symbol
        limit: Number of articles to fetch, 1-20 (default: 10)

    Returns:
        JSON with articles, per-article sentiment and overall score (-1 to 1)
    """
    result = await news_sentiment(get_context(), symbol=symbol, limit=limit)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def compare_stocks(symbols: list[str]) -> str:
    """
    Compare 2-5 stocks side by side on price, change %, market cap, P/E, EPS, margin, beta.

    Args:
        symbols: Stock ticker symbols to compare

    Returns:
        JSON with metrics per resolved symbol and the list of unresolved symbols
    """
    result = await stock_comparison(get_context(), symbols=symbols)
    return json.dumps(result, indent=2, default=str)


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Finance MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    try:
        mcp.run()
    finally:
        if _context is not None:
            _context.close()


if __name__ == "__main__":
    main()

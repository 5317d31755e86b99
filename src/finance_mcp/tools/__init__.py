"""Agent-facing tools returning JSON-ready dicts."""

from finance_mcp.tools.compare import stock_comparison
from finance_mcp.tools.fundamentals import financial_metrics
from finance_mcp.tools.news import news_sentiment
from finance_mcp.tools.quote import stock_price
from finance_mcp.tools.technicals import technical_indicators

__all__ = [
    "financial_metrics",
    "news_sentiment",
    "stock_comparison",
    "stock_price",
    "technical_indicators",
]

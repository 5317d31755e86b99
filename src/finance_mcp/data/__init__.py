"""Data layer for fetching, caching and aggregating market data."""

from finance_mcp.data.aggregate import DEFAULT_INDICATORS, compare_stocks, fetch_indicator_set
from finance_mcp.data.cache import CacheEntry, CacheStore
from finance_mcp.data.context import DataAccessContext
from finance_mcp.data.fetch import (
    fetch_fundamentals,
    fetch_indicator,
    fetch_news_sentiment,
    fetch_quote,
)
from finance_mcp.data.rate_limiter import RateLimiter
from finance_mcp.data.retry import is_retryable_error, with_retry
from finance_mcp.data.singleflight import SingleFlight

__all__ = [
    # Infrastructure
    "CacheEntry",
    "CacheStore",
    "DataAccessContext",
    "RateLimiter",
    "SingleFlight",
    "is_retryable_error",
    "with_retry",
    # Operations
    "DEFAULT_INDICATORS",
    "compare_stocks",
    "fetch_fundamentals",
    "fetch_indicator",
    "fetch_indicator_set",
    "fetch_news_sentiment",
    "fetch_quote",
]

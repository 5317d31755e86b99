"""Shared state for all fetch operations."""

import asyncio
import functools
import logging
import time
from collections.abc import Awaitable, Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from finance_mcp.config import Settings
from finance_mcp.data.alpha_vantage import AlphaVantageClient
from finance_mcp.data.cache import CacheStore
from finance_mcp.data.news_client import NewsApiClient
from finance_mcp.data.rate_limiter import RateLimiter
from finance_mcp.data.singleflight import SingleFlight
from finance_mcp.models import DataKind

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DataAccessContext:
    """
    Cache, single-flight registry, rate limiters and provider clients.

    Construct one per process (or per test) and pass it to every fetch
    operation. Provider clients are built lazily from settings so a missing
    credential only fails the operations that need it.

    Args:
        settings: Configuration (default: Settings.from_env())
        alpha_vantage: Market-data client override (tests inject fakes)
        news: News client override
        clock: Monotonic clock shared by cache and rate limiters
        sleep: Awaitable sleep shared by rate limiters and retries
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        alpha_vantage: Any | None = None,
        news: Any | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings or Settings.from_env()
        self.clock = clock
        self.sleep = sleep
        self.cache = CacheStore(
            ttls={
                DataKind.QUOTE: self.settings.quote_ttl,
                DataKind.FUNDAMENTALS: self.settings.fundamentals_ttl,
                DataKind.INDICATOR: self.settings.indicator_ttl,
                DataKind.NEWS: self.settings.news_ttl,
            },
            max_entries=self.settings.cache_max_entries,
            clock=clock,
        )
        self.singleflight = SingleFlight()
        # Separate quotas, separate gates
        self.market_gate = RateLimiter(
            self.settings.min_request_interval, name="alpha_vantage", clock=clock, sleep=sleep
        )
        self.news_gate = RateLimiter(
            self.settings.news_min_interval, name="newsapi", clock=clock, sleep=sleep
        )
        self._alpha_vantage = alpha_vantage
        self._news = news
        self._executor = ThreadPoolExecutor(
            max_workers=self.settings.max_workers, thread_name_prefix="finance-fetch"
        )
        self._closed = False

    @property
    def alpha_vantage(self) -> AlphaVantageClient:
        """Market-data client. Raises ConfigurationError if the key is missing."""
        if self._alpha_vantage is None:
            self._alpha_vantage = AlphaVantageClient(
                self.settings.require_alpha_vantage_key(),
                base_url=self.settings.alpha_vantage_base_url,
                timeout=self.settings.request_timeout,
            )
        return self._alpha_vantage

    @property
    def news(self) -> NewsApiClient:
        """News client. Raises ConfigurationError if the key is missing."""
        if self._news is None:
            self._news = NewsApiClient(
                self.settings.require_news_api_key(),
                base_url=self.settings.news_api_base_url,
                timeout=self.settings.request_timeout,
            )
        return self._news

    async def run_blocking(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking call on the context's executor."""
        if self._closed:
            raise RuntimeError("DataAccessContext is closed")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(func, *args, **kwargs))

    def close(self) -> None:
        """Release the executor and HTTP sessions."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=False, cancel_futures=True)
        for client in (self._alpha_vantage, self._news):
            close = getattr(client, "close", None)
            if callable(close):
                close()
        logger.debug("DataAccessContext closed")

    def __enter__(self) -> "DataAccessContext":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

"""Runtime configuration read from the environment."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from finance_mcp.errors import ConfigurationError

DEFAULT_ALPHA_VANTAGE_URL = "https://www.alphavantage.co/query"
DEFAULT_NEWS_API_URL = "https://newsapi.org/v2/everything"


@dataclass(frozen=True)
class Settings:
    """Immutable settings shared by one DataAccessContext."""

    alpha_vantage_api_key: str | None = None
    news_api_key: str | None = None
    alpha_vantage_base_url: str = DEFAULT_ALPHA_VANTAGE_URL
    news_api_base_url: str = DEFAULT_NEWS_API_URL
    request_timeout: float = 10.0  # seconds, per HTTP request

    # Alpha Vantage free tier: 5 calls/min
    calls_per_minute: float = 5.0
    # News provider has its own quota and its own gate
    news_min_interval: float = 0.0

    max_attempts: int = 4
    retry_delay: float = 2.0  # seconds, fixed pause between attempts
    max_workers: int = 4

    quote_ttl: float = 300.0
    fundamentals_ttl: float = 300.0
    indicator_ttl: float = 300.0
    news_ttl: float = 900.0
    cache_max_entries: int = 512

    sentiment_normalization: float = 5.0
    sentiment_threshold: float = 0.2

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1")
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")
        if self.sentiment_normalization <= 0:
            raise ConfigurationError("sentiment_normalization must be positive")
        if self.cache_max_entries < 1:
            raise ConfigurationError("cache_max_entries must be at least 1")

    @property
    def min_request_interval(self) -> float:
        """Minimum spacing between Alpha Vantage calls, derived from the per-minute quota."""
        if self.calls_per_minute <= 0:
            return 0.0
        return 60.0 / self.calls_per_minute

    def require_alpha_vantage_key(self) -> str:
        if not self.alpha_vantage_api_key:
            raise ConfigurationError("ALPHA_VANTAGE_API_KEY not set in environment variables")
        return self.alpha_vantage_api_key

    def require_news_api_key(self) -> str:
        if not self.news_api_key:
            raise ConfigurationError("NEWS_API_KEY not set in environment variables")
        return self.news_api_key

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Missing API keys are accepted here; operations that need them raise
        ConfigurationError on first use.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            Settings instance

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        env = os.environ if environ is None else environ

        def _float(name: str, default: float) -> float:
            raw = env.get(name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return float(raw)
            except ValueError as e:
                raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e

        def _int(name: str, default: int) -> int:
            raw = env.get(name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return int(raw)
            except ValueError as e:
                raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e

        return cls(
            alpha_vantage_api_key=env.get("ALPHA_VANTAGE_API_KEY") or None,
            news_api_key=env.get("NEWS_API_KEY") or None,
            alpha_vantage_base_url=env.get("ALPHA_VANTAGE_BASE_URL", DEFAULT_ALPHA_VANTAGE_URL),
            news_api_base_url=env.get("NEWS_API_BASE_URL", DEFAULT_NEWS_API_URL),
            request_timeout=_float("REQUEST_TIMEOUT", 10.0),
            calls_per_minute=_float("AV_CALLS_PER_MINUTE", 5.0),
            news_min_interval=_float("NEWS_MIN_INTERVAL", 0.0),
            max_attempts=_int("FETCH_MAX_ATTEMPTS", 4),
            retry_delay=_float("FETCH_RETRY_DELAY", 2.0),
            max_workers=_int("FETCH_MAX_WORKERS", 4),
            quote_ttl=_float("CACHE_TTL_QUOTE", 300.0),
            fundamentals_ttl=_float("CACHE_TTL_FUNDAMENTALS", 300.0),
            indicator_ttl=_float("CACHE_TTL_INDICATOR", 300.0),
            news_ttl=_float("CACHE_TTL_NEWS", 900.0),
            cache_max_entries=_int("CACHE_MAX_ENTRIES", 512),
            sentiment_normalization=_float("SENTIMENT_NORMALIZATION", 5.0),
            sentiment_threshold=_float("SENTIMENT_THRESHOLD", 0.2),
        )

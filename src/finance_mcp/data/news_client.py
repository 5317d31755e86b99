"""Blocking NewsAPI HTTP client."""

import logging
from typing import Any

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from finance_mcp.config import DEFAULT_NEWS_API_URL
from finance_mcp.data.alpha_vantage import decode_json
from finance_mcp.errors import (
    ConfigurationError,
    MalformedResponseError,
    NetworkError,
    QuotaExceededError,
    UpstreamError,
    UpstreamServerError,
)

logger = logging.getLogger(__name__)

_KEY_ERROR_CODES = frozenset({"apiKeyInvalid", "apiKeyMissing", "apiKeyDisabled", "apiKeyExhausted"})


def build_news_query(symbol: str) -> str:
    """Free-text search query for a symbol."""
    return f'"{symbol}" OR "{symbol} stock"'


class NewsApiClient:
    """Thin wrapper over the NewsAPI `everything` endpoint."""

    provider = "NewsAPI"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_NEWS_API_URL,
        timeout: float = 10.0,
        language: str = "en",
        sort_by: str = "publishedAt",
        session: requests.Session | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._language = language
        self._sort_by = sort_by
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def search(self, symbol: str, page_size: int = 10) -> dict[str, Any]:
        """
        Search recent articles mentioning a symbol.

        Raises:
            NetworkError: No response (timeout, connection failure)
            UpstreamServerError: HTTP 5xx
            ConfigurationError: API key rejected
            QuotaExceededError: Daily quota used up
            UpstreamError: Any other error body or 4xx
            MalformedResponseError: Body is not a JSON object
        """
        params = {
            "q": build_news_query(symbol),
            "language": self._language,
            "sortBy": self._sort_by,
            "pageSize": page_size,
            "apiKey": self._api_key,
        }
        logger.info(f"Fetching news for {symbol} from {self.provider}...")
        try:
            response = self._session.get(self._base_url, params=params, timeout=self._timeout)
        except (Timeout, ConnectionError) as e:
            raise NetworkError(f"{self.provider} request failed: {type(e).__name__}") from e
        except RequestException as e:
            raise NetworkError(f"{self.provider} request failed: {e}") from e

        if response.status_code >= 500:
            raise UpstreamServerError(f"{self.provider} server error: HTTP {response.status_code}", response.status_code)

        payload = decode_json(response, self.provider)
        if not isinstance(payload, dict):
            raise MalformedResponseError(f"{self.provider} returned {type(payload).__name__}, expected object")

        # Error bodies carry a code even on 4xx statuses
        if payload.get("status") == "error" or response.status_code >= 400:
            code = payload.get("code")
            message = payload.get("message") or f"HTTP {response.status_code}"
            if code in _KEY_ERROR_CODES:
                raise ConfigurationError(f"{self.provider} rejected the API key: {code}")
            if code == "rateLimited" or response.status_code == 429:
                raise QuotaExceededError(f"{self.provider} rate limit exceeded", response.status_code)
            raise UpstreamError(f"{self.provider} error ({code}): {message}", response.status_code)

        return payload

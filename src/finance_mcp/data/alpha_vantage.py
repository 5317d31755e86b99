"""Blocking Alpha Vantage HTTP client.

Calls here are synchronous; the fetch layer runs them on the context's
executor. Transport failures are translated into the error taxonomy so the
retry policy can tell transient from permanent failures.
"""

import logging
from typing import Any

import requests
from requests.exceptions import ConnectionError, HTTPError, RequestException, Timeout

from finance_mcp.config import DEFAULT_ALPHA_VANTAGE_URL
from finance_mcp.errors import (
    InvalidSymbolError,
    MalformedResponseError,
    NetworkError,
    QuotaExceededError,
    UpstreamError,
    UpstreamServerError,
)
from finance_mcp.models import IndicatorKind

logger = logging.getLogger(__name__)

# function name + extra params per indicator
INDICATOR_REQUESTS: dict[IndicatorKind, tuple[str, dict[str, Any]]] = {
    IndicatorKind.SMA50: ("SMA", {"time_period": 50}),
    IndicatorKind.SMA200: ("SMA", {"time_period": 200}),
    IndicatorKind.RSI: ("RSI", {"time_period": 14}),
    IndicatorKind.MACD: ("MACD", {}),
}


def raise_for_status(response: requests.Response, provider: str, symbol: str | None = None) -> None:
    """Translate HTTP error statuses into typed errors."""
    try:
        response.raise_for_status()
    except HTTPError as e:
        status = response.status_code
        if status == 404:
            raise InvalidSymbolError(f"Stock symbol \"{symbol}\" not found", symbol) from e
        if status == 429:
            raise QuotaExceededError(f"{provider} rate limit exceeded", status) from e
        if status >= 500:
            raise UpstreamServerError(f"{provider} server error: HTTP {status}", status) from e
        raise UpstreamError(f"{provider} rejected request: HTTP {status}", status) from e


def decode_json(response: requests.Response, provider: str) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponseError(f"{provider} returned a non-JSON response") from e


class AlphaVantageClient:
    """Thin wrapper over the Alpha Vantage query endpoint."""

    provider = "Alpha Vantage"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_ALPHA_VANTAGE_URL,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def query(self, function: str, symbol: str, **params: Any) -> dict[str, Any]:
        """
        Perform one GET against the query endpoint.

        Args:
            function: Alpha Vantage function name (GLOBAL_QUOTE, OVERVIEW, SMA, ...)
            symbol: Normalized symbol
            **params: Extra query parameters

        Returns:
            Decoded JSON object

        Raises:
            NetworkError: No response (timeout, connection failure)
            UpstreamServerError: HTTP 5xx
            QuotaExceededError: HTTP 429 or a quota notice in the body
            InvalidSymbolError: HTTP 404 or an "Error Message" body
            UpstreamError: Other HTTP 4xx
            MalformedResponseError: Body is not a JSON object
        """
        query = {"function": function, "symbol": symbol, "apikey": self._api_key, **params}
        logger.info(f"Fetching {function} for {symbol} from {self.provider}...")
        try:
            response = self._session.get(self._base_url, params=query, timeout=self._timeout)
        except (Timeout, ConnectionError) as e:
            raise NetworkError(f"{self.provider} request failed: {type(e).__name__}") from e
        except RequestException as e:
            raise NetworkError(f"{self.provider} request failed: {e}") from e

        raise_for_status(response, self.provider, symbol)
        payload = decode_json(response, self.provider)
        if not isinstance(payload, dict):
            raise MalformedResponseError(f"{self.provider} returned {type(payload).__name__}, expected object")

        if "Error Message" in payload:
            raise InvalidSymbolError(f"{self.provider} rejected {function} for {symbol}: invalid symbol or parameters", symbol)
        # Quota notices arrive with HTTP 200
        notice = payload.get("Note") or payload.get("Information")
        if notice and len(payload) == 1:
            raise QuotaExceededError(f"{self.provider} quota notice: {notice}")

        return payload

    def global_quote(self, symbol: str) -> dict[str, Any]:
        return self.query("GLOBAL_QUOTE", symbol)

    def company_overview(self, symbol: str) -> dict[str, Any]:
        return self.query("OVERVIEW", symbol)

    def indicator(self, symbol: str, kind: IndicatorKind) -> dict[str, Any]:
        function, extra = INDICATOR_REQUESTS[kind]
        return self.query(function, symbol, interval="daily", series_type="close", **extra)

"""Pytest configuration, provider fakes and payload builders."""

import asyncio
import threading
from typing import Any

import pytest

from finance_mcp.config import Settings
from finance_mcp.data.context import DataAccessContext
from finance_mcp.data.parsers import INDICATOR_SERIES
from finance_mcp.models import IndicatorKind


class FakeClock:
    """Manually advanced monotonic clock with a matching async sleep."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        # Yield so other tasks can interleave, as a real sleep would
        await asyncio.sleep(0)


def quote_payload(symbol: str, price: float = 150.0, volume: int = 1_000_000) -> dict[str, Any]:
    return {
        "Global Quote": {
            "01. symbol": symbol,
            "02. open": f"{price - 1:.4f}",
            "03. high": f"{price + 2:.4f}",
            "04. low": f"{price - 2:.4f}",
            "05. price": f"{price:.4f}",
            "06. volume": str(volume),
            "07. latest trading day": "2024-06-14",
            "08. previous close": f"{price - 1.5:.4f}",
            "09. change": "1.5000",
            "10. change percent": "1.0101%",
        }
    }


def overview_payload(symbol: str, **overrides: str) -> dict[str, Any]:
    payload = {
        "Symbol": symbol,
        "Name": f"{symbol} Inc",
        "Exchange": "NASDAQ",
        "Currency": "USD",
        "Sector": "TECHNOLOGY",
        "Industry": "ELECTRONIC COMPUTERS",
        "MarketCapitalization": "3000000000000",
        "PERatio": "31.5",
        "PEGRatio": "2.1",
        "BookValue": "4.38",
        "DividendYield": "0.0044",
        "EPS": "6.43",
        "RevenuePerShareTTM": "24.54",
        "ProfitMargin": "0.262",
        "OperatingMarginTTM": "0.296",
        "ReturnOnAssetsTTM": "0.214",
        "ReturnOnEquityTTM": "1.47",
        "Beta": "1.25",
        "52WeekHigh": "199.62",
        "52WeekLow": "164.08",
        "AnalystTargetPrice": "205.5",
    }
    payload.update(overrides)
    return payload


def sma_payload(value: float, date: str = "2024-06-14") -> dict[str, Any]:
    return {
        "Meta Data": {"1: Symbol": "X", "2: Indicator": "Simple Moving Average (SMA)"},
        "Technical Analysis: SMA": {
            date: {"SMA": f"{value:.4f}"},
            "2024-06-13": {"SMA": "1.0000"},
        },
    }


def rsi_payload(value: float, date: str = "2024-06-14") -> dict[str, Any]:
    return {
        "Meta Data": {"1: Symbol": "X", "2: Relative Strength Index (RSI)": ""},
        "Technical Analysis: RSI": {date: {"RSI": f"{value:.4f}"}},
    }


def macd_payload(macd: float, signal: float, hist: float, date: str = "2024-06-14") -> dict[str, Any]:
    return {
        "Meta Data": {"1: Symbol": "X"},
        "Technical Analysis: MACD": {
            date: {
                "MACD": f"{macd:.4f}",
                "MACD_Signal": f"{signal:.4f}",
                "MACD_Hist": f"{hist:.4f}",
            }
        },
    }


def news_payload(*titles: str, description: str | None = None) -> dict[str, Any]:
    return {
        "status": "ok",
        "totalResults": len(titles),
        "articles": [
            {
                "source": {"id": None, "name": "Reuters"},
                "author": "Staff",
                "title": title,
                "description": description,
                "url": f"https://example.com/{i}",
                "publishedAt": f"2024-06-1{i}T12:00:00Z",
                "content": None,
            }
            for i, title in enumerate(titles)
        ],
    }


class FakeAlphaVantage:
    """
    In-memory stand-in for AlphaVantageClient.

    Unknown symbols get the provider's empty-payload responses. `failures`
    maps (function, symbol) to a list of exceptions raised one per call
    before the payload is served.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.quotes: dict[str, dict[str, Any]] = {}
        self.overviews: dict[str, dict[str, Any]] = {}
        self.indicators: dict[tuple[IndicatorKind, str], dict[str, Any]] = {}
        self.failures: dict[tuple[str, str], list[Exception]] = {}
        self._lock = threading.Lock()

    def add_symbol(self, symbol: str, price: float = 150.0, **overview: str) -> None:
        self.quotes[symbol] = quote_payload(symbol, price)
        self.overviews[symbol] = overview_payload(symbol, **overview)

    def count(self, function: str, symbol: str | None = None) -> int:
        return sum(1 for f, s in self.calls if f == function and (symbol is None or s == symbol))

    def _record(self, function: str, symbol: str) -> None:
        with self._lock:
            self.calls.append((function, symbol))
            queue = self.failures.get((function, symbol))
            error = queue.pop(0) if queue else None
        if error is not None:
            raise error

    def global_quote(self, symbol: str) -> dict[str, Any]:
        self._record("GLOBAL_QUOTE", symbol)
        return self.quotes.get(symbol, {"Global Quote": {}})

    def company_overview(self, symbol: str) -> dict[str, Any]:
        self._record("OVERVIEW", symbol)
        return self.overviews.get(symbol, {})

    def indicator(self, symbol: str, kind: IndicatorKind) -> dict[str, Any]:
        self._record(kind.value, symbol)
        return self.indicators.get((kind, symbol), {INDICATOR_SERIES[kind][0]: {}})


class FakeNews:
    """In-memory stand-in for NewsApiClient."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, int]] = []
        self.payloads: dict[str, dict[str, Any]] = {}
        self.failures: list[Exception] = []

    def search(self, symbol: str, page_size: int = 10) -> dict[str, Any]:
        self.calls.append((symbol, page_size))
        if self.failures:
            raise self.failures.pop(0)
        return self.payloads.get(symbol, {"status": "ok", "totalResults": 0, "articles": []})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Test settings: paced like production, but no retry pause."""
    return Settings(
        alpha_vantage_api_key="test-av-key",
        news_api_key="test-news-key",
        calls_per_minute=5.0,
        retry_delay=0.0,
        max_attempts=4,
    )


@pytest.fixture
def av() -> FakeAlphaVantage:
    fake = FakeAlphaVantage()
    fake.add_symbol("AAPL", price=190.0)
    fake.add_symbol("MSFT", price=420.0)
    return fake


@pytest.fixture
def news() -> FakeNews:
    return FakeNews()


@pytest.fixture
def ctx(settings: Settings, av: FakeAlphaVantage, news: FakeNews, clock: FakeClock):
    context = DataAccessContext(settings, alpha_vantage=av, news=news, clock=clock, sleep=clock.sleep)
    yield context
    context.close()

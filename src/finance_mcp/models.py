"""Canonical, provider-agnostic data types.

Every type is frozen: a newer fetch supersedes a value, it never mutates one.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class DataKind(str, Enum):
    """Cache/dedup namespace, one per fetch operation."""

    QUOTE = "quote"
    FUNDAMENTALS = "fundamentals"
    INDICATOR = "indicator"
    NEWS = "news"


class IndicatorKind(str, Enum):
    """Technical indicators served by the market-data provider."""

    SMA50 = "SMA50"
    SMA200 = "SMA200"
    RSI = "RSI"
    MACD = "MACD"

    @classmethod
    def parse(cls, value: "str | IndicatorKind") -> "IndicatorKind":
        """Accept enum members or case-insensitive names ("sma50", "RSI")."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper().strip())
        except ValueError:
            valid = ", ".join(k.value for k in cls)
            raise ValueError(f"Invalid indicator '{value}'. Must be one of: {valid}") from None


class SentimentLabel(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class _Serializable:
    def to_dict(self) -> dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]


@dataclass(frozen=True)
class Quote(_Serializable):
    symbol: str
    price: float
    change: float
    change_percent: float
    open: float
    high: float
    low: float
    previous_close: float
    volume: int
    latest_trading_day: str


@dataclass(frozen=True)
class FinancialMetrics(_Serializable):
    """Company fundamentals. Optional numerics are None when the provider has no value."""

    symbol: str
    name: str | None
    market_cap: float | None
    pe_ratio: float | None
    peg_ratio: float | None
    book_value: float | None
    dividend_yield: float | None
    eps: float | None
    revenue_per_share: float | None
    profit_margin: float | None
    operating_margin: float | None
    return_on_assets: float | None
    return_on_equity: float | None
    beta: float | None
    fifty_two_week_high: float | None
    fifty_two_week_low: float | None
    analyst_target_price: float | None
    sector: str | None
    industry: str | None
    exchange: str | None = None
    currency: str | None = None


@dataclass(frozen=True)
class MacdValue(_Serializable):
    value: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class IndicatorReading(_Serializable):
    """Most recent data point of one indicator series."""

    symbol: str
    kind: IndicatorKind
    value: float | MacdValue
    as_of: str


@dataclass(frozen=True)
class TechnicalIndicatorSet(_Serializable):
    """
    Indicators for one symbol.

    Only requested indicators that were fetched successfully are populated.
    `failed` lists the requested kinds that were omitted.
    """

    symbol: str
    as_of: str
    sma50: float | None = None
    sma200: float | None = None
    rsi: float | None = None
    macd: MacdValue | None = None
    failed: tuple[IndicatorKind, ...] = ()


@dataclass(frozen=True)
class NewsArticle(_Serializable):
    title: str
    description: str | None
    source: str | None
    url: str | None
    published_at: str | None
    sentiment: SentimentLabel
    sentiment_score: float


@dataclass(frozen=True)
class NewsSentimentReport(_Serializable):
    """Articles in provider order plus the mean of their sentiment scores."""

    symbol: str
    articles: tuple[NewsArticle, ...]
    sentiment: SentimentLabel
    sentiment_score: float
    article_count: int
    as_of: str


@dataclass(frozen=True)
class ComparisonEntry(_Serializable):
    symbol: str
    name: str | None
    price: float
    change_percent: float
    market_cap: float | None
    pe_ratio: float | None
    eps: float | None
    profit_margin: float | None
    beta: float | None

    @classmethod
    def from_parts(cls, quote: Quote, metrics: FinancialMetrics) -> "ComparisonEntry":
        return cls(
            symbol=quote.symbol,
            name=metrics.name,
            price=quote.price,
            change_percent=quote.change_percent,
            market_cap=metrics.market_cap,
            pe_ratio=metrics.pe_ratio,
            eps=metrics.eps,
            profit_margin=metrics.profit_margin,
            beta=metrics.beta,
        )


@dataclass(frozen=True)
class StockComparison(_Serializable):
    """
    Side-by-side metrics for several symbols.

    `metrics` holds only the symbols that resolved; its keys are a subset of
    `symbols`. `failures` maps each dropped symbol to the reason.
    """

    symbols: tuple[str, ...]
    metrics: dict[str, ComparisonEntry]
    as_of: str
    failures: dict[str, str] = field(default_factory=dict)

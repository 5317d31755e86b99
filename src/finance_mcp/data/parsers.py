"""Normalize raw provider payloads into canonical types."""

import math
from typing import Any

import pandas as pd

from finance_mcp.errors import InvalidSymbolError, MalformedResponseError
from finance_mcp.models import (
    FinancialMetrics,
    IndicatorKind,
    IndicatorReading,
    MacdValue,
    Quote,
)
from finance_mcp.utils.sanitize import sanitize_text

# Upstream placeholders for "no value"
NULL_SENTINELS = frozenset({"", "none", "-", "n/a", "null", "nan"})

# Series key and value column(s) per indicator
INDICATOR_SERIES: dict[IndicatorKind, tuple[str, tuple[str, ...]]] = {
    IndicatorKind.SMA50: ("Technical Analysis: SMA", ("SMA",)),
    IndicatorKind.SMA200: ("Technical Analysis: SMA", ("SMA",)),
    IndicatorKind.RSI: ("Technical Analysis: RSI", ("RSI",)),
    IndicatorKind.MACD: ("Technical Analysis: MACD", ("MACD", "MACD_Signal", "MACD_Hist")),
}


def _safe_float(value: Any) -> float | None:
    """Convert to float or return None for missing, sentinel or non-finite values."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip().rstrip("%")
        if value.lower() in NULL_SENTINELS:
            return None
    try:
        result = float(value)
    except (ValueError, TypeError, OverflowError):
        return None
    if not math.isfinite(result):
        return None
    return result


def _require_float(value: Any, field_name: str) -> float:
    result = _safe_float(value)
    if result is None:
        raise MalformedResponseError(f"Required field '{field_name}' is missing or not numeric: {value!r}")
    return result


def _require_int(value: Any, field_name: str) -> int:
    # _require_float only returns finite values, so int() cannot overflow
    return int(_require_float(value, field_name))


def _timestamp(value: Any) -> str | None:
    """ISO-8601 UTC timestamp, or None if the value is not a parseable date string."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        ts = pd.to_datetime(value, utc=True, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.isoformat()


def _text(value: Any, max_length: int = 200) -> str | None:
    if not isinstance(value, str) or value.strip().lower() in NULL_SENTINELS:
        return None
    return sanitize_text(value, max_length=max_length)


def _require_mapping(payload: Any, what: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise MalformedResponseError(f"Expected JSON object for {what}, got {type(payload).__name__}")
    return payload


def parse_quote(payload: Any, symbol: str | None = None) -> Quote:
    """
    Parse a GLOBAL_QUOTE response.

    Raises:
        InvalidSymbolError: If the quote block is empty (unknown symbol)
        MalformedResponseError: If the quote block or a required field is missing
    """
    payload = _require_mapping(payload, "quote")
    if "Global Quote" not in payload:
        raise MalformedResponseError("Quote response has no 'Global Quote' block")

    quote = payload["Global Quote"]
    if not quote:
        raise InvalidSymbolError("Invalid symbol or no data returned from Alpha Vantage", symbol)
    quote = _require_mapping(quote, "quote block")

    quote_symbol = quote.get("01. symbol") or symbol
    if not quote_symbol:
        raise MalformedResponseError("Quote response has no symbol")

    return Quote(
        symbol=str(quote_symbol).upper(),
        price=_require_float(quote.get("05. price"), "05. price"),
        change=_require_float(quote.get("09. change"), "09. change"),
        change_percent=_require_float(quote.get("10. change percent"), "10. change percent"),
        open=_require_float(quote.get("02. open"), "02. open"),
        high=_require_float(quote.get("03. high"), "03. high"),
        low=_require_float(quote.get("04. low"), "04. low"),
        previous_close=_require_float(quote.get("08. previous close"), "08. previous close"),
        volume=_require_int(quote.get("06. volume"), "06. volume"),
        latest_trading_day=str(quote.get("07. latest trading day") or ""),
    )


def parse_overview(payload: Any, symbol: str | None = None) -> FinancialMetrics:
    """
    Parse an OVERVIEW response.

    Ratios the provider reports as "None" or "-" become None, never zero.

    Raises:
        InvalidSymbolError: If the payload is empty (unknown symbol)
        MalformedResponseError: If the payload has no Symbol field
    """
    payload = _require_mapping(payload, "company overview")
    if not payload:
        raise InvalidSymbolError("Invalid symbol or no company overview data", symbol)
    if not payload.get("Symbol"):
        raise MalformedResponseError("Invalid company overview data: missing 'Symbol'")

    return FinancialMetrics(
        symbol=str(payload["Symbol"]).upper(),
        name=_text(payload.get("Name")),
        market_cap=_safe_float(payload.get("MarketCapitalization")),
        pe_ratio=_safe_float(payload.get("PERatio")),
        peg_ratio=_safe_float(payload.get("PEGRatio")),
        book_value=_safe_float(payload.get("BookValue")),
        dividend_yield=_safe_float(payload.get("DividendYield")),
        eps=_safe_float(payload.get("EPS")),
        revenue_per_share=_safe_float(payload.get("RevenuePerShareTTM")),
        profit_margin=_safe_float(payload.get("ProfitMargin")),
        operating_margin=_safe_float(payload.get("OperatingMarginTTM")),
        return_on_assets=_safe_float(payload.get("ReturnOnAssetsTTM")),
        return_on_equity=_safe_float(payload.get("ReturnOnEquityTTM")),
        beta=_safe_float(payload.get("Beta")),
        fifty_two_week_high=_safe_float(payload.get("52WeekHigh")),
        fifty_two_week_low=_safe_float(payload.get("52WeekLow")),
        analyst_target_price=_safe_float(payload.get("AnalystTargetPrice")),
        sector=_text(payload.get("Sector"), max_length=100),
        industry=_text(payload.get("Industry"), max_length=100),
        exchange=_text(payload.get("Exchange"), max_length=50),
        currency=_text(payload.get("Currency"), max_length=10),
    )


def parse_indicator(kind: IndicatorKind, payload: Any, symbol: str) -> IndicatorReading:
    """
    Parse the most recent point of an SMA/RSI/MACD series.

    The series is keyed by date; the latest date wins regardless of key order.

    Raises:
        InvalidSymbolError: If the series is empty
        MalformedResponseError: If the series block or a value is missing
    """
    payload = _require_mapping(payload, f"{kind.value} indicator")
    series_key, columns = INDICATOR_SERIES[kind]
    if series_key not in payload:
        raise MalformedResponseError(f"{kind.value} response has no '{series_key}' block")

    series = payload[series_key]
    if not series:
        raise InvalidSymbolError(f"No {kind.value} data returned for {symbol}", symbol)
    series = _require_mapping(series, f"{kind.value} series")

    df = pd.DataFrame.from_dict(series, orient="index")
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise MalformedResponseError(f"{kind.value} series is missing columns: {missing}")

    df.index = pd.to_datetime(df.index, errors="coerce")
    df = df[df.index.notna()].sort_index()
    if df.empty:
        raise MalformedResponseError(f"{kind.value} series has no dated points")

    latest = df.iloc[-1]
    as_of = latest.name.strftime("%Y-%m-%d")

    if kind is IndicatorKind.MACD:
        value: float | MacdValue = MacdValue(
            value=_require_float(latest["MACD"], "MACD"),
            signal=_require_float(latest["MACD_Signal"], "MACD_Signal"),
            histogram=_require_float(latest["MACD_Hist"], "MACD_Hist"),
        )
    else:
        value = _require_float(latest[columns[0]], columns[0])

    return IndicatorReading(symbol=symbol, kind=kind, value=value, as_of=as_of)


def parse_news_articles(payload: Any) -> list[dict[str, Any]]:
    """
    Extract article fields from a news search response, in provider order.

    Articles without a title (or with the provider's "[Removed]" placeholder)
    are skipped.

    Returns:
        List of dicts with title, description, source, url, published_at

    Raises:
        MalformedResponseError: If the articles list is absent
    """
    payload = _require_mapping(payload, "news")
    raw_articles = payload.get("articles")
    if not isinstance(raw_articles, list):
        raise MalformedResponseError("News response has no 'articles' list")

    articles: list[dict[str, Any]] = []
    for item in raw_articles:
        if not isinstance(item, dict):
            continue
        title = _text(item.get("title"))
        if not title or title == "[Removed]":
            continue

        source = item.get("source")
        source_name = source.get("name") if isinstance(source, dict) else source

        articles.append({
            "title": title,
            "description": _text(item.get("description"), max_length=500),
            "source": _text(source_name, max_length=50),
            "url": item.get("url") if isinstance(item.get("url"), str) else None,
            "published_at": _timestamp(item.get("publishedAt")),
        })
    return articles

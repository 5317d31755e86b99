"""Fetch operations: cache -> single-flight -> rate limit -> retry -> parse -> cache."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from finance_mcp.data.context import DataAccessContext
from finance_mcp.data.parsers import (
    parse_indicator,
    parse_news_articles,
    parse_overview,
    parse_quote,
)
from finance_mcp.data.rate_limiter import RateLimiter
from finance_mcp.data.retry import with_retry
from finance_mcp.models import (
    DataKind,
    FinancialMetrics,
    IndicatorKind,
    IndicatorReading,
    NewsArticle,
    NewsSentimentReport,
    Quote,
)
from finance_mcp.sentiment import aggregate_scores, score_text
from finance_mcp.utils.provenance import utc_now_iso
from finance_mcp.utils.validators import normalize_symbol

logger = logging.getLogger(__name__)

T = TypeVar("T")

NEWS_MIN_LIMIT = 1
NEWS_MAX_LIMIT = 20
NEWS_DEFAULT_LIMIT = 10


async def _cached_fetch(
    ctx: DataAccessContext,
    kind: DataKind,
    key: str,
    gate: RateLimiter,
    call: Callable[[Any], Awaitable[Any]],
    parse: Callable[[Any], T],
    client: Callable[[], Any],
) -> T:
    """
    Shared pipeline for every fetch operation.

    `client()` resolves the provider client on a cache miss, so a missing
    credential raises ConfigurationError before anything is scheduled. The
    rate limiter and retry loop live inside the single-flight task: each
    logical call is gated once however many callers joined it.
    """
    cached = ctx.cache.get(kind, key)
    if cached is not None:
        logger.debug(f"Cache hit for {kind.value}:{key}")
        return cached

    provider = client()

    async def _load() -> T:
        await gate.acquire()
        raw = await with_retry(
            f"{kind.value}({key})",
            lambda: call(provider),
            max_attempts=ctx.settings.max_attempts,
            delay=ctx.settings.retry_delay,
            sleep=ctx.sleep,
        )
        value = parse(raw)
        ctx.cache.put(kind, key, value)
        return value

    return await ctx.singleflight.run(f"{kind.value}:{key}", _load)


async def fetch_quote(ctx: DataAccessContext, symbol: str) -> Quote:
    """
    Fetch the latest quote for a symbol.

    Raises:
        InvalidSymbolError: Malformed symbol or unknown to the provider
        ConfigurationError: ALPHA_VANTAGE_API_KEY missing
        NetworkError / UpstreamServerError: After retries are exhausted
        MalformedResponseError: Provider payload missing required fields
    """
    normalized = normalize_symbol(symbol)
    return await _cached_fetch(
        ctx,
        DataKind.QUOTE,
        normalized,
        ctx.market_gate,
        lambda av: ctx.run_blocking(av.global_quote, normalized),
        lambda raw: parse_quote(raw, normalized),
        lambda: ctx.alpha_vantage,
    )


async def fetch_fundamentals(ctx: DataAccessContext, symbol: str) -> FinancialMetrics:
    """Fetch company fundamentals (OVERVIEW) for a symbol. Raises as fetch_quote."""
    normalized = normalize_symbol(symbol)
    return await _cached_fetch(
        ctx,
        DataKind.FUNDAMENTALS,
        normalized,
        ctx.market_gate,
        lambda av: ctx.run_blocking(av.company_overview, normalized),
        lambda raw: parse_overview(raw, normalized),
        lambda: ctx.alpha_vantage,
    )


async def fetch_indicator(
    ctx: DataAccessContext,
    symbol: str,
    kind: IndicatorKind | str,
) -> IndicatorReading:
    """
    Fetch the latest value of one technical indicator.

    Keyed by (symbol, kind): SMA50, SMA200, RSI and MACD for the same symbol
    are independent cache and dedup units.

    Raises:
        ValueError: Unknown indicator name
        Otherwise same as fetch_quote.
    """
    normalized = normalize_symbol(symbol)
    indicator = IndicatorKind.parse(kind)
    return await _cached_fetch(
        ctx,
        DataKind.INDICATOR,
        f"{normalized}:{indicator.value}",
        ctx.market_gate,
        lambda av: ctx.run_blocking(av.indicator, normalized, indicator),
        lambda raw: parse_indicator(indicator, raw, normalized),
        lambda: ctx.alpha_vantage,
    )


async def fetch_news_sentiment(
    ctx: DataAccessContext,
    symbol: str,
    limit: int = NEWS_DEFAULT_LIMIT,
) -> NewsSentimentReport:
    """
    Fetch recent news for a symbol and score each article.

    The news provider is not behind the market-data gate; it has its own.

    Args:
        ctx: Data access context
        symbol: Stock ticker symbol
        limit: Number of articles to request, clamped to 1..20

    Returns:
        NewsSentimentReport (an empty article list is a valid, neutral report)

    Raises:
        InvalidSymbolError: Malformed symbol
        ValueError: limit is not an integer
        ConfigurationError: NEWS_API_KEY missing or rejected
        QuotaExceededError: Daily news quota used up
        NetworkError / UpstreamServerError: After retries are exhausted
    """
    normalized = normalize_symbol(symbol)
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValueError(f"limit must be an integer, got {limit!r}")
    page_size = max(NEWS_MIN_LIMIT, min(NEWS_MAX_LIMIT, limit))
    settings = ctx.settings

    def _parse(raw: Any) -> NewsSentimentReport:
        articles: list[NewsArticle] = []
        for item in parse_news_articles(raw)[:page_size]:
            scored = score_text(
                f"{item['title']} {item['description'] or ''}",
                normalization=settings.sentiment_normalization,
                threshold=settings.sentiment_threshold,
            )
            articles.append(NewsArticle(sentiment=scored.label, sentiment_score=scored.score, **item))

        label, mean = aggregate_scores(
            (a.sentiment_score for a in articles),
            threshold=settings.sentiment_threshold,
        )
        return NewsSentimentReport(
            symbol=normalized,
            articles=tuple(articles),
            sentiment=label,
            sentiment_score=mean,
            article_count=len(articles),
            as_of=utc_now_iso(),
        )

    return await _cached_fetch(
        ctx,
        DataKind.NEWS,
        f"{normalized}:{page_size}",
        ctx.news_gate,
        lambda news: ctx.run_blocking(news.search, normalized, page_size),
        _parse,
        lambda: ctx.news,
    )

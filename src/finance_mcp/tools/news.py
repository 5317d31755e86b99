"""News sentiment tool."""

from time import perf_counter
from typing import Any

from finance_mcp.data.context import DataAccessContext
from finance_mcp.data.fetch import NEWS_DEFAULT_LIMIT, fetch_news_sentiment
from finance_mcp.errors import FinanceDataError
from finance_mcp.utils.provenance import build_envelope, build_provenance, error_response_for


async def news_sentiment(
    ctx: DataAccessContext,
    symbol: str,
    limit: int = NEWS_DEFAULT_LIMIT,
) -> dict[str, Any]:
    """
    Get recent news headlines with keyword sentiment for a symbol.

    Args:
        ctx: Data access context
        symbol: Stock ticker symbol
        limit: Number of articles (1-20, default: 10)

    Returns:
        Dict with articles, per-article sentiment and the aggregate score
    """
    start_time = perf_counter()

    try:
        report = await fetch_news_sentiment(ctx, symbol, limit)
    except (ValueError, FinanceDataError) as e:
        return error_response_for(e, symbol)

    warnings: list[str] = []
    if report.article_count == 0:
        warnings.append("No recent news articles found")

    return build_envelope(
        "news_sentiment",
        start_time,
        {
            "news": build_provenance(
                source="newsapi",
                as_of=report.as_of,
                cache_ttl_seconds=ctx.settings.news_ttl,
                warnings=warnings,
            ),
        },
        symbol=report.symbol,
        article_count=report.article_count,
        articles=[a.to_dict() for a in report.articles],
        sentiment={
            "overall": report.sentiment.value,
            "score": round(report.sentiment_score, 4),
            "method": "keyword_v1",
        },
    )

"""News sentiment tool."""

from datetime import datetime, timedelta, timezone
from time import perf_counter
from typing import Any

from stock_research.data.yfinance_client import fetch_ticker
from stock_research.scoring.sentiment import (
    SentimentLabel,
    analyze_basic_sentiment,
    average_sentiment,
    sentiment_display_label,
    sentiment_label_for,
)
from stock_research.utils.provenance import (
    build_error_response,
    build_meta,
    build_provenance,
    utc_now_iso,
)
from stock_research.utils.rounding import round_half_up
from stock_research.utils.sanitize import sanitize_text
from stock_research.utils.validators import normalize_symbol


async def news_sentiment(symbol: str, days: int = 7) -> dict[str, Any]:
    """
    Get recent news for a stock with keyword sentiment per article.

    Args:
        symbol: Stock ticker symbol
        days: Number of days to look back (default: 7)

    Returns:
        Dict with scored articles, average sentiment and label counts
    """
    start_time = perf_counter()

    try:
        normalized_symbol = normalize_symbol(symbol)
        ticker = await fetch_ticker(normalized_symbol)
    except ValueError as e:
        return build_error_response(error_type="invalid_symbol", message=str(e), symbol=symbol)
    except Exception as e:
        return build_error_response(
            error_type="data_unavailable",
            message=f"Failed to fetch data: {e}",
            symbol=symbol,
        )

    try:
        news_data = ticker.news
    except Exception as e:
        return build_error_response(
            error_type="data_unavailable",
            message=f"Failed to fetch news: {e}",
            symbol=normalized_symbol,
        )

    articles = score_articles(news_data or [], days=days)

    scores = [a["_score"] for a in articles]
    avg = average_sentiment(scores)
    overall = sentiment_label_for(avg)

    counts = {label.value: 0 for label in SentimentLabel}
    for s in scores:
        counts[s.label.value] += 1

    for a in articles:
        del a["_score"]

    warnings: list[str] = []
    if not articles:
        warnings.append(f"No news articles found in the past {days} days")

    duration_ms = (perf_counter() - start_time) * 1000

    return {
        "meta": build_meta("news_sentiment", duration_ms),
        "data_provenance": {
            "news": build_provenance(source="yfinance", as_of=utc_now_iso()),
        },
        "symbol": normalized_symbol,
        "period_days": days,
        "article_count": len(articles),
        "articles": articles,
        "sentiment": {
            "average": round_half_up(avg) if avg is not None else None,
            "overall": overall.value if overall else None,
            "overall_label": sentiment_display_label(overall),
            "counts": counts,
            "method": "keyword_v1",
        },
        "warnings": warnings if warnings else None,
    }


def score_articles(
    news_data: list[dict[str, Any]],
    days: int = 7,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """
    Filter yfinance news items to the lookback window and score each one.

    Items without a parseable publish date are skipped. Each returned article
    carries its SentimentScore under "_score" for aggregation.

    Returns:
        Articles sorted newest first
    """
    now = now or datetime.now(timezone.utc).replace(tzinfo=None)
    cutoff = now - timedelta(days=days)
    articles: list[dict[str, Any]] = []

    for item in news_data:
        content = item.get("content") or {}
        pub_date_str = content.get("pubDate")
        if not pub_date_str:
            continue

        try:
            pub_date = datetime.fromisoformat(pub_date_str.replace("Z", "+00:00"))
        except (ValueError, AttributeError):
            continue
        if pub_date.tzinfo is not None:
            pub_date = pub_date.astimezone(timezone.utc).replace(tzinfo=None)

        if pub_date < cutoff:
            continue

        title = sanitize_text(content.get("title") or "", max_length=200)
        summary = sanitize_text(content.get("summary") or "", max_length=500)
        provider = sanitize_text(
            (content.get("provider") or {}).get("displayName", "Unknown"), max_length=50
        )
        url = (content.get("canonicalUrl") or {}).get("url")

        score = analyze_basic_sentiment(title, summary)
        articles.append({
            "date": pub_date.strftime("%Y-%m-%d"),
            "published_at": pub_date.isoformat() + "Z",
            "title": title,
            "summary": summary,
            "provider": provider,
            "url": url,
            "sentiment": score.to_dict(),
            "_score": score,
        })

    articles.sort(key=lambda a: a["published_at"], reverse=True)
    return articles

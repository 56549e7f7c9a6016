"""Analyst consensus tool."""

from time import perf_counter
from typing import Any

import pandas as pd

from stock_research.data.yfinance_client import fetch_info, fetch_ticker
from stock_research.scoring.consensus import AnalystCounts, summarize_consensus, target_upside
from stock_research.utils.provenance import (
    build_error_response,
    build_meta,
    build_provenance,
    utc_now_iso,
)
from stock_research.utils.validators import normalize_symbol

# yfinance recommendations columns -> AnalystCounts fields
_COLUMN_MAP = {
    "strongBuy": "strong_buy",
    "buy": "buy",
    "hold": "hold",
    "sell": "sell",
    "strongSell": "strong_sell",
}


async def analyst_consensus(symbol: str) -> dict[str, Any]:
    """
    Aggregate the latest analyst ratings into a consensus score.

    Args:
        symbol: Stock ticker symbol

    Returns:
        Dict with rating counts, consensus score (-2..+2), recommendation key,
        and analyst price target with upside
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
        recommendations = ticker.recommendations
    except Exception as e:
        return build_error_response(
            error_type="data_unavailable",
            message=f"Failed to fetch analyst recommendations: {e}",
            symbol=normalized_symbol,
        )

    warnings: list[str] = []
    counts, period = latest_analyst_counts(recommendations)
    if counts is None:
        warnings.append("no_analyst_recommendations")
        counts = AnalystCounts()

    summary = summarize_consensus(counts)

    # Price target is best effort; the consensus stands on its own
    current_price = None
    target_price = None
    try:
        info = await fetch_info(normalized_symbol)
        current_price = _safe_float(info.get("currentPrice")) or _safe_float(
            info.get("regularMarketPrice")
        )
        target_price = _safe_float(info.get("targetMeanPrice"))
    except Exception:
        warnings.append("price_target_unavailable")

    duration_ms = (perf_counter() - start_time) * 1000

    return {
        "meta": build_meta("analyst_consensus", duration_ms),
        "data_provenance": {
            "recommendations": build_provenance(
                source="yfinance",
                as_of=utc_now_iso(),
                period=period,
            ),
        },
        "symbol": normalized_symbol,
        "counts": counts.as_counts(),
        **summary.to_dict(),
        "price_target": {
            "current_price": current_price,
            "target_mean": target_price,
            "upside_pct": target_upside(current_price, target_price),
        },
        "warnings": warnings if warnings else None,
    }


def latest_analyst_counts(
    recommendations: pd.DataFrame | None,
) -> tuple[AnalystCounts | None, str | None]:
    """
    Pick the most recent rating row from a yfinance recommendations frame.

    Prefers the row with period "0m" (current month), otherwise the first row.

    Returns:
        Tuple of (counts, period), (None, None) when there is no usable row
    """
    if recommendations is None or not isinstance(recommendations, pd.DataFrame):
        return None, None
    if recommendations.empty:
        return None, None

    rows = recommendations
    if "period" in rows.columns:
        current = rows[rows["period"] == "0m"]
        if not current.empty:
            rows = current

    row = rows.iloc[0]
    fields = {field: _safe_int(row.get(column)) for column, field in _COLUMN_MAP.items()}
    period = str(row["period"]) if "period" in row.index else None
    return AnalystCounts(**fields), period


def _safe_int(value: Any) -> int | None:
    if value is None or pd.isna(value):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def _safe_float(value: Any) -> float | None:
    """Convert to float or return None."""
    if value is None:
        return None
    try:
        result = float(value)
        if pd.isna(result):
            return None
        return result
    except (ValueError, TypeError):
        return None

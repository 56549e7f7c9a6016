"""Research verdict tool."""

import math
from time import perf_counter
from typing import Any

from stock_research.data.yfinance_client import fetch_info_with_provenance, get_market_state
from stock_research.scoring.consensus import target_upside as compute_target_upside
from stock_research.scoring.signals import get_signal_config
from stock_research.scoring.verdict import StockRecommendation, evaluate_verdict
from stock_research.utils.provenance import (
    build_error_response,
    build_meta,
    build_provenance,
    utc_now_iso,
)
from stock_research.utils.validators import normalize_symbol


async def research_verdict(
    symbol: str,
    composite_score: float | None,
    fundamental_score: float | None = None,
    technical_score: float | None = None,
    analyst_score: float | None = None,
    conviction_score: float | None = None,
    dip_score: float | None = None,
    technical_bias: str = "NEUTRAL",
    current_price: float | None = None,
    target_upside: float | None = None,
    primary_signal: str | None = None,
) -> dict[str, Any]:
    """
    Evaluate the entry verdict for a stock from caller-supplied scores.

    Price and analyst-target upside are looked up on Yahoo Finance when the
    caller does not pass them. A failed lookup is reported as a warning; the
    verdict then falls back to insufficient-data if the price is missing.

    Args:
        symbol: Stock ticker symbol
        composite_score: Aggregate quality score (0-100)
        fundamental_score: Fundamental score (0-100)
        technical_score: Technical score (0-100)
        analyst_score: Analyst score (0-100)
        conviction_score: Long-term quality score (0-100)
        dip_score: Oversold score (0-100)
        technical_bias: BULLISH, BEARISH or NEUTRAL
        current_price: Current price (looked up when omitted)
        target_upside: Percent upside to analyst target (looked up when omitted)
        primary_signal: Signal type shown as a badge (e.g. DIP_OPPORTUNITY)

    Returns:
        Dict with verdict, confidence, reasons, top_reasons, signal and inputs
    """
    start_time = perf_counter()

    try:
        normalized_symbol = normalize_symbol(symbol)
    except ValueError as e:
        return build_error_response(error_type="invalid_symbol", message=str(e), symbol=symbol)

    warnings: list[str] = []
    provenance: dict[str, Any] = {
        "scores": build_provenance(source="caller", as_of=utc_now_iso()),
    }

    if current_price is None or target_upside is None:
        try:
            info, info_prov = await fetch_info_with_provenance(normalized_symbol)
        except ValueError as e:
            return build_error_response(
                error_type="invalid_symbol",
                message=str(e),
                symbol=normalized_symbol,
            )
        except Exception as e:
            warnings.append(f"market_data_unavailable: {e}")
        else:
            looked_up_price = _safe_float(info.get("currentPrice"))
            if looked_up_price is None:
                looked_up_price = _safe_float(info.get("regularMarketPrice"))
            if current_price is None:
                current_price = looked_up_price
            if current_price is None:
                warnings.append("no_current_price")
            elif target_upside is None:
                target_upside = compute_target_upside(
                    current_price, _safe_float(info.get("targetMeanPrice"))
                )
                if target_upside is None:
                    warnings.append("no_analyst_target")
            provenance["price"] = build_provenance(
                as_of=utc_now_iso(),
                market_state=get_market_state()["state"],
                **info_prov,
            )

    rec = StockRecommendation(
        symbol=normalized_symbol,
        current_price=current_price,
        composite_score=composite_score,
        fundamental_score=fundamental_score,
        technical_score=technical_score,
        analyst_score=analyst_score,
        conviction_score=conviction_score,
        dip_score=dip_score,
        technical_bias=technical_bias,
        target_upside=target_upside,
        primary_signal={"type": primary_signal} if primary_signal else None,
    )
    result = evaluate_verdict(rec)

    signal = None
    if rec.primary_signal:
        signal = {"type": primary_signal, **get_signal_config(primary_signal).to_dict()}

    duration_ms = (perf_counter() - start_time) * 1000

    return {
        "meta": build_meta("research_verdict", duration_ms),
        "data_provenance": provenance,
        "symbol": normalized_symbol,
        **result.to_dict(),
        "top_reasons": result.top_reasons(),
        "signal": signal,
        "inputs": rec.to_dict(),
        "warnings": warnings if warnings else None,
    }


def _safe_float(value: Any) -> float | None:
    """Convert to float or return None (NaN becomes None)."""
    if value is None:
        return None
    try:
        result = float(value)
    except (ValueError, TypeError):
        return None
    if math.isnan(result):
        return None
    return result

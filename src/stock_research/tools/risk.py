"""Risk assessment tool."""

import logging
from time import perf_counter
from typing import Any

import pandas as pd

from stock_research.data.yfinance_client import fetch_history, fetch_info_with_provenance
from stock_research.scoring.risk import (
    NEUTRAL_FACTOR,
    RiskAssessmentInput,
    RiskResult,
    evaluate_risk,
    risk_rule_flags,
)
from stock_research.utils.indicators import calculate_atr_percent
from stock_research.utils.provenance import (
    build_error_response,
    build_meta,
    build_provenance,
    utc_now_iso,
)
from stock_research.utils.validators import FetchParams, normalize_symbol

logger = logging.getLogger(__name__)

ATR_PERIOD = 14


async def risk_assessment(symbol: str) -> dict[str, Any]:
    """
    Classify the risk of a stock from its fundamentals and daily volatility.

    Args:
        symbol: Stock ticker symbol

    Returns:
        Dict with risk level, label, badge variant, factors, inputs and rule flags
    """
    start_time = perf_counter()

    try:
        normalized_symbol = normalize_symbol(symbol)
        info, info_prov = await fetch_info_with_provenance(normalized_symbol)
    except ValueError as e:
        return build_error_response(error_type="invalid_symbol", message=str(e), symbol=symbol)
    except Exception as e:
        return build_error_response(
            error_type="data_unavailable",
            message=f"Failed to fetch data: {e}",
            symbol=symbol,
        )

    warnings: list[str] = []

    # Volatility is optional: without history the risk rules simply skip it
    volatility_percent: float | None = None
    last_bar_date: str | None = None
    try:
        df = await fetch_history(FetchParams(symbol=normalized_symbol, period="3mo", interval="1d"))
    except Exception as e:
        logger.info(f"risk_assessment({normalized_symbol}): history unavailable ({e})")
        warnings.append("volatility_unavailable")
    else:
        volatility_percent = calculate_atr_percent(df, ATR_PERIOD)
        if volatility_percent is None:
            warnings.append("insufficient_history_for_atr")
        if len(df) > 0:
            last_bar_date = df["date"].iloc[-1]

    inputs = risk_inputs_from_info(info, volatility_percent)
    result = evaluate_risk(inputs)
    _validate_risk_invariants(result)

    duration_ms = (perf_counter() - start_time) * 1000

    return {
        "meta": build_meta("risk_assessment", duration_ms),
        "data_provenance": {
            "fundamentals": build_provenance(as_of=utc_now_iso(), **info_prov),
            "price": build_provenance(
                source="yfinance",
                as_of=utc_now_iso(),
                last_bar_date=last_bar_date,
                atr_period=ATR_PERIOD,
            ),
        },
        "symbol": normalized_symbol,
        **result.to_dict(),
        "inputs": {
            "beta": inputs.beta,
            "debt_to_equity": inputs.debt_to_equity,
            "net_margin_pct": inputs.net_margin,
            "current_ratio": inputs.current_ratio,
            "volatility_pct": inputs.volatility_percent,
        },
        "rules": risk_rule_flags(inputs),
        "warnings": warnings if warnings else None,
    }


def risk_inputs_from_info(
    info: dict[str, Any],
    volatility_percent: float | None = None,
) -> RiskAssessmentInput:
    """
    Map a yfinance info dict to risk engine inputs.

    yfinance reports debtToEquity in percent (150.0 = 1.5x) and profitMargins
    as a fraction (0.25 = 25%); the engine wants a ratio and a percent.
    """
    debt_to_equity = _safe_float(info.get("debtToEquity"))
    net_margin = _safe_float(info.get("profitMargins"))

    return RiskAssessmentInput(
        beta=_safe_float(info.get("beta")),
        debt_to_equity=round(debt_to_equity / 100, 4) if debt_to_equity is not None else None,
        net_margin=round(net_margin * 100, 2) if net_margin is not None else None,
        current_ratio=_safe_float(info.get("currentRatio")),
        volatility_percent=volatility_percent,
    )


def _validate_risk_invariants(result: RiskResult) -> None:
    """
    Check a risk result against the engine's documented invariants.

    1. There is at least one risk factor
    2. The neutral factor only appears alone
    3. Factors are not duplicated

    Logs warnings for violations rather than raising (production-safe).
    """
    violations: list[str] = []
    factors = list(result.risk_factors)

    if not factors:
        violations.append("risk_factors is empty")
    if NEUTRAL_FACTOR in factors and len(factors) > 1:
        violations.append(f"'{NEUTRAL_FACTOR}' present alongside {len(factors) - 1} other factors")
    if len(set(factors)) != len(factors):
        violations.append(f"duplicate risk factors: {factors}")

    for v in violations:
        logger.warning(f"Risk invariant violation: {v}")


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

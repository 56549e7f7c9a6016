"""Volatility indicators used as risk inputs."""

import numpy as np
import pandas as pd


def calculate_atr(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
    period: int = 14,
) -> pd.Series:
    """
    Calculate Average True Range with Wilder's smoothing.

    Args:
        high: High price series
        low: Low price series
        close: Close price series
        period: ATR period (default: 14)

    Returns:
        ATR series, NaN until `period` bars are available
    """
    prev_close = close.shift(1)

    true_range = pd.concat(
        [high - low, (high - prev_close).abs(), (low - prev_close).abs()],
        axis=1,
    ).max(axis=1)

    return true_range.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()


def calculate_atr_percent(df: pd.DataFrame, period: int = 14) -> float | None:
    """
    Latest ATR as a percentage of the latest close.

    This is the "daily volatility percent" fed to the risk engine.

    Args:
        df: Standardized OHLCV frame (lowercase high/low/close columns)
        period: ATR period (default: 14)

    Returns:
        ATR % rounded to 2 decimals, or None with too little or invalid data
    """
    if df is None or len(df) <= period:
        return None

    high = pd.to_numeric(df["high"], errors="coerce")
    low = pd.to_numeric(df["low"], errors="coerce")
    close = pd.to_numeric(df["close"], errors="coerce")

    atr = calculate_atr(high, low, close, period)
    last_atr = atr.iloc[-1]
    last_close = close.iloc[-1]

    if pd.isna(last_atr) or pd.isna(last_close) or last_close <= 0:
        return None

    pct = float(last_atr) / float(last_close) * 100
    if not np.isfinite(pct):
        return None
    return round(pct, 2)

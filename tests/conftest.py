"""Pytest configuration and fixtures."""

from typing import Any

import pandas as pd
import pytest


@pytest.fixture
def sample_ohlcv_df() -> pd.DataFrame:
    """Sample yfinance-style OHLCV DataFrame for testing."""
    return pd.DataFrame(
        {
            "Date": pd.date_range("2024-01-01", periods=10, freq="D"),
            "Open": [100.0, 101.0, 102.0, 101.5, 103.0, 104.0, 103.5, 105.0, 106.0, 105.5],
            "High": [101.0, 102.5, 103.0, 102.5, 104.5, 105.5, 105.0, 106.5, 107.0, 106.5],
            "Low": [99.5, 100.5, 101.0, 100.5, 102.0, 103.0, 102.5, 104.0, 105.0, 104.5],
            "Close": [100.5, 102.0, 101.5, 102.0, 104.0, 103.5, 104.5, 106.0, 105.5, 106.0],
            "Volume": [1000000] * 10,
        }
    ).set_index("Date")


@pytest.fixture
def sample_ohlcv_df_with_adj_close() -> pd.DataFrame:
    """Sample OHLCV DataFrame with Adj Close column."""
    df = pd.DataFrame(
        {
            "Date": pd.date_range("2024-01-01", periods=10, freq="D"),
            "Open": [100.0, 101.0, 102.0, 101.5, 103.0, 104.0, 103.5, 105.0, 106.0, 105.5],
            "High": [101.0, 102.5, 103.0, 102.5, 104.5, 105.5, 105.0, 106.5, 107.0, 106.5],
            "Low": [99.5, 100.5, 101.0, 100.5, 102.0, 103.0, 102.5, 104.0, 105.0, 104.5],
            "Close": [100.5, 102.0, 101.5, 102.0, 104.0, 103.5, 104.5, 106.0, 105.5, 106.0],
            "Adj Close": [100.0, 101.5, 101.0, 101.5, 103.5, 103.0, 104.0, 105.5, 105.0, 105.5],
            "Volume": [1000000] * 10,
        }
    ).set_index("Date")
    return df


@pytest.fixture
def constant_range_history() -> pd.DataFrame:
    """
    Standardized 30-bar history where every bar spans exactly 2.0 around a
    flat close of 100, so ATR is 2.0 and ATR% is 2.0.
    """
    n = 30
    return pd.DataFrame(
        {
            "date": [d.strftime("%Y-%m-%d") for d in pd.date_range("2024-01-01", periods=n)],
            "open": [100.0] * n,
            "high": [101.0] * n,
            "low": [99.0] * n,
            "close": [100.0] * n,
            "volume": [1000000] * n,
        }
    )


@pytest.fixture
def sample_info() -> dict[str, Any]:
    """yfinance info payload for a large, profitable, low-leverage equity."""
    return {
        "symbol": "AAPL",
        "quoteType": "EQUITY",
        "currentPrice": 200.0,
        "regularMarketPrice": 200.5,
        "targetMeanPrice": 230.0,
        "beta": 1.0,
        "debtToEquity": 150.0,
        "profitMargins": 0.25,
        "currentRatio": 1.1,
        "totalRevenue": 390000000000,
    }

"""OHLCV frame standardization."""

import pandas as pd

CANONICAL_COLUMNS = ["date", "open", "high", "low", "close", "volume"]


def standardize_ohlcv(df: pd.DataFrame) -> pd.DataFrame:
    """
    Standardize a yfinance download to a fixed schema.

    Output columns (always, in this order): date, open, high, low, close, volume.
    Missing columns are filled with NA; 'Adj Close' is dropped.

    Args:
        df: Raw DataFrame from yf.download

    Returns:
        Standardized DataFrame
    """
    df = df.copy()

    # yf.download returns (field, ticker) columns even for one ticker
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)

    if "Adj Close" in df.columns:
        df = df.drop(columns=["Adj Close"])

    df.columns = df.columns.str.lower()
    df = df.reset_index()

    date_cols = [c for c in df.columns if str(c).lower() in ("date", "datetime", "index")]
    if date_cols:
        df = df.rename(columns={date_cols[0]: "date"})

    if "date" in df.columns and pd.api.types.is_datetime64_any_dtype(df["date"]):
        df["date"] = df["date"].dt.strftime("%Y-%m-%d")

    for col in CANONICAL_COLUMNS:
        if col not in df.columns:
            df[col] = pd.NA

    return df[CANONICAL_COLUMNS]

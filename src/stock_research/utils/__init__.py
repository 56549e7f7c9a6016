"""Utility modules."""

from stock_research.utils.indicators import calculate_atr, calculate_atr_percent
from stock_research.utils.ohlcv import standardize_ohlcv
from stock_research.utils.provenance import (
    build_error_response,
    build_meta,
    build_provenance,
    utc_now_iso,
)
from stock_research.utils.rounding import round_half_up
from stock_research.utils.sanitize import sanitize_text
from stock_research.utils.validators import FetchParams, check_rule, normalize_symbol

__all__ = [
    "calculate_atr",
    "calculate_atr_percent",
    "standardize_ohlcv",
    "build_error_response",
    "build_meta",
    "build_provenance",
    "utc_now_iso",
    "round_half_up",
    "sanitize_text",
    "FetchParams",
    "check_rule",
    "normalize_symbol",
]

"""Validation utilities and parameter classes."""

import operator
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

VALID_PERIODS = {"1mo", "3mo", "6mo", "1y", "2y"}
VALID_INTERVALS = {"1d", "1wk"}

# Yahoo symbols: letters, digits, dot, dash, caret, equals (e.g. BRK-B, ^GSPC, CEZ.PR)
_SYMBOL_RE = re.compile(r"^[A-Z0-9.\-^=]{1,20}$")


def normalize_symbol(symbol: str) -> str:
    """
    Uppercase and strip a ticker symbol, rejecting malformed input.

    Raises:
        ValueError: If the symbol is empty or contains unsupported characters
    """
    normalized = (symbol or "").upper().strip()
    if not _SYMBOL_RE.match(normalized):
        raise ValueError(f"Invalid symbol: '{symbol}'")
    return normalized


@dataclass(frozen=True)
class FetchParams:
    """Immutable price history fetch parameters."""

    symbol: str
    period: str
    interval: str
    adjusted: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbol", normalize_symbol(self.symbol))

        period = self.period.lower().strip()
        interval = self.interval.lower().strip()

        if period not in VALID_PERIODS:
            raise ValueError(f"Invalid period '{self.period}'. Must be one of: {VALID_PERIODS}")
        if interval not in VALID_INTERVALS:
            raise ValueError(
                f"Invalid interval '{self.interval}'. Must be one of: {VALID_INTERVALS}"
            )

        object.__setattr__(self, "period", period)
        object.__setattr__(self, "interval", interval)

    def to_yf_kwargs(self) -> dict[str, Any]:
        """Kwargs for yf.download()."""
        return {
            "tickers": self.symbol,
            "period": self.period,
            "interval": self.interval,
            "auto_adjust": self.adjusted,
            "progress": False,
        }


def check_rule(
    value: float | None,
    threshold: float,
    comparator: Callable[[float, float], bool] = operator.gt,
) -> bool | None:
    """
    Check a threshold rule with nullable boolean semantics.

    If value is None, returns None (not False), so a missing input never
    counts as a triggered rule but stays distinguishable from a passed one.

    Args:
        value: The value to check (may be None)
        threshold: The threshold to compare against
        comparator: Comparison function (default: operator.gt)

    Returns:
        True/False if value is not None, None otherwise
    """
    if value is None:
        return None
    return comparator(value, threshold)

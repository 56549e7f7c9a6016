"""Async yfinance client with bounded concurrency, retry logic and an info cache."""

import asyncio
import logging
import math
import os
import random
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypeVar

import pandas as pd
import pytz
import yfinance as yf
from requests.exceptions import HTTPError

from stock_research.data.cache import info_cache
from stock_research.utils.ohlcv import standardize_ohlcv
from stock_research.utils.validators import FetchParams, normalize_symbol

logger = logging.getLogger(__name__)

# Bounded concurrency for yfinance calls
_max_workers = int(os.environ.get("YF_MAX_WORKERS", "4"))
_executor = ThreadPoolExecutor(max_workers=_max_workers)
_fetch_semaphore = asyncio.Semaphore(_max_workers)

# Retry configuration
_max_retries = int(os.environ.get("YF_MAX_RETRIES", "3"))
_base_delay = float(os.environ.get("YF_BASE_DELAY", "1.0"))  # seconds
_max_delay = float(os.environ.get("YF_MAX_DELAY", "30.0"))  # seconds

# Shutdown coordination
shutdown_event = asyncio.Event()

T = TypeVar("T")

# Fields the research tools read. A real equity payload carries at least one;
# crumb-broken partial payloads (401 Invalid Crumb) carry none.
INFO_RESEARCH_SENTINELS: tuple[str, ...] = (
    "beta",
    "debtToEquity",
    "profitMargins",
    "currentRatio",
    "targetMeanPrice",
    "totalRevenue",
)


class ServerShuttingDownError(Exception):
    """Raised when server is shutting down."""


class YFinanceRetryError(Exception):
    """Raised when yfinance fails after all retries."""

    def __init__(self, message: str, last_error: Exception | None = None):
        super().__init__(message)
        self.last_error = last_error


class YFinanceIncompleteInfoError(RuntimeError):
    """Raised when yfinance returns an info payload without research fields."""

    def __init__(self, symbol: str, *, key_count: int, quote_type: str | None):
        super().__init__(
            f"Incomplete yfinance info for {symbol}: keys={key_count}, quoteType={quote_type}"
        )
        self.symbol = symbol
        self.key_count = key_count
        self.quote_type = quote_type


@dataclass(frozen=True)
class InfoCompleteness:
    """Result of info completeness assessment."""

    is_incomplete: bool
    key_count: int
    quote_type: str | None
    sentinel_values_present: int


def _has_value(v: Any) -> bool:
    """
    Check if a value is truly present (not None, NaN, or empty string).

    yfinance uses float("nan") for some missing numerics.
    """
    if v is None:
        return False
    if isinstance(v, float) and math.isnan(v):
        return False
    if isinstance(v, str) and v.strip() == "":
        return False
    return True


def assess_info_completeness(info: dict[str, Any]) -> InfoCompleteness:
    """
    Assess whether an info dict carries the fields the research tools need.

    Only EQUITY (or unknown) quote types are held to this; ETFs and funds
    legitimately lack balance-sheet fields.
    """
    if not isinstance(info, dict) or not info:
        return InfoCompleteness(
            is_incomplete=True, key_count=0, quote_type=None, sentinel_values_present=0
        )

    quote_type_raw = info.get("quoteType")
    quote_type = str(quote_type_raw).upper() if quote_type_raw is not None else None
    enforce = quote_type in (None, "", "EQUITY")

    present = sum(1 for k in INFO_RESEARCH_SENTINELS if _has_value(info.get(k)))

    return InfoCompleteness(
        is_incomplete=enforce and present == 0,
        key_count=len(info),
        quote_type=quote_type,
        sentinel_values_present=present,
    )


def _is_retryable_error(error: Exception) -> tuple[bool, int]:
    """
    Check if an error is transient.

    Returns:
        Tuple of (is_retryable, max_retries_for_this_error). 401 Invalid Crumb
        and incomplete payloads rarely recover, so they get fewer retries.
    """
    if isinstance(error, YFinanceIncompleteInfoError):
        return (True, 2)

    if isinstance(error, HTTPError) and getattr(error, "response", None) is not None:
        status_code = error.response.status_code
        if status_code == 401:
            return (True, 1)
        if status_code == 429 or 500 <= status_code < 600:
            return (True, _max_retries)

    error_str = str(error).lower()

    if "401" in error_str or "invalid crumb" in error_str:
        return (True, 2)

    retryable_patterns = ("rate limit", "too many requests", "connection", "timeout", "temporary")
    if any(pattern in error_str for pattern in retryable_patterns):
        return (True, _max_retries)

    return (False, 0)


def _calculate_backoff(attempt: int) -> float:
    """Exponential backoff with +-25% jitter, capped at the max delay."""
    delay = _base_delay * (2**attempt)
    delay += delay * 0.25 * (2 * random.random() - 1)
    return min(delay, _max_delay)


@dataclass
class RetryResult:
    """Result of a retried call with provenance."""

    result: Any
    attempts: int
    total_backoff_seconds: float
    incomplete_detected: bool = False

    def to_provenance(self) -> dict[str, Any]:
        return {
            "source": "yfinance",
            "attempts": self.attempts,
            "total_backoff_seconds": self.total_backoff_seconds,
            "incomplete_detected": self.incomplete_detected,
        }


async def _retry_with_backoff(
    operation_name: str,
    sync_func: Callable[[], T],
    max_retries: int = _max_retries,
) -> RetryResult:
    """
    Run a blocking function in the executor, retrying transient failures.

    Args:
        operation_name: Name for logging (e.g., "fetch_info(AAPL)")
        sync_func: Blocking function to execute
        max_retries: Maximum number of retry attempts

    Returns:
        RetryResult with result and provenance info

    Raises:
        YFinanceRetryError: If all retries exhausted
        ServerShuttingDownError: If server is shutting down
        Exception: Non-retryable errors from sync_func propagate unchanged
    """
    total_backoff = 0.0
    incomplete_detected = False

    for attempt in range(max_retries + 1):
        if shutdown_event.is_set():
            raise ServerShuttingDownError("Server is shutting down")

        try:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(_executor, sync_func)
            return RetryResult(
                result=result,
                attempts=attempt + 1,
                total_backoff_seconds=round(total_backoff, 2),
                incomplete_detected=incomplete_detected,
            )
        except Exception as e:
            if isinstance(e, YFinanceIncompleteInfoError):
                incomplete_detected = True

            is_retryable, error_max_retries = _is_retryable_error(e)
            if not is_retryable:
                raise

            effective_max_retries = min(max_retries, error_max_retries)
            if attempt >= effective_max_retries:
                logger.warning(
                    f"{operation_name}: Failed after {attempt + 1} attempts "
                    f"(limit={effective_max_retries + 1}). Last error: {e}"
                )
                raise YFinanceRetryError(
                    f"Failed after {attempt + 1} attempts: {e}",
                    last_error=e,
                ) from e

            delay = _calculate_backoff(attempt)
            total_backoff += delay
            logger.info(
                f"{operation_name}: Attempt {attempt + 1} failed ({e}). "
                f"Retrying in {delay:.1f}s..."
            )
            await asyncio.sleep(delay)

    raise YFinanceRetryError(f"Failed after {max_retries + 1} attempts")


async def fetch_history(params: FetchParams) -> pd.DataFrame:
    """
    Fetch standardized daily price history.

    Raises:
        ServerShuttingDownError: If server is shutting down
        YFinanceRetryError: If all retries exhausted for retryable errors
        ValueError: If no data is returned for the symbol
    """
    if shutdown_event.is_set():
        raise ServerShuttingDownError("Server is shutting down")

    def _fetch() -> pd.DataFrame:
        df = yf.download(**params.to_yf_kwargs())
        if df is None or df.empty:
            raise ValueError(f"No data returned for {params.symbol}")
        return standardize_ohlcv(df)

    async with _fetch_semaphore:
        retry_result = await _retry_with_backoff(f"fetch_history({params.symbol})", _fetch)
        return retry_result.result


async def fetch_info_with_provenance(symbol: str) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Fetch ticker info (price, targets, fundamentals), served from cache when fresh.

    Returns:
        Tuple of (info_dict, provenance_dict)

    Raises:
        ServerShuttingDownError: If server is shutting down
        YFinanceRetryError: If all retries exhausted for retryable errors
        ValueError: If symbol is invalid
    """
    if shutdown_event.is_set():
        raise ServerShuttingDownError("Server is shutting down")

    normalized_symbol = normalize_symbol(symbol)

    cached = info_cache.get(normalized_symbol)
    if cached is not None:
        logger.debug(f"fetch_info({normalized_symbol}): cache hit")
        meta = info_cache.get_metadata(normalized_symbol) or {}
        return cached, {"source": "yfinance", "cache_hit": True, "stored_at": meta.get("stored_at")}

    def _fetch() -> dict[str, Any]:
        info = yf.Ticker(normalized_symbol).info
        if not info:
            raise ValueError(f"Invalid symbol: {symbol}")

        completeness = assess_info_completeness(info)
        if completeness.is_incomplete:
            raise YFinanceIncompleteInfoError(
                normalized_symbol,
                key_count=completeness.key_count,
                quote_type=completeness.quote_type,
            )
        return info

    async with _fetch_semaphore:
        retry_result = await _retry_with_backoff(f"fetch_info({normalized_symbol})", _fetch)

    info = retry_result.result
    info_cache.store(normalized_symbol, info)

    provenance = retry_result.to_provenance()
    provenance["cache_hit"] = False
    return info, provenance


async def fetch_info(symbol: str) -> dict[str, Any]:
    """Fetch ticker info without provenance. See fetch_info_with_provenance."""
    info, _ = await fetch_info_with_provenance(symbol)
    return info


async def fetch_ticker(symbol: str) -> yf.Ticker:
    """
    Get a yfinance Ticker for news and recommendation lookups.

    Raises:
        ServerShuttingDownError: If server is shutting down
        YFinanceRetryError: If all retries exhausted for retryable errors
        ValueError: If symbol is invalid
    """
    if shutdown_event.is_set():
        raise ServerShuttingDownError("Server is shutting down")

    normalized_symbol = normalize_symbol(symbol)

    async with _fetch_semaphore:
        retry_result = await _retry_with_backoff(
            f"fetch_ticker({normalized_symbol})",
            lambda: yf.Ticker(normalized_symbol),
        )
        return retry_result.result


def get_market_state(tz: str = "America/New_York") -> dict[str, str]:
    """
    Determine US market state. Clock-based only (no holiday calendar).

    Returns:
        Dict with state, method, and checked_at timestamp
    """
    eastern = pytz.timezone(tz)
    now = datetime.now(eastern)

    if now.weekday() >= 5:
        state = "closed"
    else:
        minutes = now.hour * 60 + now.minute
        if minutes < 4 * 60:
            state = "closed"
        elif minutes < 9 * 60 + 30:
            state = "pre_market"
        elif minutes < 16 * 60:
            state = "regular"
        elif minutes < 20 * 60:
            state = "after_hours"
        else:
            state = "closed"

    return {
        "state": state,
        "method": "clock_only_no_holidays",
        "checked_at": now.isoformat(),
    }


async def shutdown_executor() -> None:
    """Cleanup on server shutdown."""
    shutdown_event.set()
    _executor.shutdown(wait=False, cancel_futures=True)

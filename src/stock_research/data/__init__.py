"""Data layer for fetching and caching stock data."""

from stock_research.data.cache import InfoCache, info_cache
from stock_research.data.yfinance_client import (
    INFO_RESEARCH_SENTINELS,
    InfoCompleteness,
    RetryResult,
    ServerShuttingDownError,
    YFinanceIncompleteInfoError,
    YFinanceRetryError,
    assess_info_completeness,
    fetch_history,
    fetch_info,
    fetch_info_with_provenance,
    fetch_ticker,
    get_market_state,
    shutdown_executor,
)

__all__ = [
    # Cache
    "InfoCache",
    "info_cache",
    # yfinance
    "INFO_RESEARCH_SENTINELS",
    "InfoCompleteness",
    "RetryResult",
    "ServerShuttingDownError",
    "YFinanceIncompleteInfoError",
    "YFinanceRetryError",
    "assess_info_completeness",
    "fetch_history",
    "fetch_info",
    "fetch_info_with_provenance",
    "fetch_ticker",
    "get_market_state",
    "shutdown_executor",
]

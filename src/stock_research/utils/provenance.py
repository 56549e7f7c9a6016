"""Response metadata, provenance and error envelopes."""

from datetime import datetime, timezone
from typing import Any

from stock_research import SCHEMA_VERSION, SERVER_VERSION


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with a trailing Z."""
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


def build_meta(tool: str, duration_ms: float | None = None) -> dict[str, Any]:
    """
    Build the metadata block every tool response carries.

    Args:
        tool: Name of the tool producing this response
        duration_ms: Execution time in milliseconds (optional)

    Returns:
        Metadata dict with version info
    """
    meta: dict[str, Any] = {
        "server_version": SERVER_VERSION,
        "schema_version": SCHEMA_VERSION,
        "tool": tool,
    }
    if duration_ms is not None:
        meta["duration_ms"] = round(duration_ms, 1)
    return meta


def build_provenance(
    source: str,
    as_of: datetime | str | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Build the provenance block for one data source.

    Args:
        source: Data source name (e.g., "yfinance", "caller")
        as_of: Timestamp of data freshness
        **kwargs: Additional provenance fields (attempts, cache_hit, ...)

    Returns:
        Provenance dict, always with a warnings list
    """
    prov: dict[str, Any] = {"source": source}

    if isinstance(as_of, datetime):
        prov["as_of"] = as_of.isoformat()
    elif as_of is not None:
        prov["as_of"] = as_of

    prov.update(kwargs)
    prov.setdefault("warnings", [])
    return prov


def build_error_response(
    error_type: str,
    message: str,
    symbol: str | None = None,
    retry_after_seconds: int | None = None,
) -> dict[str, Any]:
    """
    Build a standardized error response.

    Args:
        error_type: invalid_symbol, data_unavailable, insufficient_data or rate_limited
        message: Human-readable error message
        symbol: Symbol that caused the error (if applicable)
        retry_after_seconds: Seconds to wait before retry (for rate limiting)

    Returns:
        Error response dict
    """
    response: dict[str, Any] = {
        "error": True,
        "error_type": error_type,
        "message": message,
        "meta": build_meta("error"),
    }

    if symbol is not None:
        response["symbol"] = symbol

    if retry_after_seconds is not None:
        response["retry_after_seconds"] = retry_after_seconds

    return response

"""Disk cache for yfinance info payloads."""

import os
from datetime import datetime, timezone
from typing import Any

import diskcache


class InfoCache:
    """
    Caches ticker info dicts per symbol with a TTL.

    The verdict, risk and consensus tools all read the same info payload;
    the cache lets them share one fetch.
    """

    def __init__(self, cache_dir: str | None = None, ttl: int | None = None):
        if cache_dir is None:
            cache_dir = os.environ.get("CACHE_DIR", ".cache/info")
        self.cache: diskcache.Cache = diskcache.Cache(cache_dir)
        self._default_ttl = ttl if ttl is not None else int(os.environ.get("CACHE_TTL", "300"))

    @staticmethod
    def key_for(symbol: str) -> str:
        """Canonical cache key."""
        return f"info://{symbol.upper().strip()}"

    def store(self, symbol: str, info: dict[str, Any], ttl: int | None = None) -> str:
        """
        Store an info payload, return its key.

        Args:
            symbol: Ticker symbol
            info: yfinance info dict
            ttl: Cache TTL in seconds (default: CACHE_TTL)

        Returns:
            Cache key
        """
        key = self.key_for(symbol)
        entry: dict[str, Any] = {
            "info": info,
            "stored_at": datetime.now(timezone.utc).isoformat(),
            "key_count": len(info),
        }
        expire = ttl if ttl is not None else self._default_ttl
        self.cache.set(key, entry, expire=expire)
        return key

    def get(self, symbol: str) -> dict[str, Any] | None:
        """Cached info dict, or None if missing or expired."""
        entry = self.cache.get(self.key_for(symbol))
        if not entry:
            return None
        return entry["info"]

    def get_metadata(self, symbol: str) -> dict[str, Any] | None:
        """Cache metadata without the payload."""
        entry = self.cache.get(self.key_for(symbol))
        if not entry:
            return None
        return {"stored_at": entry["stored_at"], "key_count": entry["key_count"]}

    def exists(self, symbol: str) -> bool:
        return self.key_for(symbol) in self.cache

    def clear(self) -> None:
        self.cache.clear()


# Global instance
info_cache = InfoCache()

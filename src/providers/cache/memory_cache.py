"""In-memory cache provider using cachetools.TTLCache.

Suitable for a single process.  ``TTLCache`` already drops expired entries
lazily on access; :meth:`MemoryCacheProvider.purge_expired` lets a
background task sweep them out between requests as well.

Swap in a Redis adapter implementing ICacheProvider for multi-worker
deployments.
"""

from __future__ import annotations

import time
from typing import Any, Callable

import structlog
from cachetools import TTLCache

from src.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """In-memory TTL cache backed by ``cachetools.TTLCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    ttl:
        Time-to-live in seconds applied to every entry.
    timer:
        Monotonic clock used by ``TTLCache``; injectable for tests.
    """

    def __init__(
        self,
        max_size: int = 500,
        ttl: int = 300,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = ttl
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl, timer=timer)

    @property
    def ttl(self) -> int:
        return self._default_ttl

    def __len__(self) -> int:
        return len(self._cache)

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Retrieve the cached value for *key*, or ``None`` if missing/expired."""
        value = self._cache.get(key)
        if value is not None:
            logger.debug("cache_hit", key=key)
        else:
            logger.debug("cache_miss", key=key)
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key*.

        ``TTLCache`` applies one TTL to every entry, so a per-item *ttl*
        different from the default is ignored (and logged).
        """
        if ttl is not None and ttl != self._default_ttl:
            logger.debug("cache_ttl_override_ignored", key=key, ttl=ttl)
        self._cache[key] = value
        logger.debug("cache_set", key=key)

    async def delete(self, key: str) -> None:
        """Remove *key* from the cache (no-op if absent)."""
        self._cache.pop(key, None)
        logger.debug("cache_delete", key=key)

    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""
        return key in self._cache

    async def purge_expired(self) -> int:
        """Evict every expired entry; returns the number removed."""
        removed = len(self._cache.expire())
        if removed:
            logger.debug("cache_purged", removed=removed)
        return removed

"""TTL cache of search results keyed by a rounded request fingerprint.

The fingerprint rounds latitude/longitude to two decimals (roughly 1 km
buckets) and joins them with the radius, the sorted category set and the
lower-cased keyword, plus the location name, party subcategory and any
explicit date range.  Page, limit and excluded ids are *not* part of the
key: one entry holds the full filtered, sorted list and every page of the
same search is cut from it.

Entries are :class:`~src.models.search.CacheEntry` objects, written once
and replaced wholesale.  Expiry is checked on every lookup against the
injected clock, and a periodic sweep (:meth:`EventSearchCache.sweep`)
clears the backing store between requests.
"""

from __future__ import annotations

import time
from typing import Any, Callable

import structlog

from src.interfaces.cache_provider import ICacheProvider
from src.models.event import Event
from src.models.search import CacheEntry, SearchRequest
from src.utils.logging import get_logger

DEFAULT_TTL_SECONDS = 300
_KEY_PREFIX = "search:"


def _rounded(value: float | None) -> str:
    if value is None:
        return ""
    # ``+ 0.0`` folds -0.0 into 0.0 so both hemispheres of zero share a bucket.
    return f"{round(value, 2) + 0.0:.2f}"


class EventSearchCache:
    """Search-result cache over any :class:`ICacheProvider`.

    Parameters
    ----------
    cache:
        Backing key/value store.
    ttl_seconds:
        Entry lifetime; lookups older than this are treated as misses and
        evicted.
    clock:
        Wall-clock seconds, injectable for tests.
    """

    def __init__(
        self,
        cache: ICacheProvider,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._cache = cache
        self._ttl = ttl_seconds
        self._clock = clock
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    # ------------------------------------------------------------------
    # Fingerprints
    # ------------------------------------------------------------------

    @staticmethod
    def fingerprint_fields(request: SearchRequest) -> dict[str, Any]:
        """The normalized request fields that identify a cache entry."""
        return {
            "lat": _rounded(request.latitude),
            "lon": _rounded(request.longitude),
            "radius": f"{request.radius:g}",
            "categories": ",".join(sorted(set(request.categories))),
            "keyword": (request.keyword or "").lower(),
            "location": (request.location or "").lower(),
            "subcategory": request.party_subcategory.value if request.party_subcategory else "",
            "from": request.date_from.isoformat() if request.date_from else "",
            "to": request.date_to.isoformat() if request.date_to else "",
        }

    @classmethod
    def fingerprint(cls, request: SearchRequest) -> str:
        """Deterministic cache key for *request*."""
        fields = cls.fingerprint_fields(request)
        return _KEY_PREFIX + "|".join(f"{name}={value}" for name, value in fields.items())

    # ------------------------------------------------------------------
    # Reads / writes
    # ------------------------------------------------------------------

    async def get_entry(self, fingerprint: str) -> CacheEntry | None:
        """Return the live entry for *fingerprint*, evicting it if expired."""
        entry = await self._cache.get(fingerprint)
        if entry is None:
            self._logger.debug("search_cache_miss", key=fingerprint)
            return None
        if not isinstance(entry, CacheEntry):
            self._logger.warning("search_cache_foreign_value", key=fingerprint)
            await self._cache.delete(fingerprint)
            return None

        age = self._clock() - entry.timestamp
        if age > self._ttl:
            self._logger.debug("search_cache_expired", key=fingerprint, age_s=round(age, 1))
            await self._cache.delete(fingerprint)
            return None

        self._logger.debug("search_cache_hit", key=fingerprint, events=len(entry.events))
        return entry

    async def get(self, fingerprint: str) -> list[Event] | None:
        """Events cached under *fingerprint*, or ``None`` on a miss."""
        entry = await self.get_entry(fingerprint)
        return list(entry.events) if entry is not None else None

    async def put(
        self,
        fingerprint: str,
        events: list[Event],
        *,
        request_fingerprint: dict[str, Any] | None = None,
        query_used: str = "",
        provider: str = "rapidapi",
        fetch_window: int = 0,
        source_count: int = 0,
    ) -> CacheEntry:
        """Store *events* under *fingerprint*, replacing any previous entry."""
        entry = CacheEntry(
            key=fingerprint,
            timestamp=self._clock(),
            events=list(events),
            request_fingerprint=request_fingerprint or {},
            query_used=query_used,
            provider=provider,
            fetch_window=fetch_window,
            source_count=source_count,
        )
        await self._cache.set(fingerprint, entry, ttl=self._ttl)
        self._logger.debug("search_cache_put", key=fingerprint, events=len(events))
        return entry

    async def sweep(self) -> int:
        """Drop expired entries from the backing store."""
        removed = await self._cache.purge_expired()
        if removed:
            self._logger.info("search_cache_swept", removed=removed)
        return removed

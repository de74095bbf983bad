"""Search orchestrator: cache -> retriever -> normalize -> filter -> paginate.

Every request walks the phase machine described in
:mod:`src.models.pipeline` and always ends in a response.  Provider
failures never escape :meth:`SearchOrchestrator.search`; they are
reported per backend in ``sourceStats``.

ARCHITECTURE NOTE:
    The cache stores the *filtered and sorted* event list for a request
    fingerprint, before id exclusion and before pagination.  Every page and
    every exclusion list of the same search is therefore served from one
    entry.  An entry that was fetched with a smaller provider window than
    the current page needs is treated as a miss.

    Concurrent misses on the same fingerprint are coalesced through
    :class:`~src.utils.concurrency.SingleFlight`: one caller fetches and
    filters, the others wait for the shared result and then apply their
    own exclusion and pagination.  A waiter whose page needs a larger
    provider window than the shared fetch used runs its own fetch, keyed
    on the window, and a cache write never replaces an entry fetched with
    a larger window.

    Results from the fallback backend are re-normalized and filtered like
    primary results but never cached, so the next request retries the
    primary provider.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

import structlog

from src.interfaces.event_provider import IEventProvider
from src.interfaces.fallback_backend import IFallbackSearchBackend
from src.models.event import Event
from src.models.pipeline import SearchPhase
from src.models.search import (
    FetchResult,
    SearchMeta,
    SearchRequest,
    SearchResponse,
    SourceStat,
)
from src.services.geo_date_filter import GeoDateFilter
from src.services.normalizer import EventNormalizer
from src.services.query_builder import build_search_query, provider_window
from src.services.search_cache import EventSearchCache
from src.utils.concurrency import SingleFlight
from src.utils.dates import to_iso
from src.utils.errors import EventSearchError, SearchValidationError
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.pipeline.event_details import EventDetailPipeline


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class _PhaseTrace:
    """Ordered record of the phases one request passed through."""

    def __init__(self, logger: structlog.BoundLogger, fingerprint: str = "") -> None:
        self._logger = logger
        self._fingerprint = fingerprint
        self.phases: list[SearchPhase] = []

    def enter(self, phase: SearchPhase) -> None:
        self.phases.append(phase)
        self._logger.debug("search_phase", phase=phase.value, key=self._fingerprint)

    def extend(self, phases: list[SearchPhase]) -> None:
        for phase in phases:
            self.enter(phase)


@dataclass
class _Retrieval:
    """Shared outcome of one fetch, handed to every coalesced caller."""

    events: list[Event]
    source_stats: dict[str, SourceStat]
    query_used: str
    provider: str
    cacheable: bool
    fetch_window: int = 0
    phases: list[SearchPhase] = field(default_factory=list)
    cached: bool = False


class SearchOrchestrator:
    """Runs one search request end to end.

    Parameters
    ----------
    provider:
        Primary retriever.
    normalizer:
        Turns raw records (and fallback events) into canonical events.
    geo_filter:
        Category, radius and date filters plus the date sort.
    cache:
        Search-result cache.
    fallback:
        Optional secondary backend used when the primary fetch fails.
    details:
        Optional detail pipeline seeded with every normalized event.
    coalesce:
        Deduplicate concurrent misses on the same fingerprint.
    overfetch_factor, max_limit:
        Provider window tuning, shared with the retriever.
    now:
        Clock for ``meta.timestamp``.
    timer:
        Monotonic clock for ``meta.executionTimeMs``.
    """

    def __init__(
        self,
        provider: IEventProvider,
        normalizer: EventNormalizer,
        geo_filter: GeoDateFilter,
        cache: EventSearchCache,
        fallback: IFallbackSearchBackend | None = None,
        details: EventDetailPipeline | None = None,
        coalesce: bool = True,
        overfetch_factor: int = 2,
        max_limit: int = 200,
        now: Callable[[], datetime] = _utc_now,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._provider = provider
        self._normalizer = normalizer
        self._filter = geo_filter
        self._cache = cache
        self._fallback = fallback
        self._details = details
        self._coalesce = coalesce
        self._overfetch_factor = overfetch_factor
        self._max_limit = max_limit
        self._now = now
        self._timer = timer
        self._flight: SingleFlight[_Retrieval] = SingleFlight()
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def search(self, request: SearchRequest) -> SearchResponse:
        """Answer *request*; never raises :class:`EventSearchError`."""
        started = self._timer()
        provider_name = self._provider.get_provider_name()
        fingerprint = self._cache.fingerprint(request)
        trace = _PhaseTrace(self._logger, fingerprint)
        trace.enter(SearchPhase.IDLE)

        try:
            request.validate_for_search()
        except SearchValidationError as exc:
            self._logger.info("search_request_invalid", error=exc.message)
            trace.enter(SearchPhase.VALIDATION_FAILED)
            return self._respond(
                request,
                [],
                total=0,
                source_stats={provider_name: SourceStat(count=0, error=exc.message)},
                query_used="",
                cache_hit=False,
                trace=trace,
                started=started,
            )

        window = provider_window(request, self._overfetch_factor, self._max_limit)

        trace.enter(SearchPhase.CACHE_CHECK)
        entry = await self._cache.get_entry(fingerprint)
        if entry is not None and entry.fetch_window >= window:
            trace.enter(SearchPhase.CACHE_HIT)
            visible = self._filter.exclude(entry.events, request.exclude_ids)
            trace.enter(SearchPhase.PAGINATING)
            return self._respond(
                request,
                self.paginate(visible, request.page, request.limit),
                total=len(visible),
                source_stats={entry.provider: SourceStat(count=entry.source_count)},
                query_used=entry.query_used,
                cache_hit=True,
                trace=trace,
                started=started,
            )
        if entry is not None:
            self._logger.debug(
                "search_cache_window_too_small",
                key=fingerprint,
                cached=entry.fetch_window,
                needed=window,
            )

        trace.enter(SearchPhase.CACHE_MISS)
        retrieval = await self._shared_retrieve(fingerprint, request, window)
        trace.extend(retrieval.phases)
        if retrieval.fetch_window < window:
            # Joined a shallower page's fetch; it cannot fill this page.
            self._logger.debug(
                "search_shared_window_too_small",
                key=fingerprint,
                shared=retrieval.fetch_window,
                needed=window,
            )
            retrieval = await self._shared_retrieve(f"{fingerprint}#{window}", request, window)
            trace.extend(retrieval.phases)

        visible = self._filter.exclude(retrieval.events, request.exclude_ids)
        trace.enter(SearchPhase.PAGINATING)
        page_events = self.paginate(visible, request.page, request.limit)

        # Coalesced callers share one retrieval; only the first one writes it.
        if retrieval.cacheable and not retrieval.cached:
            retrieval.cached = True
            await self._store(fingerprint, request, retrieval, trace)

        return self._respond(
            request,
            page_events,
            total=len(visible),
            source_stats=dict(retrieval.source_stats),
            query_used=retrieval.query_used,
            cache_hit=False,
            trace=trace,
            started=started,
        )

    @staticmethod
    def paginate(events: list[Event], page: int, limit: int) -> list[Event]:
        """Slice one page out of *events* (pages are 1-based)."""
        start = (page - 1) * limit
        return events[start:start + limit]

    # ------------------------------------------------------------------
    # Retrieval (shared between coalesced callers)
    # ------------------------------------------------------------------

    async def _shared_retrieve(self, key: str, request: SearchRequest, window: int) -> _Retrieval:
        if self._coalesce:
            return await self._flight.run(key, lambda: self._retrieve(request, window))
        return await self._retrieve(request, window)

    async def _store(
        self,
        fingerprint: str,
        request: SearchRequest,
        retrieval: _Retrieval,
        trace: _PhaseTrace,
    ) -> None:
        current = await self._cache.get_entry(fingerprint)
        if current is not None and current.fetch_window > retrieval.fetch_window:
            self._logger.debug("search_cache_put_skipped", key=fingerprint, kept=current.fetch_window)
            return
        trace.enter(SearchPhase.CACHE_PUT)
        await self._cache.put(
            fingerprint,
            retrieval.events,
            request_fingerprint=self._cache.fingerprint_fields(request),
            query_used=retrieval.query_used,
            provider=retrieval.provider,
            fetch_window=retrieval.fetch_window,
            source_count=retrieval.source_stats[retrieval.provider].count,
        )

    async def _retrieve(self, request: SearchRequest, window: int) -> _Retrieval:
        phases = [SearchPhase.FETCHING]
        provider_name = self._provider.get_provider_name()
        result = await self._fetch_primary(request)

        if result.ok:
            phases.append(SearchPhase.NORMALIZING)
            normalized = self._normalizer.normalize_batch(result.raw_events)
            # Classification runs inside normalization, one record at a time.
            phases.append(SearchPhase.CLASSIFYING)
            await self._seed_details(normalized)

            phases.append(SearchPhase.FILTERING)
            filtered = self._filter_events(normalized, request)
            phases.append(SearchPhase.SORTING)
            ordered = self._filter.sort_by_date(filtered)

            self._logger.info(
                "search_fetch_processed",
                provider=provider_name,
                raw=len(result.raw_events),
                normalized=len(normalized),
                kept=len(ordered),
            )
            return _Retrieval(
                events=ordered,
                source_stats={provider_name: SourceStat(count=len(normalized))},
                query_used=result.query_used,
                provider=provider_name,
                cacheable=True,
                fetch_window=window,
                phases=phases,
            )

        error = result.error
        stats = {provider_name: SourceStat(count=0, error=error.message if error else "Unknown error")}
        phases.append(SearchPhase.FALLBACK)
        events, query_used = await self._run_fallback(request, stats, result.query_used)
        return _Retrieval(
            events=events,
            source_stats=stats,
            query_used=query_used,
            provider=provider_name,
            cacheable=False,
            fetch_window=window,
            phases=phases,
        )

    async def _fetch_primary(self, request: SearchRequest) -> FetchResult:
        try:
            return await self._provider.fetch(request)
        except EventSearchError as exc:
            # Providers report failures in the result; this covers one that raised anyway.
            self._logger.warning("search_provider_raised", error=str(exc))
            return FetchResult(
                error=exc,
                query_used=build_search_query(request),
                provider=self._provider.get_provider_name(),
            )

    async def _run_fallback(
        self,
        request: SearchRequest,
        stats: dict[str, SourceStat],
        query_used: str,
    ) -> tuple[list[Event], str]:
        """Query the fallback backend, recording its outcome in *stats*."""
        if self._fallback is None or not self._fallback.is_available():
            self._logger.warning("search_fallback_unavailable")
            return [], query_used

        fallback_name = self._fallback.get_provider_name()
        self._logger.info("search_fallback_started", backend=fallback_name)
        try:
            response = await self._fallback.search(request)
        except EventSearchError as exc:
            self._logger.error("search_fallback_failed", backend=fallback_name, error=exc.message)
            stats[fallback_name] = SourceStat(count=0, error=exc.message)
            return [], query_used

        normalized = self._normalizer.normalize_batch(response.events)
        await self._seed_details(normalized)
        ordered = self._filter.sort_by_date(self._filter_events(normalized, request))
        stats[fallback_name] = SourceStat(count=len(normalized))
        self._logger.info("search_fallback_complete", backend=fallback_name, kept=len(ordered))
        return ordered, response.query_used or query_used

    def _filter_events(self, events: list[Event], request: SearchRequest) -> list[Event]:
        kept = self._filter.filter_categories(events, request)
        kept = self._filter.filter_radius(kept, request)
        return self._filter.filter_dates(kept, request)

    async def _seed_details(self, events: list[Event]) -> None:
        if self._details is not None and events:
            await self._details.remember(events)

    # ------------------------------------------------------------------
    # Response assembly
    # ------------------------------------------------------------------

    def _respond(
        self,
        request: SearchRequest,
        page_events: list[Event],
        *,
        total: int,
        source_stats: dict[str, SourceStat],
        query_used: str,
        cache_hit: bool,
        trace: _PhaseTrace,
        started: float,
    ) -> SearchResponse:
        trace.enter(SearchPhase.RESPOND)
        elapsed_ms = round((self._timer() - started) * 1000, 2)
        self._logger.info(
            "search_complete",
            total=total,
            returned=len(page_events),
            page=request.page,
            cache_hit=cache_hit,
            duration_ms=elapsed_ms,
        )
        return SearchResponse(
            events=page_events,
            source_stats=source_stats,
            meta=SearchMeta(
                timestamp=to_iso(self._now()),
                total_events=total,
                page=request.page,
                limit=request.limit,
                has_more=total > request.page * request.limit,
                execution_time_ms=elapsed_ms,
                query_used=query_used,
                cache_hit=cache_hit,
                phases=[phase.value for phase in trace.phases],
            ),
        )

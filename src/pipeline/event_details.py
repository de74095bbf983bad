"""Single-event lookup backed by a short-lived event cache.

Search results seed the cache through :meth:`EventDetailPipeline.remember`,
so opening an event that was just listed costs no provider call.  A miss
goes to the provider's details endpoint and the normalized result is
cached under both the requested id and the canonical id.
"""

from __future__ import annotations

import structlog

from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.event_provider import IEventProvider
from src.models.event import Event
from src.services.normalizer import EventNormalizer
from src.utils.errors import EventSearchError
from src.utils.logging import get_logger

_KEY_PREFIX = "event:"


class EventDetailPipeline:
    """Resolves one event id to a canonical :class:`Event`."""

    def __init__(
        self,
        provider: IEventProvider,
        normalizer: EventNormalizer,
        cache: ICacheProvider,
        ttl: int = 300,
    ) -> None:
        self._provider = provider
        self._normalizer = normalizer
        self._cache = cache
        self._ttl = ttl
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @staticmethod
    def cache_key(event_id: str) -> str:
        return f"{_KEY_PREFIX}{event_id}"

    async def get_event(self, event_id: str) -> Event | None:
        """Return the event for *event_id*, or ``None`` when it cannot be found.

        Provider failures are logged and reported as ``None``.
        """
        event_id = (event_id or "").strip()
        if not event_id:
            return None

        cached = await self._cache.get(self.cache_key(event_id))
        if isinstance(cached, Event):
            self._logger.debug("event_detail_cache_hit", event_id=event_id)
            return cached

        try:
            raw = await self._provider.fetch_details(event_id)
        except EventSearchError as exc:
            self._logger.warning(
                "event_detail_fetch_failed",
                event_id=event_id,
                error_type=type(exc).__name__,
                error=exc.message,
            )
            return None
        if raw is None:
            self._logger.info("event_detail_not_found", event_id=event_id)
            return None

        normalized = self._normalizer.normalize_batch([raw])
        if not normalized:
            self._logger.warning("event_detail_unusable_record", event_id=event_id)
            return None

        event = normalized[0]
        await self.remember([event])
        if event.id != event_id:
            await self._cache.set(self.cache_key(event_id), event, ttl=self._ttl)
        return event

    async def remember(self, events: list[Event]) -> None:
        """Cache *events* by id for later detail lookups."""
        for event in events:
            await self._cache.set(self.cache_key(event.id), event, ttl=self._ttl)

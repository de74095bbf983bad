"""Radius, date, category and exclusion filters plus the date sort.

Every stage takes and returns a list of canonical events and never
mutates its input.  Events that cannot be tested by a stage (no
coordinates, no parsable date) are passed through rather than dropped.
"""

from __future__ import annotations

from datetime import datetime, time, timezone
from typing import Callable

import structlog

from src.models.event import PARTY_CATEGORY, Event
from src.models.search import SearchRequest
from src.utils.dates import start_of_day
from src.utils.geo import haversine_miles
from src.utils.logging import get_logger

PARTY_RADIUS_BOOST = 1.5


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class GeoDateFilter:
    """Applies the request's geographic, temporal and id predicates.

    Parameters
    ----------
    now:
        Clock returning an aware ``datetime``; "today" for the stale-event
        cutoff is the UTC day containing ``now()``.
    party_radius_boost:
        Radius multiplier for party events in a party search.
    """

    def __init__(
        self,
        now: Callable[[], datetime] = _utc_now,
        party_radius_boost: float = PARTY_RADIUS_BOOST,
    ) -> None:
        self._now = now
        self._party_radius_boost = party_radius_boost
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def apply(self, events: list[Event], request: SearchRequest) -> list[Event]:
        """Run category, radius and date filters, then sort by date.

        Exclusion is deliberately not part of ``apply``: the orchestrator
        caches the result of ``apply`` and excludes ids per request.
        """
        before = len(events)
        kept = self.filter_categories(events, request)
        kept = self.filter_radius(kept, request)
        kept = self.filter_dates(kept, request)
        kept = self.sort_by_date(kept)
        self._logger.debug("events_filtered", before=before, after=len(kept))
        return kept

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def filter_radius(self, events: list[Event], request: SearchRequest) -> list[Event]:
        """Keep events within the radius; coordinate-less events pass through.

        Retained events with coordinates are returned as copies carrying
        ``distance_miles``.
        """
        if not request.has_coordinates:
            return list(events)

        origin_lat = float(request.latitude)  # type: ignore[arg-type]
        origin_lon = float(request.longitude)  # type: ignore[arg-type]
        party_search = request.is_party_search

        kept: list[Event] = []
        for event in events:
            if event.coordinates is None:
                kept.append(event)
                continue

            distance = haversine_miles(
                origin_lat, origin_lon, event.coordinates.lat, event.coordinates.lon
            )
            limit = request.radius
            if party_search and event.is_party_event:
                limit *= self._party_radius_boost
            if distance <= limit:
                kept.append(event.model_copy(update={"distance_miles": round(distance, 2)}))
        return kept

    def filter_dates(self, events: list[Event], request: SearchRequest) -> list[Event]:
        """Drop stale events and, when a range was requested, out-of-range ones."""
        cutoff = start_of_day(self._now())
        range_start, range_end = self._requested_range(request)

        kept: list[Event] = []
        for event in events:
            start = event.start_instant()
            if start is None:
                kept.append(event)
                continue
            if start < cutoff:
                continue
            if range_start is not None and start < range_start:
                continue
            if range_end is not None and start > range_end:
                continue
            kept.append(event)
        return kept

    def filter_categories(self, events: list[Event], request: SearchRequest) -> list[Event]:
        """Restrict party searches to party events.

        Events from another explicitly requested category are kept as well.
        With a party subcategory, party events must match it.  Searches
        without ``"party"`` are not filtered; their categories only shape
        the provider query.
        """
        if not request.is_party_search:
            return list(events)

        other_categories = {c for c in request.categories if c != PARTY_CATEGORY}
        wanted_sub = request.party_subcategory

        kept: list[Event] = []
        for event in events:
            if event.is_party_event:
                if wanted_sub is None or event.party_subcategory == wanted_sub:
                    kept.append(event)
            elif event.category in other_categories:
                kept.append(event)
        return kept

    @staticmethod
    def exclude(events: list[Event], exclude_ids: list[str]) -> list[Event]:
        """Drop events whose id is in *exclude_ids*."""
        if not exclude_ids:
            return list(events)
        blocked = set(exclude_ids)
        return [event for event in events if event.id not in blocked]

    @staticmethod
    def sort_by_date(events: list[Event]) -> list[Event]:
        """Stable ascending sort by start instant; undated events last, in input order."""
        dated: list[tuple[datetime, int, Event]] = []
        undated: list[Event] = []
        for index, event in enumerate(events):
            start = event.start_instant()
            if start is None:
                undated.append(event)
            else:
                dated.append((start, index, event))
        dated.sort(key=lambda item: (item[0], item[1]))
        return [event for _, _, event in dated] + undated

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _requested_range(request: SearchRequest) -> tuple[datetime | None, datetime | None]:
        range_start = (
            datetime.combine(request.date_from, time.min, tzinfo=timezone.utc)
            if request.date_from
            else None
        )
        range_end = (
            datetime.combine(request.date_to, time.max, tzinfo=timezone.utc)
            if request.date_to
            else None
        )
        return range_start, range_end

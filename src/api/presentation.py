"""Map placement for events that arrive without coordinates.

A map client needs a point for every marker.  Events the provider could
not locate are placed at a small, deterministic offset from the search
origin (derived from the event id, so a marker does not jump between
requests) and flagged ``approximate_location``.  Only copies are
touched; the cached canonical events keep ``coordinates=None``.
"""

from __future__ import annotations

import hashlib

from src.api.schemas import DisplayEvent
from src.models.event import Coordinates, Event

# Roughly 3 to 5 miles at mid latitudes.
MAX_OFFSET_DEGREES = 0.05


def _unit_offsets(event_id: str) -> tuple[float, float]:
    """Two values in [-1, 1) derived from *event_id*."""
    digest = hashlib.sha1(event_id.encode("utf-8")).digest()
    first = int.from_bytes(digest[:4], "big") / 2**32
    second = int.from_bytes(digest[4:8], "big") / 2**32
    return first * 2 - 1, second * 2 - 1


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def to_display(event: Event) -> DisplayEvent:
    return DisplayEvent.model_validate(event.model_dump())


def place_for_display(
    events: list[Event],
    origin_lat: float | None,
    origin_lon: float | None,
    max_offset: float = MAX_OFFSET_DEGREES,
) -> list[DisplayEvent]:
    """Return display copies, placing coordinate-less events near the origin.

    Without an origin the events are returned unchanged (as display copies).
    """
    placed: list[DisplayEvent] = []
    for event in events:
        display = to_display(event)
        if event.coordinates is None and origin_lat is not None and origin_lon is not None:
            lat_unit, lon_unit = _unit_offsets(event.id)
            display = display.model_copy(
                update={
                    "coordinates": Coordinates(
                        lon=_clamp(origin_lon + lon_unit * max_offset, -180.0, 180.0),
                        lat=_clamp(origin_lat + lat_unit * max_offset, -90.0, 90.0),
                    ),
                    "approximate_location": True,
                }
            )
        placed.append(display)
    return placed

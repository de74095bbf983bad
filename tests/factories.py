"""Builders for raw provider records, canonical events and HTTP responses."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from src.models.event import Event

# Every test runs "on" Monday 2025-10-20, noon UTC; fixture events fall later that week.
FIXED_NOW = datetime(2025, 10, 20, 12, 0, tzinfo=timezone.utc)

NYC_LAT = 40.7128
NYC_LON = -74.0060


# ---------------------------------------------------------------------------
# Raw provider records
# ---------------------------------------------------------------------------


def make_raw_event(
    event_id: str | None = "evt1",
    name: str | None = "Friday Night Club Bash",
    *,
    lat: Any = 40.70,
    lon: Any = -74.00,
    start: str | None = "2025-10-25 00:00:00",
    venue_name: str = "Output",
    subtype: str | None = "night_club",
    **extra: Any,
) -> dict[str, Any]:
    """Build a raw record shaped like the events search API returns."""
    venue: dict[str, Any] = {
        "name": venue_name,
        "full_address": f"{venue_name}, 74 Wythe Ave, Brooklyn, NY 11249",
        "city": "Brooklyn",
        "state": "NY",
        "country": "US",
        "timezone": "America/New_York",
    }
    if lat is not None:
        venue["latitude"] = lat
    if lon is not None:
        venue["longitude"] = lon
    if subtype is not None:
        venue["subtype"] = subtype
        venue["subtypes"] = [subtype]

    raw: dict[str, Any] = {
        "description": "Late night dancing with resident DJs.",
        "link": f"https://example.com/events/{event_id or 'x'}",
        "thumbnail": "https://example.com/img.jpg",
        "ticket_links": [{"source": "Tix", "link": f"https://tickets.example.com/{event_id or 'x'}"}],
        "info_links": [],
        "venue": venue,
    }
    if event_id is not None:
        raw["event_id"] = event_id
    if name is not None:
        raw["name"] = name
    if start is not None:
        raw["start_time_utc"] = start
    raw.update(extra)
    return raw


def make_event(event_id: str = "rapidapi_1", **overrides: Any) -> Event:
    """Build a canonical event with sensible defaults."""
    fields: dict[str, Any] = {
        "id": event_id,
        "title": "Jazz Night",
        "raw_date": "2025-10-24T20:00:00Z",
        "category": "music",
    }
    fields.update(overrides)
    return Event(**fields)


def json_response(status_code: int, payload: Any = None, headers: dict[str, str] | None = None) -> httpx.Response:
    """Build an ``httpx.Response`` with a JSON body (or raw text for strings)."""
    request = httpx.Request("GET", "https://provider.test/search-events")
    if isinstance(payload, str):
        return httpx.Response(status_code, text=payload, headers=headers, request=request)
    return httpx.Response(status_code, json=payload, headers=headers, request=request)


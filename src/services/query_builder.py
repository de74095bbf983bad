"""Free-text query construction for the events search provider.

The provider only understands a free-text ``query`` plus a few flags, so
geography, categories and party intent all have to be folded into one
string.  Every function here is pure and deterministic: the same request
always produces the same query, bucket and window.

    events near 40.712800,-74.006000 in Brooklyn jazz
    parties events nightlife near 40.712800,-74.006000 nightclub dj dance festival celebration music festival
"""

from __future__ import annotations

import re
from datetime import date, timedelta

from src.config.event_vocabulary import (
    CATEGORY_QUERY_TERMS,
    PARTY_QUERY_TERMS,
    SUBCATEGORY_QUERY_TERMS,
)
from src.models.search import DEFAULT_WINDOW_DAYS, SearchRequest


def build_search_query(request: SearchRequest) -> str:
    """Build the provider query string for *request*.

    Coordinates win over a location name: when both are present the query
    is anchored on the coordinates (6 decimals) and the name is appended as
    ``"in <location>"``.
    """
    party = request.is_party_search

    if request.has_coordinates:
        anchor = "parties events nightlife" if party else "events"
        query = f"{anchor} near {request.latitude:.6f},{request.longitude:.6f}"
        if request.location:
            query = f"{query} in {request.location}"
    elif request.location:
        query = f"{'parties events nightlife' if party else 'events'} in {request.location}"
    else:
        query = "popular parties nightlife" if party else "popular events"

    prefixes = [
        CATEGORY_QUERY_TERMS[category]
        for category in request.categories
        if category in CATEGORY_QUERY_TERMS
    ]
    if prefixes:
        query = f"{' '.join(prefixes)} {query}"

    if request.keyword:
        query = _append_phrase(query, request.keyword)

    if party:
        query = _append_missing(query, list(PARTY_QUERY_TERMS))
        if request.party_subcategory is not None:
            extra = SUBCATEGORY_QUERY_TERMS.get(request.party_subcategory, "")
            if extra:
                query = _append_phrase(query, extra)

    return query


def date_bucket(request: SearchRequest, today: date) -> str:
    """Pick the provider's coarse ``date`` flag covering the requested range.

    The provider accepts ``all``, ``today``, ``tomorrow``, ``week``,
    ``weekend``, ``next_week``, ``month`` and ``next_month``.  The bucket is
    the narrowest one that still covers the whole range; exact range
    filtering happens locally afterwards.
    """
    first_day = request.date_from or today
    last_day = request.date_to or first_day + timedelta(days=DEFAULT_WINDOW_DAYS)

    if last_day <= today:
        return "today"
    if first_day == last_day == today + timedelta(days=1):
        return "tomorrow"

    days_ahead = (last_day - today).days
    if days_ahead <= 7:
        return "week"
    if days_ahead <= 31:
        return "month"
    return "all"


def provider_window(request: SearchRequest, overfetch_factor: int = 2, max_limit: int = 200) -> int:
    """Number of results to request from the provider.

    Over-fetches so that, after radius/date/category filtering, the
    caller's page can still be filled.  Always strictly larger than the
    caller's ``limit``; deeper pages request proportionally more, up to
    ``max_limit`` (or ``limit + 1`` when the limit itself exceeds it).
    """
    wanted = request.page * request.limit * max(1, overfetch_factor)
    wanted = max(wanted, request.limit + 1)
    ceiling = max(max_limit, request.limit + 1)
    return int(min(wanted, ceiling))


def _append_missing(query: str, additions: list[str]) -> str:
    """Append each word of *additions* that the query does not already contain."""
    present = set(_words(query))
    parts = [query]
    for addition in additions:
        for word in addition.split():
            key = word.lower()
            if key and key not in present:
                parts.append(word)
                present.add(key)
    return " ".join(parts)


def _append_phrase(query: str, phrase: str) -> str:
    """Append *phrase* unless the query already contains it (case-insensitive)."""
    if phrase.lower() in query.lower():
        return query
    return f"{query} {phrase}"


def _words(text: str) -> list[str]:
    return [w for w in re.split(r"\s+", text.lower()) if w]


"""Domain models -- re-exports all public model classes.

The models are organized by concern:
    - event.py    -- canonical Event, Coordinates, PartySubcategory
    - search.py   -- SearchRequest, SearchResponse, FallbackSearchResult, FetchResult, CacheEntry
    - pipeline.py -- SearchPhase state machine labels
"""

from __future__ import annotations

from src.models.event import (
    LOCATION_FALLBACK,
    PLACEHOLDER_IMAGE_URL,
    Coordinates,
    Event,
    PartySubcategory,
)
from src.models.pipeline import SearchPhase
from src.models.search import (
    CacheEntry,
    FallbackSearchResult,
    FetchResult,
    SearchMeta,
    SearchRequest,
    SearchResponse,
    SourceStat,
)

__all__ = [
    "LOCATION_FALLBACK",
    "PLACEHOLDER_IMAGE_URL",
    "CacheEntry",
    "Coordinates",
    "Event",
    "FallbackSearchResult",
    "FetchResult",
    "PartySubcategory",
    "SearchMeta",
    "SearchPhase",
    "SearchRequest",
    "SearchResponse",
    "SourceStat",
]

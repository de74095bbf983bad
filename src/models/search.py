"""Pydantic v2 models for search requests, responses and cache entries.

``SearchRequest`` is the immutable input to the whole pipeline.  Structural
problems (a non-integer page, say) are rejected at construction time by
Pydantic; semantic problems such as a latitude of 120 are reported by
:meth:`SearchRequest.validate_for_search` so the orchestrator can turn them
into an annotated empty response instead of an exception.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.models.event import PARTY_CATEGORY, Event, PartySubcategory
from src.utils.errors import EventSearchError, SearchValidationError

DEFAULT_RADIUS_MILES = 30.0
MIN_RADIUS_MILES = 1.0
MAX_RADIUS_MILES = 500.0
DEFAULT_LIMIT = 100
DEFAULT_WINDOW_DAYS = 30

_WIRE_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class SearchRequest(BaseModel):
    """A geographic / keyword event search."""

    model_config = _WIRE_CONFIG

    keyword: str | None = None
    location: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    radius: float = Field(
        default=DEFAULT_RADIUS_MILES,
        description="Search radius in miles, clamped to [1, 500].",
    )
    date_from: date | None = None
    date_to: date | None = None
    categories: list[str] = Field(default_factory=list)
    party_subcategory: PartySubcategory | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_LIMIT, ge=1)
    exclude_ids: list[str] = Field(default_factory=list)

    @field_validator("keyword", "location", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("radius", mode="before")
    @classmethod
    def _clamp_radius(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_RADIUS_MILES
        try:
            radius = float(value)
        except (TypeError, ValueError):
            return value
        # Non-finite radii pass through untouched; validate_for_search rejects them.
        if not math.isfinite(radius):
            return radius
        return min(MAX_RADIUS_MILES, max(MIN_RADIUS_MILES, radius))

    @field_validator("categories", mode="before")
    @classmethod
    def _normalize_categories(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        seen: list[str] = []
        for item in value:
            name = str(item).strip().lower()
            if name and name not in seen:
                seen.append(name)
        return seen

    # ------------------------------------------------------------------
    # Derived properties
    # ------------------------------------------------------------------

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def is_party_search(self) -> bool:
        return PARTY_CATEGORY in self.categories

    @property
    def date_range_requested(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    def validate_for_search(self) -> None:
        """Raise :class:`SearchValidationError` if the request cannot be served."""
        problems: list[str] = []

        if (self.latitude is None) != (self.longitude is None):
            problems.append("latitude and longitude must be provided together")
        if self.latitude is not None and (
            not math.isfinite(self.latitude) or not -90.0 <= self.latitude <= 90.0
        ):
            problems.append(f"latitude {self.latitude} is outside [-90, 90]")
        if self.longitude is not None and (
            not math.isfinite(self.longitude) or not -180.0 <= self.longitude <= 180.0
        ):
            problems.append(f"longitude {self.longitude} is outside [-180, 180]")
        if not math.isfinite(self.radius):
            problems.append("radius must be a finite number of miles")
        if self.date_from and self.date_to and self.date_from > self.date_to:
            problems.append("date_from is after date_to")

        if problems:
            raise SearchValidationError(message="; ".join(problems))


class FetchResult(BaseModel):
    """Outcome of one retriever invocation (all retries included)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    raw_events: list[dict[str, Any]] = Field(default_factory=list)
    error: EventSearchError | None = None
    query_used: str = ""
    provider: str = "rapidapi"

    @property
    def ok(self) -> bool:
        return self.error is None


class SourceStat(BaseModel):
    """Per-backend count and error for one search."""

    model_config = _WIRE_CONFIG

    count: int = 0
    error: str | None = None


class SearchMeta(BaseModel):
    """Diagnostic metadata attached to every search response."""

    model_config = _WIRE_CONFIG

    timestamp: str
    total_events: int = 0
    page: int = 1
    limit: int = DEFAULT_LIMIT
    has_more: bool = False
    execution_time_ms: float = 0.0
    query_used: str = ""
    cache_hit: bool = False
    phases: list[str] = Field(default_factory=list)


class SearchResponse(BaseModel):
    """Caller-facing result: ``{events, sourceStats, meta}``."""

    model_config = _WIRE_CONFIG

    events: list[Event] = Field(default_factory=list)
    source_stats: dict[str, SourceStat] = Field(default_factory=dict)
    meta: SearchMeta


class FallbackSearchResult(BaseModel):
    """Reply from the fallback backend, validated only at the envelope.

    ``events`` stay raw dicts so the normalizer can drop a bad record
    without losing the rest of the batch.
    """

    model_config = _WIRE_CONFIG

    events: list[Any] = Field(default_factory=list)
    source_stats: dict[str, Any] = Field(default_factory=dict)
    meta: dict[str, Any] = Field(default_factory=dict)

    @property
    def query_used(self) -> str:
        value = self.meta.get("queryUsed", self.meta.get("query_used"))
        return value if isinstance(value, str) else ""


class CacheEntry(BaseModel):
    """One cached search result.

    ``events`` is the filtered, date-sorted list before exclusion and
    pagination, so one entry serves every page of the same search.
    Entries are replaced wholesale, never edited.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    timestamp: float = Field(description="Clock reading (seconds) when the entry was written.")
    events: list[Event] = Field(default_factory=list)
    request_fingerprint: dict[str, Any] = Field(default_factory=dict)
    query_used: str = ""
    provider: str = "rapidapi"
    fetch_window: int = 0
    source_count: int = Field(default=0, description="Normalized events the provider returned.")

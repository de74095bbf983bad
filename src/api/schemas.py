"""Pydantic request/response schemas for the event search API.

Defines the public contract for the REST endpoints: event search, event
details, health and provider listing.

# ─── HOW SCHEMAS WORK ─────────────────────────────────────────────────
#
# The search models themselves (SearchRequest, SearchResponse, Event) live
# in src.models and already speak camelCase on the wire.  The API adds:
#
#   1. SearchEventsRequest  - SearchRequest plus presentation options
#   2. DisplayEvent         - Event plus the approximateLocation flag
#   3. Envelope responses   - detail, health, providers, errors
#
# Both camelCase and snake_case keys are accepted on input; output is
# always camelCase.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.models.event import Event
from src.models.search import SearchMeta, SearchRequest, SourceStat

_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchEventsRequest(SearchRequest):
    """Body of ``POST /events/search``."""

    display_origin: bool = Field(
        default=False,
        description="Place coordinate-less events near the search origin for map display.",
    )

    def to_search_request(self) -> SearchRequest:
        return SearchRequest.model_validate(self.model_dump(exclude={"display_origin"}))


class DisplayEvent(Event):
    """An event as shown to a client.

    ``approximate_location`` marks coordinates placed near the search origin
    by the presentation layer rather than reported by the provider.
    """

    approximate_location: bool = False


class SearchEventsResponse(BaseModel):
    """``{events, sourceStats, meta}`` as returned by the search endpoint."""

    model_config = _WIRE_CONFIG

    events: list[DisplayEvent] = Field(default_factory=list)
    source_stats: dict[str, SourceStat] = Field(default_factory=dict)
    meta: SearchMeta


class EventDetailResponse(BaseModel):
    """Response for a single event lookup."""

    model_config = _WIRE_CONFIG

    event: Event


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ProvidersResponse(BaseModel):
    """List of configured search backends and their availability."""

    providers: list[dict[str, Any]]


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    error: str
    detail: str | None = None

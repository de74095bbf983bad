"""Pydantic v2 models for canonical events.

All models use frozen config (immutable).  Pipeline stages never mutate an
``Event``; they derive new instances with ``model_copy(update={...})``.

Field names are snake_case in Python and camelCase on the wire
(``venueName``, ``rawDate``, ``isPartyEvent``...), via the alias
generator.  Both spellings are accepted on input.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from src.utils.dates import parse_timestamp

LOCATION_FALLBACK = "Location not specified"
PLACEHOLDER_IMAGE_URL = "https://placehold.co/600x400?text=No+Image"
PARTY_CATEGORY = "party"


class PartySubcategory(str, Enum):  # noqa: UP042
    """Closed set of party flavours assigned by the classifier.

    ``GENERAL`` is the default for party events that match none of the
    more specific keyword groups.
    """

    NIGHTCLUB = "nightclub"
    FESTIVAL = "festival"
    BRUNCH = "brunch"
    DAY_PARTY = "day-party"
    ROOFTOP = "rooftop"
    NETWORKING = "networking"
    CELEBRATION = "celebration"
    SOCIAL = "social"
    POPUP = "popup"
    IMMERSIVE = "immersive"
    GENERAL = "general"


class Coordinates(BaseModel):
    """A validated (longitude, latitude) pair.

    Accepts either an object (``{"lon": .., "lat": ..}``) or a two-element
    ``[lon, lat]`` sequence, which is how map libraries usually ship them.
    """

    model_config = ConfigDict(frozen=True)

    lon: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)
    lat: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)

    @model_validator(mode="before")
    @classmethod
    def _accept_pair(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return {"lon": value[0], "lat": value[1]}
        return value

    def as_pair(self) -> tuple[float, float]:
        return (self.lon, self.lat)


class Event(BaseModel):
    """A canonical, provider-independent event.

    ``date`` and ``time`` are display strings only; ``raw_date`` is the
    ISO-8601 instant used for every comparison and sort.  The model
    refuses to exist with ``is_party_event`` and ``category`` disagreeing.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1, description="Provider-namespaced id, e.g. 'rapidapi_abc123'.")
    title: str
    description: str = ""
    venue_name: str = ""
    location_text: str = LOCATION_FALLBACK
    coordinates: Coordinates | None = None
    date: str = Field(default="Date TBA", description="Display date, never parsed.")
    time: str = Field(default="Time TBA", description="Display time, never parsed.")
    raw_date: str | None = Field(default=None, description="ISO-8601 start instant.")
    end_date: str | None = None
    category: str = "other"
    party_subcategory: PartySubcategory | None = None
    is_party_event: bool = False
    price: str | None = None
    image_url: str = PLACEHOLDER_IMAGE_URL
    source_url: str | None = None
    ticket_url: str | None = None
    provider: str = "rapidapi"
    venue_type: str | None = Field(default=None, description="Raw venue subtype from the provider.")
    distance_miles: float | None = Field(
        default=None, description="Distance from the search origin, set by the radius filter."
    )

    @model_validator(mode="after")
    def _check_party_flags(self) -> Event:
        if self.is_party_event != (self.category == PARTY_CATEGORY):
            raise ValueError("is_party_event must be true exactly when category is 'party'")
        if self.party_subcategory is not None and not self.is_party_event:
            raise ValueError("party_subcategory is only allowed on party events")
        return self

    def start_instant(self) -> datetime | None:
        """Parsed ``raw_date`` as an aware datetime, or ``None``."""
        return parse_timestamp(self.raw_date) if self.raw_date else None

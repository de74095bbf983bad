"""Unit tests for the event and search models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.models.event import Coordinates, Event, PartySubcategory
from src.models.search import (
    DEFAULT_RADIUS_MILES,
    FetchResult,
    SearchMeta,
    SearchRequest,
    SearchResponse,
    SourceStat,
)
from src.utils.errors import SearchValidationError, TransientProviderError
from tests.factories import make_event


class TestCoordinates:
    def test_accepts_pair_and_mapping(self) -> None:
        assert Coordinates.model_validate([-74.0, 40.7]) == Coordinates(lon=-74.0, lat=40.7)
        assert Coordinates.model_validate({"lon": -74.0, "lat": 40.7}).as_pair() == (-74.0, 40.7)

    @pytest.mark.parametrize("value", [[-190.0, 0.0], [0.0, 91.0], [float("nan"), 0.0]])
    def test_rejects_out_of_range(self, value: list[float]) -> None:
        with pytest.raises(ValidationError):
            Coordinates.model_validate(value)


class TestEvent:
    def test_party_flag_and_category_must_agree(self) -> None:
        with pytest.raises(ValidationError):
            make_event(category="party", is_party_event=False)
        with pytest.raises(ValidationError):
            make_event(category="music", is_party_event=True)

    def test_subcategory_only_on_parties(self) -> None:
        with pytest.raises(ValidationError):
            make_event(party_subcategory=PartySubcategory.BRUNCH)
        party = make_event(category="party", is_party_event=True, party_subcategory="brunch")
        assert party.party_subcategory is PartySubcategory.BRUNCH

    def test_frozen(self) -> None:
        event = make_event()
        with pytest.raises(ValidationError):
            event.title = "Changed"  # type: ignore[misc]

    def test_wire_format_is_camel_case(self) -> None:
        data = make_event(venue_name="Blue Note").model_dump(by_alias=True)
        assert data["venueName"] == "Blue Note"
        assert data["rawDate"] == "2025-10-24T20:00:00Z"
        assert "isPartyEvent" in data
        assert Event.model_validate(data) == make_event(venue_name="Blue Note")

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            make_event("")

    def test_start_instant(self) -> None:
        assert make_event().start_instant() is not None
        assert make_event(raw_date=None).start_instant() is None


class TestSearchRequest:
    @pytest.mark.parametrize("radius,expected", [(0.2, 1.0), (750, 500.0), (None, DEFAULT_RADIUS_MILES), (25, 25.0)])
    def test_radius_is_clamped(self, radius: float | None, expected: float) -> None:
        assert SearchRequest(radius=radius).radius == expected

    def test_categories_are_lowercased_and_deduplicated(self) -> None:
        request = SearchRequest(categories=["Party", " music ", "party", ""])
        assert request.categories == ["party", "music"]
        assert request.is_party_search

    def test_blank_strings_become_none(self) -> None:
        request = SearchRequest(keyword="   ", location="")
        assert request.keyword is None
        assert request.location is None

    def test_accepts_camel_case(self) -> None:
        request = SearchRequest.model_validate(
            {"latitude": 1.0, "longitude": 2.0, "dateFrom": "2025-10-21", "excludeIds": ["a"], "partySubcategory": "rooftop"}
        )
        assert request.date_from is not None
        assert request.exclude_ids == ["a"]
        assert request.party_subcategory is PartySubcategory.ROOFTOP

    @pytest.mark.parametrize("field,value", [("page", 0), ("limit", 0)])
    def test_structural_errors_raise(self, field: str, value: int) -> None:
        with pytest.raises(ValidationError):
            SearchRequest(**{field: value})

    @pytest.mark.parametrize(
        "fields",
        [
            {"latitude": 40.0},
            {"latitude": 91.0, "longitude": 0.0},
            {"latitude": 0.0, "longitude": 181.0},
            {"radius": float("inf")},
            {"date_from": "2025-10-22", "date_to": "2025-10-21"},
        ],
    )
    def test_semantic_errors_reported_by_validate(self, fields: dict) -> None:
        with pytest.raises(SearchValidationError):
            SearchRequest(**fields).validate_for_search()

    def test_valid_request_passes(self) -> None:
        SearchRequest(latitude=40.7, longitude=-74.0, radius=10).validate_for_search()


class TestResultModels:
    def test_fetch_result_ok(self) -> None:
        assert FetchResult().ok
        assert not FetchResult(error=TransientProviderError("boom")).ok

    def test_response_serializes_camel_case(self) -> None:
        response = SearchResponse(
            events=[make_event()],
            source_stats={"rapidapi": SourceStat(count=1)},
            meta=SearchMeta(timestamp="2025-10-20T12:00:00Z", total_events=1, has_more=False),
        )
        data = response.model_dump(mode="json", by_alias=True)
        assert set(data) == {"events", "sourceStats", "meta"}
        assert data["sourceStats"]["rapidapi"] == {"count": 1, "error": None}
        assert data["meta"]["totalEvents"] == 1
        assert data["meta"]["hasMore"] is False

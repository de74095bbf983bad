"""Unit tests for src.services.geo_date_filter."""

from __future__ import annotations

from datetime import date

import pytest

from src.models.event import Coordinates, Event, PartySubcategory
from src.models.search import SearchRequest
from src.services.geo_date_filter import GeoDateFilter
from tests.factories import NYC_LAT, NYC_LON, make_event

# Roughly 69 miles per degree of latitude.
TWELVE_MILES_NORTH = NYC_LAT + 0.174
FIFTY_MILES_NORTH = NYC_LAT + 0.724


def _party(event_id: str, **overrides) -> Event:
    fields = {
        "category": "party",
        "is_party_event": True,
        "party_subcategory": PartySubcategory.NIGHTCLUB,
    }
    fields.update(overrides)
    return make_event(event_id, **fields)


def _at(lat: float, lon: float = NYC_LON) -> Coordinates:
    return Coordinates(lon=lon, lat=lat)


def _nyc_request(**overrides) -> SearchRequest:
    fields = {"latitude": NYC_LAT, "longitude": NYC_LON, "radius": 10}
    fields.update(overrides)
    return SearchRequest(**fields)


class TestRadius:
    def test_nearby_event_kept_with_distance(self, geo_filter: GeoDateFilter) -> None:
        event = make_event("rapidapi_near", coordinates=_at(40.70, -74.00))
        kept = geo_filter.filter_radius([event], _nyc_request())
        assert len(kept) == 1
        assert kept[0].distance_miles is not None
        assert kept[0].distance_miles < 1.5
        assert event.distance_miles is None

    def test_far_event_dropped(self, geo_filter: GeoDateFilter) -> None:
        event = make_event("rapidapi_far", coordinates=_at(TWELVE_MILES_NORTH))
        assert geo_filter.filter_radius([event], _nyc_request()) == []

    def test_party_radius_is_boosted_for_party_search(self, geo_filter: GeoDateFilter) -> None:
        party = _party("rapidapi_p", coordinates=_at(TWELVE_MILES_NORTH))
        plain = make_event("rapidapi_m", coordinates=_at(TWELVE_MILES_NORTH))
        kept = geo_filter.filter_radius([party, plain], _nyc_request(categories=["party"]))
        assert [e.id for e in kept] == ["rapidapi_p"]

    def test_boost_does_not_apply_outside_party_search(self, geo_filter: GeoDateFilter) -> None:
        party = _party("rapidapi_p", coordinates=_at(TWELVE_MILES_NORTH))
        assert geo_filter.filter_radius([party], _nyc_request()) == []

    def test_boosted_radius_still_has_a_limit(self, geo_filter: GeoDateFilter) -> None:
        party = _party("rapidapi_p", coordinates=_at(FIFTY_MILES_NORTH))
        assert geo_filter.filter_radius([party], _nyc_request(categories=["party"])) == []

    def test_events_without_coordinates_pass(self, geo_filter: GeoDateFilter) -> None:
        event = make_event("rapidapi_nowhere")
        assert geo_filter.filter_radius([event], _nyc_request()) == [event]

    def test_no_origin_means_no_radius_filter(self, geo_filter: GeoDateFilter) -> None:
        event = make_event("rapidapi_far", coordinates=_at(FIFTY_MILES_NORTH))
        assert geo_filter.filter_radius([event], SearchRequest(location="Brooklyn")) == [event]

    def test_output_is_subset_of_input(self, geo_filter: GeoDateFilter) -> None:
        events = [
            make_event(f"rapidapi_{i}", coordinates=_at(NYC_LAT + i * 0.05)) for i in range(6)
        ]
        kept = geo_filter.filter_radius(events, _nyc_request())
        assert {e.id for e in kept} <= {e.id for e in events}


class TestDates:
    def test_events_before_today_are_dropped(self, geo_filter: GeoDateFilter) -> None:
        stale = make_event("rapidapi_old", raw_date="2025-10-19T23:00:00Z")
        earlier_today = make_event("rapidapi_today", raw_date="2025-10-20T01:00:00Z")
        kept = geo_filter.filter_dates([stale, earlier_today], SearchRequest())
        assert [e.id for e in kept] == ["rapidapi_today"]

    def test_requested_range_is_inclusive(self, geo_filter: GeoDateFilter) -> None:
        events = [
            make_event("rapidapi_before", raw_date="2025-10-21T20:00:00Z"),
            make_event("rapidapi_first", raw_date="2025-10-22T00:00:00Z"),
            make_event("rapidapi_last", raw_date="2025-10-24T23:59:00Z"),
            make_event("rapidapi_after", raw_date="2025-10-25T00:00:00Z"),
        ]
        request = SearchRequest(date_from=date(2025, 10, 22), date_to=date(2025, 10, 24))
        kept = geo_filter.filter_dates(events, request)
        assert [e.id for e in kept] == ["rapidapi_first", "rapidapi_last"]

    def test_undated_events_pass(self, geo_filter: GeoDateFilter) -> None:
        event = make_event("rapidapi_tba", raw_date=None)
        request = SearchRequest(date_from=date(2025, 10, 22))
        assert geo_filter.filter_dates([event], request) == [event]


class TestCategories:
    def test_party_search_keeps_party_events(self, geo_filter: GeoDateFilter) -> None:
        events = [_party("rapidapi_p"), make_event("rapidapi_m")]
        kept = geo_filter.filter_categories(events, SearchRequest(categories=["party"]))
        assert [e.id for e in kept] == ["rapidapi_p"]

    def test_other_requested_categories_survive(self, geo_filter: GeoDateFilter) -> None:
        events = [
            _party("rapidapi_p"),
            make_event("rapidapi_m"),
            make_event("rapidapi_s", category="sports"),
        ]
        kept = geo_filter.filter_categories(events, SearchRequest(categories=["party", "music"]))
        assert [e.id for e in kept] == ["rapidapi_p", "rapidapi_m"]

    def test_subcategory_must_match(self, geo_filter: GeoDateFilter) -> None:
        events = [
            _party("rapidapi_club"),
            _party("rapidapi_fest", party_subcategory=PartySubcategory.FESTIVAL),
        ]
        request = SearchRequest(categories=["party"], party_subcategory=PartySubcategory.FESTIVAL)
        kept = geo_filter.filter_categories(events, request)
        assert [e.id for e in kept] == ["rapidapi_fest"]

    def test_non_party_search_is_unfiltered(self, geo_filter: GeoDateFilter) -> None:
        events = [_party("rapidapi_p"), make_event("rapidapi_s", category="sports")]
        assert geo_filter.filter_categories(events, SearchRequest(categories=["music"])) == events


class TestExcludeAndSort:
    def test_exclude_removes_ids(self) -> None:
        events = [make_event("p_1"), make_event("p_2")]
        assert [e.id for e in GeoDateFilter.exclude(events, ["p_1"])] == ["p_2"]

    def test_exclude_with_nothing_returns_copy(self) -> None:
        events = [make_event("p_1")]
        result = GeoDateFilter.exclude(events, [])
        assert result == events
        assert result is not events

    def test_sort_is_ascending_and_stable(self) -> None:
        events = [
            make_event("rapidapi_late", raw_date="2025-10-26T20:00:00Z"),
            make_event("rapidapi_tba1", raw_date=None),
            make_event("rapidapi_a", raw_date="2025-10-22T20:00:00Z"),
            make_event("rapidapi_b", raw_date="2025-10-22T20:00:00Z"),
            make_event("rapidapi_tba2", raw_date=None),
        ]
        ordered = [e.id for e in GeoDateFilter.sort_by_date(events)]
        assert ordered == ["rapidapi_a", "rapidapi_b", "rapidapi_late", "rapidapi_tba1", "rapidapi_tba2"]


class TestApply:
    @pytest.mark.parametrize("categories", [[], ["party"]])
    def test_apply_filters_then_sorts(self, geo_filter: GeoDateFilter, categories: list[str]) -> None:
        events = [
            _party("rapidapi_2", raw_date="2025-10-25T00:00:00Z", coordinates=_at(40.70, -74.00)),
            _party("rapidapi_1", raw_date="2025-10-22T00:00:00Z", coordinates=_at(40.71, -74.00)),
            _party("rapidapi_far", coordinates=_at(FIFTY_MILES_NORTH)),
            _party("rapidapi_old", raw_date="2025-10-01T00:00:00Z"),
        ]
        kept = geo_filter.apply(events, _nyc_request(categories=categories))
        assert [e.id for e in kept] == ["rapidapi_1", "rapidapi_2"]

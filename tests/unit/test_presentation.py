"""Unit tests for map placement of coordinate-less events."""

from __future__ import annotations

from src.api.presentation import MAX_OFFSET_DEGREES, place_for_display
from src.models.event import Coordinates
from tests.factories import NYC_LAT, NYC_LON, make_event


class TestPlaceForDisplay:
    def test_located_events_are_untouched(self) -> None:
        event = make_event("rapidapi_1", coordinates=Coordinates(lon=-73.99, lat=40.73))
        [display] = place_for_display([event], NYC_LAT, NYC_LON)
        assert display.coordinates == event.coordinates
        assert display.approximate_location is False

    def test_missing_coordinates_are_placed_near_origin(self) -> None:
        event = make_event("rapidapi_2")
        [display] = place_for_display([event], NYC_LAT, NYC_LON)

        assert display.approximate_location is True
        assert display.coordinates is not None
        assert abs(display.coordinates.lat - NYC_LAT) <= MAX_OFFSET_DEGREES
        assert abs(display.coordinates.lon - NYC_LON) <= MAX_OFFSET_DEGREES

    def test_canonical_event_is_not_modified(self) -> None:
        event = make_event("rapidapi_2")
        place_for_display([event], NYC_LAT, NYC_LON)
        assert event.coordinates is None

    def test_placement_is_deterministic_per_id(self) -> None:
        first = place_for_display([make_event("rapidapi_2")], NYC_LAT, NYC_LON)[0]
        second = place_for_display([make_event("rapidapi_2")], NYC_LAT, NYC_LON)[0]
        other = place_for_display([make_event("rapidapi_3")], NYC_LAT, NYC_LON)[0]
        assert first.coordinates == second.coordinates
        assert first.coordinates != other.coordinates

    def test_without_origin_nothing_is_placed(self) -> None:
        [display] = place_for_display([make_event("rapidapi_2")], None, None)
        assert display.coordinates is None
        assert display.approximate_location is False

    def test_placement_stays_in_range_at_the_pole(self) -> None:
        [display] = place_for_display([make_event("rapidapi_2")], 90.0, 180.0)
        assert display.coordinates is not None
        assert -90.0 <= display.coordinates.lat <= 90.0
        assert -180.0 <= display.coordinates.lon <= 180.0

"""Great-circle distance helpers.

Distances are in statute miles because search radii are expressed in
miles throughout the API.
"""

from __future__ import annotations

import math

EARTH_RADIUS_MILES = 3958.8


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the Haversine distance between two points in miles.

    Symmetric in its two points and exactly ``0.0`` for identical inputs.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push ``a`` a hair above 1.0 for antipodal points.
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(a))


def finite_float(value: object) -> float | None:
    """Convert a raw numeric value into a finite float, or ``None``.

    Providers send coordinates and prices as numbers, numeric strings, or
    nothing at all.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def is_valid_coordinate(lat: float | None, lon: float | None) -> bool:
    """Return ``True`` when both values are finite and inside WGS-84 bounds."""
    if lat is None or lon is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0

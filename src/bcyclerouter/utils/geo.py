from __future__ import annotations

import math

from bcyclerouter.schemas.core import LatLon


EARTH_RADIUS_KM = 6371.0088
MILES_PER_KM = 0.621371
FEET_PER_MILE = 5280
MILES_PER_LAT_DEGREE = 69.0


def distance_km(a: LatLon, b: LatLon) -> float:
    """
    Great-circle (haversine) distance between two points, in kilometers.
    """

    dphi = math.radians(b.lat - a.lat)
    dlambda = math.radians(b.lon - a.lon)
    h = (
        math.sin(dphi / 2) ** 2
        + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) * math.sin(dlambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def km_to_miles(km: float) -> float:
    return km * MILES_PER_KM


def miles_to_feet(mi: float) -> float:
    return mi * FEET_PER_MILE


def distance_mi(a: LatLon, b: LatLon) -> float:
    return km_to_miles(distance_km(a, b))


def miles_to_lat_degrees(mi: float) -> float:
    return mi / MILES_PER_LAT_DEGREE


def miles_to_lon_degrees(mi: float, at_lat: float) -> float:
    # Longitude degrees shrink with cos(latitude).
    return mi / (MILES_PER_LAT_DEGREE * math.cos(math.radians(at_lat)))


def format_distance(mi: float) -> str:
    """
    Human-readable distance: whole feet under a quarter mile, miles with 2 decimals otherwise.
    """

    if mi < 0.25:
        # Half-up rounding, not Python's banker's rounding.
        return f"{math.floor(miles_to_feet(mi) + 0.5)} ft"
    return f"{mi:.2f} mi"

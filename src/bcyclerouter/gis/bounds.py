from __future__ import annotations

import math
from typing import Iterable, Optional

from bcyclerouter.schemas.core import Bounds, Station
from bcyclerouter.utils.geo import miles_to_lat_degrees, miles_to_lon_degrees


SERVICE_AREA_PADDING_MILES = 1.0


def _is_finite_point(lat: float, lon: float) -> bool:
    return math.isfinite(lat) and math.isfinite(lon)


def compute_bounds(stations: Iterable[Station]) -> Optional[Bounds]:
    """
    Tight bounding rectangle over stations that are installed and accepting returns.

    Returns None when no station qualifies.
    """

    usable = [
        s
        for s in stations
        if s.is_installed and s.is_returning and _is_finite_point(s.lat, s.lon)
    ]
    if not usable:
        return None

    lats = [s.lat for s in usable]
    lons = [s.lon for s in usable]
    return Bounds(north=max(lats), south=min(lats), east=max(lons), west=min(lons))


def expand_bounds(bounds: Bounds, padding_miles: float = SERVICE_AREA_PADDING_MILES) -> Bounds:
    mid_lat = (bounds.north + bounds.south) / 2.0
    d_lat = miles_to_lat_degrees(padding_miles)
    d_lon = miles_to_lon_degrees(padding_miles, mid_lat)
    return Bounds(
        north=bounds.north + d_lat,
        south=bounds.south - d_lat,
        east=bounds.east + d_lon,
        west=bounds.west - d_lon,
    )


def contains(bounds: Bounds, lat: float, lon: float) -> bool:
    return (bounds.south <= lat <= bounds.north) and (bounds.west <= lon <= bounds.east)


def service_area_bounds(
    stations: Iterable[Station], *, padding_miles: float = SERVICE_AREA_PADDING_MILES
) -> Optional[Bounds]:
    raw = compute_bounds(stations)
    if raw is None:
        return None
    return expand_bounds(raw, padding_miles)

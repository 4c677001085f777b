from __future__ import annotations

from typing import Literal, Optional
from urllib.parse import urlencode

from bcyclerouter.schemas.core import LatLon


MAPS_DIRECTIONS_URL = "https://www.google.com/maps/dir/"

TravelMode = Literal["bicycling", "walking"]


def point_param(point: LatLon) -> str:
    return f"{point.lat},{point.lon}"


def _directions_url(params: dict[str, str]) -> str:
    return f"{MAPS_DIRECTIONS_URL}?{urlencode(params)}"


def build_bicycling_link(
    origin: LatLon,
    pickup: LatLon,
    dropoff: LatLon,
    destination: LatLon,
    *,
    destination_label: Optional[str] = None,
) -> str:
    """
    Four-point directions link: origin, pickup and dropoff waypoints, destination.

    The link format allows a single travel mode, so the whole route is "bicycling"; the walking
    legs are only reported as locally computed distances.
    """

    return _directions_url(
        {
            "api": "1",
            "origin": point_param(origin),
            "destination": destination_label or point_param(destination),
            "waypoints": f"{point_param(pickup)}|{point_param(dropoff)}",
            "travelmode": "bicycling",
        }
    )


def build_walking_link(origin: LatLon, destination: LatLon) -> str:
    return _directions_url(
        {
            "api": "1",
            "origin": point_param(origin),
            "destination": point_param(destination),
            "travelmode": "walking",
        }
    )

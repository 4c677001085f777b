from __future__ import annotations

import math
from typing import Callable, Iterable, Optional

from bcyclerouter.schemas.core import LatLon, Station
from bcyclerouter.utils.geo import distance_km


StationPredicate = Callable[[Station], bool]


def has_bikes(station: Station) -> bool:
    return station.bikes_available > 0


def has_docks(station: Station) -> bool:
    return station.docks_available > 0


def any_station(station: Station) -> bool:
    return True


def is_eligible(
    station: Station,
    predicate: StationPredicate,
    *,
    require_renting: bool = True,
    require_returning: bool = True,
) -> bool:
    if not station.is_installed:
        return False
    if require_renting and not station.is_renting:
        return False
    if require_returning and not station.is_returning:
        return False
    if not predicate(station):
        return False
    return math.isfinite(station.lat) and math.isfinite(station.lon)


def pick_nearest(
    stations: Iterable[Station],
    origin: LatLon,
    predicate: StationPredicate = any_station,
    *,
    require_renting: bool = True,
    require_returning: bool = True,
) -> Optional[Station]:
    """
    Closest operationally eligible station to `origin`, or None when nothing qualifies.

    One pass over `stations`; on equal distance the earlier station wins. Pickup uses
    `has_bikes`, dropoff uses `has_docks` with `require_renting=False` (a dock can take a
    return even when the station is not renting).
    """

    nearest: Optional[Station] = None
    nearest_km = math.inf
    for station in stations:
        if not is_eligible(
            station,
            predicate,
            require_renting=require_renting,
            require_returning=require_returning,
        ):
            continue
        d_km = distance_km(origin, station.point)
        if d_km < nearest_km:
            nearest_km = d_km
            nearest = station
    return nearest

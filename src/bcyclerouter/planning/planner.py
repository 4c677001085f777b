from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from bcyclerouter.errors import NotReadyError, PlanningError, SeasonClosedError
from bcyclerouter.gis.bounds import SERVICE_AREA_PADDING_MILES, contains
from bcyclerouter.planning.links import build_bicycling_link, build_walking_link
from bcyclerouter.planning.nearest import any_station, has_bikes, has_docks, pick_nearest
from bcyclerouter.planning.validation import (
    DESTINATION_NOT_FOUND_MESSAGE,
    ORIGIN_NOT_FOUND_MESSAGE,
    OUTSIDE_SERVICE_MESSAGE,
    OriginMode,
)
from bcyclerouter.schemas.core import (
    Bounds,
    GeocodeSuggestion,
    LatLon,
    NearestStationResult,
    ServiceArea,
    Station,
    TripPlan,
)
from bcyclerouter.stations.directory import StationDirectory, load_service_area
from bcyclerouter.utils.geo import distance_mi


logger = logging.getLogger(__name__)

NO_STATIONS_MESSAGE = "No nearby stations found."
NO_PICKUP_MESSAGE = "No nearby stations with bikes available."
NO_DROPOFF_MESSAGE = "No stations with open docks near your destination."

Destination = Union[LatLon, GeocodeSuggestion]


def _require_snapshot(
    stations: Optional[Sequence[Station]], bounds: Optional[Bounds]
) -> tuple[Sequence[Station], Bounds]:
    if stations is None or bounds is None:
        raise NotReadyError()
    return stations, bounds


def _check_origin(origin: LatLon, bounds: Bounds, origin_mode: OriginMode) -> None:
    if not contains(bounds, origin.lat, origin.lon):
        # Typed text that resolves outside the area reads as a lookup miss; a GPS fix does not.
        raise PlanningError(ORIGIN_NOT_FOUND_MESSAGE if origin_mode == "manual" else OUTSIDE_SERVICE_MESSAGE)


def plan_nearest_station(
    origin: LatLon,
    stations: Optional[Sequence[Station]],
    bounds: Optional[Bounds],
    *,
    origin_mode: OriginMode = "manual",
) -> NearestStationResult:
    """
    Nearest station with a bike to `origin`, or the nearest operational station as a fallback.
    """

    stations, bounds = _require_snapshot(stations, bounds)
    _check_origin(origin, bounds, origin_mode)

    is_fallback = False
    station = pick_nearest(stations, origin, has_bikes)
    if station is None:
        station = pick_nearest(stations, origin, any_station)
        is_fallback = True
    if station is None:
        raise PlanningError(NO_STATIONS_MESSAGE)

    return NearestStationResult(
        station=station,
        distance_mi=distance_mi(origin, station.point),
        navigation_link=build_walking_link(origin, station.point),
        is_fallback=is_fallback,
    )


def plan_trip(
    origin: LatLon,
    destination: Destination,
    stations: Optional[Sequence[Station]],
    bounds: Optional[Bounds],
    *,
    origin_mode: OriginMode = "manual",
) -> TripPlan:
    """
    Walk to the nearest bike, ride to the nearest open dock by the destination, walk the rest.

    Either a complete plan is returned or `PlanningError` is raised with a user-facing message.
    """

    stations, bounds = _require_snapshot(stations, bounds)

    if isinstance(destination, GeocodeSuggestion):
        dest_point = destination.point
        dest_label: Optional[str] = destination.label
    else:
        dest_point = destination
        dest_label = None

    _check_origin(origin, bounds, origin_mode)
    if not contains(bounds, dest_point.lat, dest_point.lon):
        raise PlanningError(DESTINATION_NOT_FOUND_MESSAGE)

    pickup = pick_nearest(stations, origin, has_bikes)
    if pickup is None:
        raise PlanningError(NO_PICKUP_MESSAGE)

    dropoff = pick_nearest(stations, dest_point, has_docks, require_renting=False)
    if dropoff is None:
        raise PlanningError(NO_DROPOFF_MESSAGE)

    return TripPlan(
        pickup=pickup,
        dropoff=dropoff,
        navigation_link=build_bicycling_link(
            origin,
            pickup.point,
            dropoff.point,
            dest_point,
            destination_label=dest_label,
        ),
        walk_to_pickup_mi=distance_mi(origin, pickup.point),
        bike_leg_mi=distance_mi(pickup.point, dropoff.point),
        walk_from_dropoff_mi=distance_mi(dropoff.point, dest_point),
    )


class TripPlanner:
    """
    Runs the planning operations against the directory's current service area.
    """

    def __init__(
        self,
        directory: StationDirectory,
        *,
        padding_miles: float = SERVICE_AREA_PADDING_MILES,
    ) -> None:
        self._directory = directory
        self._padding_miles = padding_miles

    @property
    def directory(self) -> StationDirectory:
        return self._directory

    async def service_area(self, *, force_refresh: bool = False) -> ServiceArea:
        return await load_service_area(
            self._directory,
            padding_miles=self._padding_miles,
            force_refresh=force_refresh,
        )

    async def _open_area(self) -> ServiceArea:
        area = await self.service_area()
        if area.season_closed:
            raise SeasonClosedError()
        return area

    async def plan_nearest_station(
        self, origin: LatLon, *, origin_mode: OriginMode = "manual"
    ) -> NearestStationResult:
        area = await self._open_area()
        result = plan_nearest_station(origin, area.stations, area.bounds, origin_mode=origin_mode)
        logger.debug("Nearest station %s (fallback=%s)", result.station.station_id, result.is_fallback)
        return result

    async def plan_trip(
        self,
        origin: LatLon,
        destination: Destination,
        *,
        origin_mode: OriginMode = "manual",
    ) -> TripPlan:
        area = await self._open_area()
        plan = plan_trip(origin, destination, area.stations, area.bounds, origin_mode=origin_mode)
        logger.debug("Planned trip %s -> %s", plan.pickup.station_id, plan.dropoff.station_id)
        return plan

from __future__ import annotations

# `logging` records unexpected upstream failures; user-facing validation errors are not logged.
import logging
from typing import Optional

# FastAPI primitives:
# - `APIRouter` groups endpoints so the app factory can include them cleanly.
# - `Depends` injects the service stored on `app.state` per request.
# - `HTTPException` turns our error taxonomy into status codes + `{"detail": ...}` payloads.
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from bcyclerouter.api.schemas import (
    AppConfigOut,
    BoundsOut,
    NearestIn,
    NearestOut,
    PlanIn,
    ServiceAreaOut,
    ShowcaseIn,
    ShowcaseOut,
    StationOut,
    StationsResponseOut,
    SuggestionOut,
    TripPlanOut,
)
from bcyclerouter.api.service import RouterService
from bcyclerouter.errors import FetchError, NotReadyError, PlanningError, RouterError, SeasonClosedError
from bcyclerouter.planning.planner import Destination
from bcyclerouter.schemas.core import GeocodeSuggestion, LatLon, Station
from bcyclerouter.utils.geo import format_distance


logger = logging.getLogger(__name__)

router = APIRouter()


def get_service(request: Request) -> RouterService:
    return request.app.state.router_service  # type: ignore[attr-defined]


def _http_error(exc: RouterError) -> HTTPException:
    # Order matters: PlaceNotFoundError is a PlanningError, MalformedFeedError a SeasonClosedError.
    if isinstance(exc, PlanningError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, NotReadyError):
        return HTTPException(status_code=503, detail=str(exc))
    if isinstance(exc, SeasonClosedError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, FetchError):
        logger.warning("Upstream fetch failed: %s", exc)
        return HTTPException(status_code=502, detail=str(exc))
    logger.error("Unhandled router error: %s", exc)
    return HTTPException(status_code=500, detail=str(exc))


def _station_out(station: Station) -> StationOut:
    return StationOut(
        id=station.station_id,
        name=station.name,
        lat=station.lat,
        lon=station.lon,
        is_installed=station.is_installed,
        is_renting=station.is_renting,
        is_returning=station.is_returning,
        bikes_available=station.bikes_available,
        docks_available=station.docks_available,
    )


@router.get("/config", response_model=AppConfigOut)
def get_config(service: RouterService = Depends(get_service)) -> AppConfigOut:
    return AppConfigOut(**service.describe())


@router.get("/stations", response_model=StationsResponseOut)
async def list_stations(
    allow_closed: bool = Query(default=False),
    force_refresh: bool = Query(default=False),
    service: RouterService = Depends(get_service),
) -> StationsResponseOut:
    try:
        stations = await service.list_stations(allow_closed=allow_closed, force_refresh=force_refresh)
    except RouterError as exc:
        raise _http_error(exc) from exc
    return StationsResponseOut(
        items=[_station_out(s) for s in stations],
        meta={"count": len(stations), "allow_closed": allow_closed, "showcase_mode": service.showcase_mode},
    )


@router.get("/service-area", response_model=ServiceAreaOut)
async def get_service_area(
    force_refresh: bool = Query(default=False),
    service: RouterService = Depends(get_service),
) -> ServiceAreaOut:
    try:
        area = await service.service_area(force_refresh=force_refresh)
    except RouterError as exc:
        raise _http_error(exc) from exc
    bounds = None
    if area.bounds is not None:
        bounds = BoundsOut(
            north=area.bounds.north,
            south=area.bounds.south,
            east=area.bounds.east,
            west=area.bounds.west,
        )
    return ServiceAreaOut(
        bounds=bounds,
        season_closed=area.season_closed,
        station_count=len(area.stations),
        showcase_mode=service.showcase_mode,
    )


@router.get("/suggest", response_model=list[SuggestionOut])
async def suggest(
    q: str = Query(default=""),
    limit: Optional[int] = Query(default=None, ge=1, le=10),
    service: RouterService = Depends(get_service),
) -> list[SuggestionOut]:
    try:
        suggestions = await service.suggest(q, limit=limit)
    except RouterError as exc:
        raise _http_error(exc) from exc
    return [SuggestionOut(lat=s.lat, lon=s.lon, label=s.label) for s in suggestions]


@router.get("/geocode", response_model=SuggestionOut)
async def geocode(
    q: str = Query(min_length=1),
    service: RouterService = Depends(get_service),
) -> SuggestionOut:
    try:
        place = await service.resolve_place(q)
    except RouterError as exc:
        raise _http_error(exc) from exc
    return SuggestionOut(lat=place.lat, lon=place.lon, label=place.label)


@router.post("/nearest", response_model=NearestOut)
async def nearest(body: NearestIn, service: RouterService = Depends(get_service)) -> NearestOut:
    origin = LatLon(lat=body.origin.lat, lon=body.origin.lon)
    try:
        result = await service.nearest(origin, origin_mode=body.origin_mode)
    except RouterError as exc:
        raise _http_error(exc) from exc
    return NearestOut(
        station=_station_out(result.station),
        distance_mi=result.distance_mi,
        distance_text=format_distance(result.distance_mi),
        navigation_link=result.navigation_link,
        is_fallback=result.is_fallback,
    )


@router.post("/plan", response_model=TripPlanOut)
async def plan(body: PlanIn, service: RouterService = Depends(get_service)) -> TripPlanOut:
    origin = LatLon(lat=body.origin.lat, lon=body.origin.lon)
    destination: Destination
    if body.destination.label:
        destination = GeocodeSuggestion(lat=body.destination.lat, lon=body.destination.lon, label=body.destination.label)
    else:
        destination = LatLon(lat=body.destination.lat, lon=body.destination.lon)

    try:
        trip = await service.plan(origin, destination, origin_mode=body.origin_mode)
    except RouterError as exc:
        raise _http_error(exc) from exc
    return TripPlanOut(
        pickup=_station_out(trip.pickup),
        dropoff=_station_out(trip.dropoff),
        navigation_link=trip.navigation_link,
        walk_to_pickup_mi=trip.walk_to_pickup_mi,
        bike_leg_mi=trip.bike_leg_mi,
        walk_from_dropoff_mi=trip.walk_from_dropoff_mi,
        walk_to_pickup_text=format_distance(trip.walk_to_pickup_mi),
        bike_leg_text=format_distance(trip.bike_leg_mi),
        walk_from_dropoff_text=format_distance(trip.walk_from_dropoff_mi),
    )


@router.post("/showcase", response_model=ShowcaseOut)
async def set_showcase(body: ShowcaseIn, service: RouterService = Depends(get_service)) -> ShowcaseOut:
    return ShowcaseOut(showcase_mode=service.set_showcase_mode(body.enabled))

from __future__ import annotations

import asyncio
from dataclasses import replace
from urllib.parse import parse_qs, urlsplit

import pytest

from bcyclerouter.errors import NotReadyError, PlanningError, SeasonClosedError
from bcyclerouter.gis.bounds import service_area_bounds
from bcyclerouter.ingestion.gbfs_client import merge_stations, station_rows
from bcyclerouter.planning.planner import (
    NO_DROPOFF_MESSAGE,
    NO_PICKUP_MESSAGE,
    TripPlanner,
    plan_nearest_station,
    plan_trip,
)
from bcyclerouter.schemas.core import GeocodeSuggestion, LatLon
from bcyclerouter.stations.directory import StationDirectory

from conftest import MADISON_STATIONS, FakeGBFS, feed_pair


BASCOM = LatLon(lat=43.0731, lon=-89.4012)
NEAR_CAPITOL = LatLon(lat=43.0748, lon=-89.3843)
OUTSIDE = LatLon(lat=43.30, lon=-89.40)


@pytest.fixture
def stations():  # type: ignore[no-untyped-def]
    information, status = feed_pair(MADISON_STATIONS)
    return merge_stations(station_rows(information), station_rows(status))  # type: ignore[arg-type]


@pytest.fixture
def bounds(stations):  # type: ignore[no-untyped-def]
    return service_area_bounds(stations, padding_miles=1.0)


def _query(link: str) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(urlsplit(link).query).items()}


def test_trip_picks_nearest_bike_and_nearest_dock(stations, bounds) -> None:  # type: ignore[no-untyped-def]
    plan = plan_trip(BASCOM, NEAR_CAPITOL, stations, bounds)

    # "campus" sits on the origin but has no bikes; "union" is the closest with bikes.
    assert plan.pickup.station_id == "union"
    assert plan.dropoff.station_id == "capitol"
    assert plan.walk_to_pickup_mi > 0
    assert plan.bike_leg_mi > plan.walk_from_dropoff_mi
    assert plan.total_mi == pytest.approx(plan.walk_to_pickup_mi + plan.bike_leg_mi + plan.walk_from_dropoff_mi)

    query = _query(plan.navigation_link)
    assert plan.navigation_link.startswith("https://www.google.com/maps/dir/?")
    assert query == {
        "api": "1",
        "origin": "43.0731,-89.4012",
        "destination": "43.0748,-89.3843",
        "waypoints": "43.0766,-89.3999|43.0747,-89.3841",
        "travelmode": "bicycling",
    }


def test_trip_link_uses_destination_label(stations, bounds) -> None:  # type: ignore[no-untyped-def]
    destination = GeocodeSuggestion(lat=NEAR_CAPITOL.lat, lon=NEAR_CAPITOL.lon, label="Wisconsin State Capitol")

    plan = plan_trip(BASCOM, destination, stations, bounds)

    assert _query(plan.navigation_link)["destination"] == "Wisconsin State Capitol"


def test_dropoff_skips_stations_without_docks(stations, bounds) -> None:  # type: ignore[no-untyped-def]
    # "union" has zero docks, so a trip ending right next to it docks at "campus".
    plan = plan_trip(NEAR_CAPITOL, LatLon(lat=43.0766, lon=-89.3999), stations, bounds)
    assert plan.pickup.station_id == "capitol"
    assert plan.dropoff.station_id == "campus"


@pytest.mark.parametrize(
    "destination",
    [OUTSIDE, GeocodeSuggestion(lat=OUTSIDE.lat, lon=OUTSIDE.lon, label="Somewhere north")],
)
def test_destination_outside_service_area_reads_as_not_found(stations, bounds, destination) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(PlanningError, match="^Destination not found.$"):
        plan_trip(BASCOM, destination, stations, bounds)


def test_origin_outside_message_depends_on_origin_mode(stations, bounds) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(PlanningError, match="^Starting location not found.$"):
        plan_trip(OUTSIDE, NEAR_CAPITOL, stations, bounds, origin_mode="manual")
    with pytest.raises(PlanningError, match="^Current location outside of the service area.$"):
        plan_trip(OUTSIDE, NEAR_CAPITOL, stations, bounds, origin_mode="device")
    with pytest.raises(PlanningError, match="^Current location outside of the service area.$"):
        plan_nearest_station(OUTSIDE, stations, bounds, origin_mode="device")


def test_planning_before_stations_load_is_not_ready(stations, bounds) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(NotReadyError):
        plan_trip(BASCOM, NEAR_CAPITOL, None, bounds)
    with pytest.raises(NotReadyError):
        plan_nearest_station(BASCOM, stations, None)


def test_missing_pickup_or_dropoff(stations, bounds) -> None:  # type: ignore[no-untyped-def]
    no_bikes = [replace(s, bikes_available=0) for s in stations]
    no_docks = [replace(s, docks_available=0) for s in stations]

    with pytest.raises(PlanningError, match=f"^{NO_PICKUP_MESSAGE}$"):
        plan_trip(BASCOM, NEAR_CAPITOL, no_bikes, bounds)
    with pytest.raises(PlanningError, match=f"^{NO_DROPOFF_MESSAGE}$"):
        plan_trip(BASCOM, NEAR_CAPITOL, no_docks, bounds)


def test_nearest_station_with_bikes(stations, bounds) -> None:  # type: ignore[no-untyped-def]
    result = plan_nearest_station(BASCOM, stations, bounds)

    assert result.station.station_id == "union"
    assert not result.is_fallback
    assert result.distance_mi > 0
    assert _query(result.navigation_link) == {
        "api": "1",
        "origin": "43.0731,-89.4012",
        "destination": "43.0766,-89.3999",
        "travelmode": "walking",
    }


def test_nearest_station_falls_back_when_no_bikes_anywhere(stations, bounds) -> None:  # type: ignore[no-untyped-def]
    empty = [replace(s, bikes_available=0) for s in stations]

    result = plan_nearest_station(BASCOM, empty, bounds)

    assert result.is_fallback
    assert result.station.station_id == "campus"
    assert result.distance_mi == 0.0


def test_trip_planner_runs_against_directory(madison_feeds) -> None:  # type: ignore[no-untyped-def]
    gbfs = FakeGBFS(*madison_feeds)
    planner = TripPlanner(StationDirectory(gbfs))  # type: ignore[arg-type]

    async def scenario():  # type: ignore[no-untyped-def]
        nearest = await planner.plan_nearest_station(BASCOM)
        plan = await planner.plan_trip(BASCOM, NEAR_CAPITOL)
        return nearest, plan

    nearest, plan = asyncio.run(scenario())

    assert nearest.station.station_id == "union"
    assert plan.dropoff.station_id == "capitol"
    assert gbfs.info_calls == 1


def test_trip_planner_refuses_while_season_closed() -> None:
    specs = [dict(spec, renting=0, returning=0) for spec in MADISON_STATIONS]
    planner = TripPlanner(StationDirectory(FakeGBFS(*feed_pair(specs))))  # type: ignore[arg-type]

    area = asyncio.run(planner.service_area())
    assert area.season_closed
    assert len(area.stations) == 4

    with pytest.raises(SeasonClosedError):
        asyncio.run(planner.plan_trip(BASCOM, NEAR_CAPITOL))
    with pytest.raises(SeasonClosedError):
        asyncio.run(planner.plan_nearest_station(BASCOM))


def test_bad_feed_row_does_not_break_planning() -> None:
    specs = MADISON_STATIONS + [{"id": "bogus", "lat": 95.0, "lon": -89.39, "bikes": 9, "docks": 9}]
    planner = TripPlanner(StationDirectory(FakeGBFS(*feed_pair(specs))))  # type: ignore[arg-type]

    result = asyncio.run(planner.plan_nearest_station(LatLon(lat=43.0747, lon=-89.3841)))

    assert result.station.station_id == "capitol"

from __future__ import annotations

import math

from bcyclerouter.planning.nearest import any_station, has_bikes, has_docks, pick_nearest
from bcyclerouter.schemas.core import LatLon, Station
from bcyclerouter.utils.geo import distance_km


ORIGIN = LatLon(lat=43.0731, lon=-89.4012)


def make_station(**overrides) -> Station:  # type: ignore[no-untyped-def]
    fields = dict(
        station_id="id",
        name="Station",
        lat=43.0731,
        lon=-89.4012,
        is_installed=True,
        is_renting=True,
        is_returning=True,
        bikes_available=0,
        docks_available=0,
    )
    fields.update(overrides)
    return Station(**fields)


def test_returns_closest_station_matching_predicate_and_operational_filters() -> None:
    stations = [
        make_station(station_id="near-no-bikes", lat=43.0732, lon=-89.4012, bikes_available=0),
        make_station(station_id="far-with-bikes", lat=43.08, lon=-89.41, bikes_available=5),
        make_station(station_id="near-with-bikes", lat=43.0735, lon=-89.4013, bikes_available=3),
    ]

    nearest = pick_nearest(stations, ORIGIN, has_bikes)
    assert nearest is not None
    assert nearest.station_id == "near-with-bikes"


def test_skips_the_empty_station_at_the_origin() -> None:
    stations = [
        make_station(station_id="a", lat=43.0731, lon=-89.4012, bikes_available=0, docks_available=5),
        make_station(station_id="b", lat=43.08, lon=-89.41, bikes_available=3, docks_available=0),
    ]
    nearest = pick_nearest(stations, ORIGIN, has_bikes)
    assert nearest is not None and nearest.station_id == "b"


def test_allows_opting_out_of_returning_requirement() -> None:
    stations = [
        make_station(station_id="closed-returning", is_returning=False, docks_available=8, lat=43.0732),
        make_station(station_id="open-returning", docks_available=8, lat=43.09, lon=-89.44),
    ]

    strict = pick_nearest(stations, ORIGIN, has_docks)
    relaxed = pick_nearest(stations, ORIGIN, has_docks, require_returning=False)
    assert strict is not None and strict.station_id == "open-returning"
    assert relaxed is not None and relaxed.station_id == "closed-returning"


def test_dropoff_accepts_station_that_is_not_renting() -> None:
    stations = [
        make_station(station_id="not-renting", is_renting=False, docks_available=2, lat=43.0733),
        make_station(station_id="renting", docks_available=2, lat=43.10),
    ]
    dropoff = pick_nearest(stations, ORIGIN, has_docks, require_renting=False)
    assert dropoff is not None and dropoff.station_id == "not-renting"


def test_returns_none_when_no_station_matches() -> None:
    stations = [
        make_station(station_id="one", is_installed=False, bikes_available=9),
        make_station(station_id="two", is_renting=False, bikes_available=9),
    ]
    assert pick_nearest(stations, ORIGIN, has_bikes) is None
    assert pick_nearest([], ORIGIN, any_station) is None


def test_ties_keep_first_station_in_input_order() -> None:
    stations = [
        make_station(station_id="first", lat=43.08, bikes_available=1),
        make_station(station_id="second", lat=43.08, bikes_available=1),
    ]
    nearest = pick_nearest(stations, ORIGIN, has_bikes)
    assert nearest is not None and nearest.station_id == "first"


def test_ignores_stations_without_finite_coordinates() -> None:
    stations = [
        make_station(station_id="nan", lat=math.nan, bikes_available=4),
        make_station(station_id="ok", lat=43.2, bikes_available=4),
    ]
    nearest = pick_nearest(stations, ORIGIN, has_bikes)
    assert nearest is not None and nearest.station_id == "ok"


def test_result_is_minimal_among_eligible_stations() -> None:
    stations = [
        make_station(station_id=f"s{i}", lat=43.0 + i * 0.013, lon=-89.5 + (i % 4) * 0.031, bikes_available=i % 3)
        for i in range(25)
    ]
    nearest = pick_nearest(stations, ORIGIN, has_bikes)
    eligible = [s for s in stations if s.bikes_available > 0]
    assert nearest is not None
    best = min(distance_km(ORIGIN, s.point) for s in eligible)
    assert distance_km(ORIGIN, nearest.point) == best

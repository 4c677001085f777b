from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

import pytest


def pytest_configure() -> None:
    """
    Keep a `src/` layout while allowing `pytest` to run without requiring an editable install.
    """

    project_root = Path(__file__).resolve().parents[1]
    src_path = project_root / "src"
    sys.path.insert(0, str(src_path))


def gbfs_information(rows: list[dict[str, Any]]) -> dict[str, Any]:
    return {"last_updated": 1767225600, "ttl": 60, "data": {"stations": rows}}


def gbfs_status(rows: list[dict[str, Any]]) -> dict[str, Any]:
    return {"last_updated": 1767225600, "ttl": 60, "data": {"stations": rows}}


def feed_pair(specs: list[dict[str, Any]]) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Build matching GBFS information/status documents from compact station specs.
    """

    info_rows = []
    status_rows = []
    for spec in specs:
        info_rows.append(
            {"station_id": spec["id"], "name": spec.get("name", f"Station {spec['id']}"), "lat": spec["lat"], "lon": spec["lon"]}
        )
        status_rows.append(
            {
                "station_id": spec["id"],
                "is_installed": spec.get("installed", 1),
                "is_renting": spec.get("renting", 1),
                "is_returning": spec.get("returning", 1),
                "num_bikes_available": spec.get("bikes", 3),
                "num_docks_available": spec.get("docks", 5),
            }
        )
    return gbfs_information(info_rows), gbfs_status(status_rows)


class FakeGBFS:
    """Stands in for `GBFSClient`; counts calls so tests can assert on cache behavior."""

    def __init__(self, information: Any, status: Any, *, error: Optional[Exception] = None) -> None:
        self.information = information
        self.status = status
        self.error = error
        self.info_calls = 0
        self.status_calls = 0

    def fetch_station_information(self) -> Any:
        self.info_calls += 1
        if self.error is not None:
            raise self.error
        return self.information

    def fetch_station_status(self) -> Any:
        self.status_calls += 1
        if self.error is not None:
            raise self.error
        return self.status


class FakeHttp:
    """Stands in for `JsonHttpClient`; returns canned JSON and records request params."""

    def __init__(self, response: Any = None, *, error: Optional[Exception] = None) -> None:
        self.response = response if response is not None else []
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def get_json(self, url: str, *, params=None, headers=None, label=None):  # type: ignore[no-untyped-def]
        self.calls.append((url, dict(params or {})))
        if self.error is not None:
            raise self.error
        return self.response


# Madison-ish layout: a few stations around the Capitol square and campus.
MADISON_STATIONS = [
    {"id": "capitol", "lat": 43.0747, "lon": -89.3841, "bikes": 4, "docks": 6},
    {"id": "campus", "lat": 43.0731, "lon": -89.4012, "bikes": 0, "docks": 5},
    {"id": "union", "lat": 43.0766, "lon": -89.3999, "bikes": 2, "docks": 0},
    {"id": "east", "lat": 43.0900, "lon": -89.3600, "bikes": 7, "docks": 9},
]


@pytest.fixture
def madison_feeds() -> tuple[dict[str, Any], dict[str, Any]]:
    return feed_pair(MADISON_STATIONS)

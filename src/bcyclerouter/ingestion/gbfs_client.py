from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional, Sequence

from bcyclerouter.config.models import GBFSSettings
from bcyclerouter.ingestion.http_base import JsonHttpClient
from bcyclerouter.schemas.core import Station


logger = logging.getLogger(__name__)


def station_rows(payload: Any) -> Optional[list[Mapping[str, Any]]]:
    """
    Extract `data.stations` from a GBFS document.

    Returns None when the document does not have the expected shape; callers decide whether
    that means "closed for the season" (strict) or "no stations" (relaxed).
    """

    if not isinstance(payload, Mapping):
        return None
    data = payload.get("data")
    if not isinstance(data, Mapping):
        return None
    stations = data.get("stations")
    if not isinstance(stations, list):
        return None
    return [row for row in stations if isinstance(row, Mapping)]


def _finite_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _count(value: Any) -> int:
    number = _finite_float(value)
    if number is None:
        return 0
    return max(int(number), 0)


def _flag(value: Any) -> bool:
    # GBFS v1 publishes 0/1 integers, v2+ publishes booleans.
    return bool(value)


def merge_stations(
    information: Sequence[Mapping[str, Any]],
    status: Sequence[Mapping[str, Any]],
) -> list[Station]:
    """
    Join station metadata onto live status by `station_id`.

    Status drives the output (a station only exists if it reports a status); metadata supplies
    name and coordinates. Stations without finite, in-range coordinates are dropped.
    """

    info_by_id: dict[str, Mapping[str, Any]] = {}
    for row in information:
        station_id = row.get("station_id")
        if station_id is not None:
            info_by_id[str(station_id)] = row

    stations: list[Station] = []
    dropped = 0
    for row in status:
        station_id = row.get("station_id")
        if station_id is None:
            dropped += 1
            continue
        station_id = str(station_id)
        base = info_by_id.get(station_id, {})

        lat = _finite_float(base.get("lat"))
        lon = _finite_float(base.get("lon"))
        if lat is None or lon is None or not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            dropped += 1
            continue

        stations.append(
            Station(
                station_id=station_id,
                name=str(base.get("name") or row.get("name") or station_id),
                lat=lat,
                lon=lon,
                is_installed=_flag(row.get("is_installed")),
                is_renting=_flag(row.get("is_renting")),
                is_returning=_flag(row.get("is_returning")),
                bikes_available=_count(row.get("num_bikes_available")),
                docks_available=_count(row.get("num_docks_available")),
            )
        )

    if dropped:
        logger.debug("Dropped %s status rows without usable coordinates", dropped)
    return stations


class GBFSClient:
    """
    Reads the two GBFS documents that describe one bike-share system.

    Calls are blocking; the station directory runs them concurrently off the event loop.
    """

    def __init__(self, *, http: JsonHttpClient, settings: GBFSSettings) -> None:
        self._http = http
        self._settings = settings

    def fetch_station_information(self) -> Any:
        return self._http.get_json(self._settings.station_information_url, label="station information")

    def fetch_station_status(self) -> Any:
        return self._http.get_json(self._settings.station_status_url, label="station status")

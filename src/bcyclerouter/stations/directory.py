from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import time
from typing import Callable, Optional

from bcyclerouter.config.models import StationSettings
from bcyclerouter.errors import MalformedFeedError, SeasonClosedError
from bcyclerouter.gis.bounds import SERVICE_AREA_PADDING_MILES, service_area_bounds
from bcyclerouter.ingestion.gbfs_client import GBFSClient, merge_stations, station_rows
from bcyclerouter.schemas.core import ServiceArea, Station
from bcyclerouter.stations.season import apply_showcase, season_status


logger = logging.getLogger(__name__)


@dataclass
class _CacheEntry:
    stations: Optional[list[Station]] = None
    fetched_at: float = 0.0
    in_flight: Optional["asyncio.Task[list[Station]]"] = None


class StationDirectory:
    """
    Merged, cached view of the GBFS station metadata and live status feeds.

    Two independent cache entries are kept: "strict" loads raise `SeasonClosedError` when the
    system looks closed, "relaxed" loads (`allow_closed=True`) always return whatever stations
    exist so a closed system can still be drawn on a map.

    Construct one directory per process and share it; all state lives on the instance and is
    only touched from the event loop.
    """

    def __init__(
        self,
        gbfs: GBFSClient,
        *,
        settings: Optional[StationSettings] = None,
        showcase_mode: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._gbfs = gbfs
        self._settings = settings or StationSettings()
        self._showcase = showcase_mode
        self._clock = clock
        self._generation = 0
        self._entries = {False: _CacheEntry(), True: _CacheEntry()}

    @property
    def settings(self) -> StationSettings:
        return self._settings

    @property
    def showcase_mode(self) -> bool:
        return self._showcase

    def set_showcase_mode(self, enabled: bool) -> None:
        enabled = bool(enabled)
        if enabled == self._showcase:
            return
        self._showcase = enabled
        logger.info("Showcase mode %s", "enabled" if enabled else "disabled")
        self.invalidate()

    def invalidate(self) -> None:
        """
        Drop both cache entries. Fetches already in flight still answer their own callers but
        no longer write into the cache.
        """

        self._generation += 1
        self._entries = {False: _CacheEntry(), True: _CacheEntry()}

    async def load_stations(self, *, force_refresh: bool = False, allow_closed: bool = False) -> list[Station]:
        entry = self._entries[allow_closed]

        if not force_refresh:
            if entry.stations is not None and (self._clock() - entry.fetched_at) < self._settings.cache_ttl_s:
                return entry.stations
            if entry.in_flight is not None:
                # Shield so one cancelled caller does not cancel the fetch shared by the others.
                return await asyncio.shield(entry.in_flight)

        task = asyncio.ensure_future(self._refresh(entry, allow_closed=allow_closed, generation=self._generation))
        entry.in_flight = task
        return await asyncio.shield(task)

    async def _refresh(self, entry: _CacheEntry, *, allow_closed: bool, generation: int) -> list[Station]:
        try:
            stations = await self._fetch(allow_closed=allow_closed)
        finally:
            if entry.in_flight is asyncio.current_task():
                entry.in_flight = None

        if generation == self._generation:
            entry.stations = stations
            entry.fetched_at = self._clock()
        return stations

    async def _fetch(self, *, allow_closed: bool) -> list[Station]:
        information, status = await asyncio.gather(
            asyncio.to_thread(self._gbfs.fetch_station_information),
            asyncio.to_thread(self._gbfs.fetch_station_status),
        )
        info_rows = station_rows(information)
        status_rows = station_rows(status)

        if self._showcase:
            stations = merge_stations(info_rows or [], status_rows or [])
            return apply_showcase(
                stations,
                min_bikes=self._settings.showcase.min_bikes,
                min_docks=self._settings.showcase.min_docks,
            )

        if not allow_closed and (info_rows is None or status_rows is None):
            logger.info("GBFS feed missing data.stations; treating the system as closed")
            raise MalformedFeedError()

        stations = merge_stations(info_rows or [], status_rows or [])
        if not allow_closed:
            status_summary = season_status(stations)
            if status_summary.is_closed(self._settings.closed_ratio_threshold):
                logger.info(
                    "System looks closed (closed_ratio=%.2f, total_bikes=%s)",
                    status_summary.closed_ratio,
                    status_summary.total_bikes,
                )
                raise SeasonClosedError()

        logger.debug("Loaded %s stations (allow_closed=%s)", len(stations), allow_closed)
        return stations


async def load_service_area(
    directory: StationDirectory,
    *,
    padding_miles: float = SERVICE_AREA_PADDING_MILES,
    force_refresh: bool = False,
) -> ServiceArea:
    """
    Current stations plus padded bounds, falling back to the relaxed view when the system is closed.
    """

    season_closed = False
    try:
        stations = await directory.load_stations(force_refresh=force_refresh)
    except SeasonClosedError:
        season_closed = True
        stations = await directory.load_stations(force_refresh=force_refresh, allow_closed=True)

    return ServiceArea(
        stations=stations,
        bounds=service_area_bounds(stations, padding_miles=padding_miles),
        season_closed=season_closed,
    )

from __future__ import annotations

import logging
from typing import Any, Optional

from bcyclerouter.config.models import AppConfig
from bcyclerouter.errors import RouterError
from bcyclerouter.ingestion.gbfs_client import GBFSClient
from bcyclerouter.ingestion.http_base import JsonHttpClient
from bcyclerouter.ingestion.nominatim import NominatimGeocoder, is_query_ready
from bcyclerouter.planning.planner import Destination, TripPlanner
from bcyclerouter.planning.validation import OriginMode
from bcyclerouter.schemas.core import (
    GeocodeSuggestion,
    LatLon,
    NearestStationResult,
    ServiceArea,
    Station,
    TripPlan,
)
from bcyclerouter.stations.directory import StationDirectory


logger = logging.getLogger(__name__)


class RouterService:
    """
    Thin application layer between HTTP routes and the planning core.

    Owns the process-wide station directory, the geocoder and their HTTP sessions. Collaborators
    can be injected so tests never touch the network.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        gbfs: Optional[GBFSClient] = None,
        geocoder: Optional[NominatimGeocoder] = None,
    ) -> None:
        self._config = config
        self._clients: list[JsonHttpClient] = []

        if gbfs is None:
            gbfs_http = JsonHttpClient(
                timeout_s=config.gbfs.timeout_s,
                max_retries=config.gbfs.max_retries,
                user_agent=config.gbfs.user_agent,
            )
            self._clients.append(gbfs_http)
            gbfs = GBFSClient(http=gbfs_http, settings=config.gbfs)

        if geocoder is None:
            geocoder_http = JsonHttpClient(
                timeout_s=config.geocoder.timeout_s,
                min_request_interval_s=config.geocoder.min_request_interval_s,
                user_agent=config.geocoder.user_agent,
            )
            self._clients.append(geocoder_http)
            geocoder = NominatimGeocoder(http=geocoder_http, settings=config.geocoder)

        self._directory = StationDirectory(
            gbfs,
            settings=config.stations,
            showcase_mode=config.app.showcase_mode,
        )
        self._geocoder = geocoder
        self._planner = TripPlanner(self._directory, padding_miles=config.planning.service_area_padding_mi)

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def showcase_mode(self) -> bool:
        return self._directory.showcase_mode

    def set_showcase_mode(self, enabled: bool) -> bool:
        self._directory.set_showcase_mode(enabled)
        return self._directory.showcase_mode

    async def list_stations(self, *, allow_closed: bool = False, force_refresh: bool = False) -> list[Station]:
        return await self._directory.load_stations(allow_closed=allow_closed, force_refresh=force_refresh)

    async def service_area(self, *, force_refresh: bool = False) -> ServiceArea:
        return await self._planner.service_area(force_refresh=force_refresh)

    async def suggest(self, text: str, *, limit: Optional[int] = None) -> list[GeocodeSuggestion]:
        settings = self._config.suggestions
        if not is_query_ready(text, min_length=settings.min_query_length):
            return []
        # Without a station snapshot the lookup still runs, just unbounded.
        bounds = None
        try:
            bounds = (await self.service_area()).bounds
        except RouterError as exc:
            logger.warning("Suggesting without service-area bounds: %s", exc)
        return await self._geocoder.suggest(text, bounds=bounds, limit=limit or settings.limit)

    async def resolve_place(self, text: str) -> GeocodeSuggestion:
        return await self._geocoder.resolve_place(text)

    async def nearest(self, origin: LatLon, *, origin_mode: OriginMode = "manual") -> NearestStationResult:
        return await self._planner.plan_nearest_station(origin, origin_mode=origin_mode)

    async def plan(
        self,
        origin: LatLon,
        destination: Destination,
        *,
        origin_mode: OriginMode = "manual",
    ) -> TripPlan:
        return await self._planner.plan_trip(origin, destination, origin_mode=origin_mode)

    def describe(self) -> dict[str, Any]:
        cfg = self._config
        return {
            "app_name": cfg.app.name,
            "showcase_mode": self.showcase_mode,
            "cache_ttl_s": cfg.stations.cache_ttl_s,
            "closed_ratio_threshold": cfg.stations.closed_ratio_threshold,
            "service_area_padding_mi": cfg.planning.service_area_padding_mi,
            "suggestion_debounce_ms": int(round(cfg.suggestions.debounce_s * 1000)),
            "suggestion_min_length": cfg.suggestions.min_query_length,
            "suggestion_limit": cfg.suggestions.limit,
        }

    def close(self) -> None:
        for client in self._clients:
            client.close()

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


DEFAULT_STATION_INFORMATION_URL = "https://gbfs.bcycle.com/bcycle_madison/station_information.json"
DEFAULT_STATION_STATUS_URL = "https://gbfs.bcycle.com/bcycle_madison/station_status.json"
DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_USER_AGENT = "bcyclerouter/0.1.0"


@dataclass(frozen=True)
class AppSettings:
    name: str = "BCycle Router"
    showcase_mode: bool = False


@dataclass(frozen=True)
class GBFSSettings:
    station_information_url: str = DEFAULT_STATION_INFORMATION_URL
    station_status_url: str = DEFAULT_STATION_STATUS_URL
    timeout_s: float = 30.0
    max_retries: int = 0
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True)
class GeocoderSettings:
    search_url: str = DEFAULT_GEOCODER_URL
    timeout_s: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT
    min_request_interval_s: float = 0.0
    # Appended to free-text lookups to bias results toward the service city (e.g. "Madison").
    query_suffix: Optional[str] = None


@dataclass(frozen=True)
class ShowcaseSettings:
    min_bikes: int = 12
    min_docks: int = 12


@dataclass(frozen=True)
class StationSettings:
    cache_ttl_s: float = 15.0
    closed_ratio_threshold: float = 0.9
    showcase: ShowcaseSettings = field(default_factory=ShowcaseSettings)


@dataclass(frozen=True)
class PlanningSettings:
    service_area_padding_mi: float = 1.0


@dataclass(frozen=True)
class SuggestionSettings:
    debounce_s: float = 0.2
    min_query_length: int = 3
    limit: int = 5


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s - %(message)s"
    file: Optional[Path] = None


@dataclass(frozen=True)
class AppConfig:
    app: AppSettings = field(default_factory=AppSettings)
    gbfs: GBFSSettings = field(default_factory=GBFSSettings)
    geocoder: GeocoderSettings = field(default_factory=GeocoderSettings)
    stations: StationSettings = field(default_factory=StationSettings)
    planning: PlanningSettings = field(default_factory=PlanningSettings)
    suggestions: SuggestionSettings = field(default_factory=SuggestionSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from bcyclerouter.config.models import (
    DEFAULT_GEOCODER_URL,
    DEFAULT_STATION_INFORMATION_URL,
    DEFAULT_STATION_STATUS_URL,
    DEFAULT_USER_AGENT,
    AppConfig,
    AppSettings,
    GBFSSettings,
    GeocoderSettings,
    LoggingSettings,
    PlanningSettings,
    ShowcaseSettings,
    StationSettings,
    SuggestionSettings,
)


DEFAULT_CONFIG_PATH = "config/default.json"

logger = logging.getLogger(__name__)


def load_dotenv_if_available(path: str = ".env") -> None:
    try:
        from dotenv import load_dotenv  # type: ignore
    except ModuleNotFoundError:
        return
    load_dotenv(path)


def _as_path(value: str, *, base_dir: Path) -> Path:
    candidate = Path(value)
    return candidate if candidate.is_absolute() else (base_dir / candidate)


def _parse_bool(raw: str) -> Optional[bool]:
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return None


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


def _positive(value: float, *, name: str) -> float:
    if value <= 0:
        raise ValueError(f"{name} must be > 0 (got {value})")
    return value


def _read_raw(config_path: Path, *, explicit: bool) -> Mapping[str, Any]:
    if not config_path.exists():
        if explicit:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        logger.debug("No config file at %s; using built-in defaults", config_path)
        return {}
    raw = json.loads(config_path.read_text(encoding="utf-8"))
    if not isinstance(raw, Mapping):
        raise ValueError(f"Config root must be a JSON object: {config_path}")
    return raw


def load_config(path: Optional[str | Path] = None, *, base_dir: Optional[Path] = None) -> AppConfig:
    """
    Load typed application config from JSON.

    - Explicit `path` wins, then `BCYCLEROUTER_CONFIG_PATH`, then `config/default.json`.
    - A missing default file yields built-in defaults; a missing explicit file is an error.
    - `.env` is loaded when python-dotenv is installed (dev convenience).
    - Feed URLs, showcase mode and log level can be overridden from the environment.
    """

    load_dotenv_if_available()

    env_path = os.getenv("BCYCLEROUTER_CONFIG_PATH")
    explicit = path is not None or bool(env_path)
    config_path = Path(path or env_path or DEFAULT_CONFIG_PATH).resolve()
    base_dir = (base_dir or Path.cwd()).resolve()

    raw = _read_raw(config_path, explicit=explicit)

    app_raw: Mapping[str, Any] = raw.get("app", {})
    showcase_mode = bool(app_raw.get("showcase_mode", False))
    env_showcase = os.getenv("BCYCLEROUTER_SHOWCASE_MODE")
    if env_showcase is not None:
        parsed = _parse_bool(env_showcase)
        if parsed is not None:
            showcase_mode = parsed
    app = AppSettings(
        name=str(app_raw.get("name", "BCycle Router")),
        showcase_mode=showcase_mode,
    )

    gbfs_raw: Mapping[str, Any] = raw.get("gbfs", {})
    gbfs = GBFSSettings(
        station_information_url=_env_str(
            "GBFS_STATION_INFORMATION_URL",
            str(gbfs_raw.get("station_information_url", DEFAULT_STATION_INFORMATION_URL)),
        ),
        station_status_url=_env_str(
            "GBFS_STATION_STATUS_URL",
            str(gbfs_raw.get("station_status_url", DEFAULT_STATION_STATUS_URL)),
        ),
        timeout_s=_positive(float(gbfs_raw.get("timeout_s", 30.0)), name="gbfs.timeout_s"),
        max_retries=int(gbfs_raw.get("max_retries", 0)),
        user_agent=str(gbfs_raw.get("user_agent", DEFAULT_USER_AGENT)),
    )
    if gbfs.max_retries < 0:
        raise ValueError(f"gbfs.max_retries must be >= 0 (got {gbfs.max_retries})")

    geocoder_raw: Mapping[str, Any] = raw.get("geocoder", {})
    suffix = geocoder_raw.get("query_suffix")
    geocoder = GeocoderSettings(
        search_url=str(geocoder_raw.get("search_url", DEFAULT_GEOCODER_URL)),
        timeout_s=_positive(float(geocoder_raw.get("timeout_s", 15.0)), name="geocoder.timeout_s"),
        user_agent=str(geocoder_raw.get("user_agent", DEFAULT_USER_AGENT)),
        min_request_interval_s=max(float(geocoder_raw.get("min_request_interval_s", 0.0)), 0.0),
        query_suffix=str(suffix) if suffix else None,
    )

    stations_raw: Mapping[str, Any] = raw.get("stations", {})
    showcase_raw: Mapping[str, Any] = stations_raw.get("showcase", {})
    stations = StationSettings(
        cache_ttl_s=float(stations_raw.get("cache_ttl_s", 15.0)),
        closed_ratio_threshold=float(stations_raw.get("closed_ratio_threshold", 0.9)),
        showcase=ShowcaseSettings(
            min_bikes=int(showcase_raw.get("min_bikes", 12)),
            min_docks=int(showcase_raw.get("min_docks", 12)),
        ),
    )
    if not 0.0 < stations.closed_ratio_threshold <= 1.0:
        raise ValueError(f"Unsupported stations.closed_ratio_threshold: {stations.closed_ratio_threshold}")
    if stations.cache_ttl_s < 0:
        raise ValueError(f"stations.cache_ttl_s must be >= 0 (got {stations.cache_ttl_s})")

    planning_raw: Mapping[str, Any] = raw.get("planning", {})
    planning = PlanningSettings(
        service_area_padding_mi=float(planning_raw.get("service_area_padding_mi", 1.0)),
    )

    suggestions_raw: Mapping[str, Any] = raw.get("suggestions", {})
    suggestions = SuggestionSettings(
        debounce_s=float(suggestions_raw.get("debounce_s", 0.2)),
        min_query_length=int(suggestions_raw.get("min_query_length", 3)),
        limit=int(suggestions_raw.get("limit", 5)),
    )
    if not 1 <= suggestions.limit <= 10:
        raise ValueError(f"suggestions.limit must be within [1, 10] (got {suggestions.limit})")

    logging_raw: Mapping[str, Any] = raw.get("logging", {})
    file_value = logging_raw.get("file")
    log_file = None if not file_value else _as_path(str(file_value), base_dir=base_dir)
    logging_settings = LoggingSettings(
        level=_env_str("BCYCLEROUTER_LOG_LEVEL", str(logging_raw.get("level", "INFO"))),
        format=str(logging_raw.get("format", "%(asctime)s %(levelname)s %(name)s - %(message)s")),
        file=log_file,
    )

    return AppConfig(
        app=app,
        gbfs=gbfs,
        geocoder=geocoder,
        stations=stations,
        planning=planning,
        suggestions=suggestions,
        logging=logging_settings,
    )

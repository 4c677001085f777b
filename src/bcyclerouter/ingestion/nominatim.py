from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Mapping, Optional

from bcyclerouter.config.models import GeocoderSettings
from bcyclerouter.errors import PlaceNotFoundError
from bcyclerouter.gis.bounds import contains
from bcyclerouter.ingestion.http_base import JsonHttpClient
from bcyclerouter.schemas.core import Bounds, GeocodeSuggestion, LatLon


logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3
DEFAULT_SUGGESTION_LIMIT = 5
MAX_SUGGESTION_LIMIT = 10


def parse_lat_lon(text: str) -> Optional[LatLon]:
    """
    Parse a literal "lat,lon" pair. Anything other than exactly two finite, in-range numbers is None.
    """

    parts = text.split(",")
    if len(parts) != 2:
        return None
    try:
        lat = float(parts[0].strip())
        lon = float(parts[1].strip())
    except ValueError:
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        return None
    return LatLon(lat=lat, lon=lon)


def coordinate_label(lat: float, lon: float) -> str:
    return f"{lat:.5f},{lon:.5f}"


def is_query_ready(text: str, *, min_length: int = MIN_QUERY_LENGTH) -> bool:
    # A comma means the user is typing coordinates, which can be legitimately short.
    trimmed = text.strip()
    if not trimmed:
        return False
    return len(trimmed) >= min_length or "," in trimmed


def clamp_limit(limit: int) -> int:
    return min(max(int(limit), 1), MAX_SUGGESTION_LIMIT)


def viewbox_param(bounds: Bounds) -> str:
    # Nominatim expects x1,y1,x2,y2 (lon/lat corners).
    return f"{bounds.west},{bounds.north},{bounds.east},{bounds.south}"


def _row_point(row: Mapping[str, Any]) -> Optional[tuple[float, float]]:
    try:
        lat = float(row.get("lat"))  # type: ignore[arg-type]
        lon = float(row.get("lon"))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    return lat, lon


class NominatimGeocoder:
    """
    Free-text place lookup against an OpenStreetMap Nominatim `/search` endpoint.

    Literal coordinate input is answered locally; everything else is one HTTP call run off the
    event loop.
    """

    def __init__(self, *, http: JsonHttpClient, settings: Optional[GeocoderSettings] = None) -> None:
        self._http = http
        self._settings = settings or GeocoderSettings()

    def _query_text(self, text: str) -> str:
        if self._settings.query_suffix:
            return f"{text} {self._settings.query_suffix}"
        return text

    def search(self, text: str, *, limit: int = 1, bounds: Optional[Bounds] = None) -> list[Mapping[str, Any]]:
        params: dict[str, Any] = {
            "q": self._query_text(text),
            "format": "json",
            "limit": str(clamp_limit(limit)),
        }
        if bounds is not None:
            params["viewbox"] = viewbox_param(bounds)
            params["bounded"] = "1"

        data = self._http.get_json(self._settings.search_url, params=params, label="geocoding results")
        if not isinstance(data, list):
            logger.warning("Unexpected geocoder response type: %s", type(data).__name__)
            return []
        return [row for row in data if isinstance(row, Mapping)]

    async def resolve_place(self, text: str) -> GeocodeSuggestion:
        literal = parse_lat_lon(text)
        if literal is not None:
            return GeocodeSuggestion(
                lat=literal.lat,
                lon=literal.lon,
                label=coordinate_label(literal.lat, literal.lon),
            )

        rows = await asyncio.to_thread(self.search, text, limit=1)
        if not rows:
            raise PlaceNotFoundError("Destination not found.")
        point = _row_point(rows[0])
        if point is None:
            raise PlaceNotFoundError("Geocoding returned invalid coordinates.")
        lat, lon = point
        label = rows[0].get("display_name")
        return GeocodeSuggestion(lat=lat, lon=lon, label=str(label) if label else coordinate_label(lat, lon))

    async def suggest(
        self,
        text: str,
        *,
        bounds: Optional[Bounds] = None,
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> list[GeocodeSuggestion]:
        trimmed = text.strip()
        if not trimmed:
            return []

        literal = parse_lat_lon(trimmed)
        if literal is not None:
            if bounds is not None and not contains(bounds, literal.lat, literal.lon):
                return []
            return [
                GeocodeSuggestion(
                    lat=literal.lat,
                    lon=literal.lon,
                    label=coordinate_label(literal.lat, literal.lon),
                )
            ]

        rows = await asyncio.to_thread(self.search, trimmed, limit=limit, bounds=bounds)

        suggestions: list[GeocodeSuggestion] = []
        for row in rows:
            point = _row_point(row)
            if point is None:
                continue
            lat, lon = point
            if bounds is not None and not contains(bounds, lat, lon):
                continue
            label = row.get("display_name")
            suggestions.append(
                GeocodeSuggestion(lat=lat, lon=lon, label=str(label) if label else coordinate_label(lat, lon))
            )
        return suggestions[: clamp_limit(limit)]

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LatLon:
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude out of range: {self.lat}")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"Longitude out of range: {self.lon}")


@dataclass(frozen=True)
class Station:
    station_id: str
    name: str
    lat: float
    lon: float
    is_installed: bool
    is_renting: bool
    is_returning: bool
    bikes_available: int = 0
    docks_available: int = 0

    @property
    def point(self) -> LatLon:
        return LatLon(lat=self.lat, lon=self.lon)


@dataclass(frozen=True)
class Bounds:
    north: float
    south: float
    east: float
    west: float


@dataclass(frozen=True)
class GeocodeSuggestion:
    lat: float
    lon: float
    label: str

    @property
    def point(self) -> LatLon:
        return LatLon(lat=self.lat, lon=self.lon)

    def is_selected_for(self, text: str) -> bool:
        # Exact equality with the trimmed field text; anything else means the user is still typing.
        return text.strip() == self.label


@dataclass(frozen=True)
class ServiceArea:
    stations: list[Station]
    # Already padded; `None` when no station is installed and returning.
    bounds: Optional[Bounds]
    season_closed: bool = False


@dataclass(frozen=True)
class TripPlan:
    pickup: Station
    dropoff: Station
    navigation_link: str
    walk_to_pickup_mi: float
    bike_leg_mi: float
    walk_from_dropoff_mi: float

    @property
    def total_mi(self) -> float:
        return self.walk_to_pickup_mi + self.bike_leg_mi + self.walk_from_dropoff_mi


@dataclass(frozen=True)
class NearestStationResult:
    station: Station
    distance_mi: float
    navigation_link: str
    is_fallback: bool = False

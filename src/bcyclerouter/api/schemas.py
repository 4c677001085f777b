from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class PointIn(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class PlaceIn(PointIn):
    label: Optional[str] = None


class NearestIn(BaseModel):
    origin: PointIn
    origin_mode: Literal["device", "manual"] = "manual"


class PlanIn(BaseModel):
    origin: PointIn
    destination: PlaceIn
    origin_mode: Literal["device", "manual"] = "manual"


class ShowcaseIn(BaseModel):
    enabled: bool = True


class BoundsOut(BaseModel):
    north: float
    south: float
    east: float
    west: float


class StationOut(BaseModel):
    id: str
    name: str
    lat: float
    lon: float
    is_installed: bool
    is_renting: bool
    is_returning: bool
    bikes_available: int
    docks_available: int


class StationsResponseOut(BaseModel):
    items: list[StationOut] = Field(default_factory=list)
    meta: dict[str, object] = Field(default_factory=dict)


class ServiceAreaOut(BaseModel):
    bounds: Optional[BoundsOut] = None
    season_closed: bool
    station_count: int
    showcase_mode: bool


class SuggestionOut(BaseModel):
    lat: float
    lon: float
    label: str


class NearestOut(BaseModel):
    station: StationOut
    distance_mi: float
    distance_text: str
    navigation_link: str
    is_fallback: bool


class TripPlanOut(BaseModel):
    pickup: StationOut
    dropoff: StationOut
    navigation_link: str
    walk_to_pickup_mi: float
    bike_leg_mi: float
    walk_from_dropoff_mi: float
    walk_to_pickup_text: str
    bike_leg_text: str
    walk_from_dropoff_text: str


class ShowcaseOut(BaseModel):
    showcase_mode: bool


class AppConfigOut(BaseModel):
    app_name: str
    showcase_mode: bool
    cache_ttl_s: float
    closed_ratio_threshold: float
    service_area_padding_mi: float
    suggestion_debounce_ms: int
    suggestion_min_length: int
    suggestion_limit: int

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Union

from bcyclerouter.gis.bounds import contains
from bcyclerouter.schemas.core import Bounds, GeocodeSuggestion, LatLon


OriginMode = Literal["device", "manual"]

OUTSIDE_SERVICE_MESSAGE = "Current location outside of the service area."
ORIGIN_NOT_FOUND_MESSAGE = "Starting location not found."
DESTINATION_NOT_FOUND_MESSAGE = "Destination not found."
ENTER_ORIGIN_MESSAGE = "Enter a starting location."
SELECT_ORIGIN_MESSAGE = "Select a starting location from the suggestions."
NO_DEVICE_LOCATION_MESSAGE = "Allow location access first or enter a starting location manually."
ENTER_DESTINATION_MESSAGE = "Enter a destination."
SELECT_DESTINATION_MESSAGE = "Select a destination from the suggestions."


@dataclass(frozen=True)
class Ready:
    point: LatLon
    suggestion: Optional[GeocodeSuggestion] = None


@dataclass(frozen=True)
class Invalid:
    message: str


@dataclass(frozen=True)
class Pending:
    pass


InputState = Union[Ready, Invalid, Pending]


def selected_suggestion(text: str, suggestion: Optional[GeocodeSuggestion]) -> Optional[GeocodeSuggestion]:
    if suggestion is None or not suggestion.is_selected_for(text):
        return None
    return suggestion


def resolve_origin(
    mode: OriginMode,
    manual_text: str,
    suggestion: Optional[GeocodeSuggestion],
    device_location: Optional[LatLon],
    bounds: Optional[Bounds],
    *,
    for_nearest: bool = False,
) -> InputState:
    """
    Turn the raw origin inputs into a usable point or a user-facing message.

    `for_nearest` is the passive "nearest station" lookup: an empty manual field is not an
    error there, just nothing to do yet.
    """

    if mode == "manual":
        selected = selected_suggestion(manual_text, suggestion)
        if selected is not None:
            return Ready(point=selected.point, suggestion=selected)
        if not manual_text.strip():
            return Pending() if for_nearest else Invalid(ENTER_ORIGIN_MESSAGE)
        return Invalid(SELECT_ORIGIN_MESSAGE)

    if device_location is None:
        return Invalid(NO_DEVICE_LOCATION_MESSAGE)
    if bounds is not None and not contains(bounds, device_location.lat, device_location.lon):
        return Invalid(OUTSIDE_SERVICE_MESSAGE)
    return Ready(point=device_location)


def resolve_destination(text: str, suggestion: Optional[GeocodeSuggestion]) -> InputState:
    selected = selected_suggestion(text, suggestion)
    if selected is not None:
        return Ready(point=selected.point, suggestion=selected)
    if not text.strip():
        return Invalid(ENTER_DESTINATION_MESSAGE)
    return Invalid(SELECT_DESTINATION_MESSAGE)

from __future__ import annotations

from typing import Optional


class RouterError(RuntimeError):
    pass


class FetchError(RouterError):
    """
    A remote feed was unreachable, answered with a non-success status, or returned unparseable JSON.

    `status_code` is set when the failure came from an HTTP response.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SeasonClosedError(RouterError):
    """
    The live system looks closed (most stations closed or no bikes anywhere).

    Callers recover by reloading stations with `allow_closed=True`.
    """

    def __init__(self, message: str = "The bike-share system is closed for the season.") -> None:
        super().__init__(message)


# A feed without the expected `data.stations` list cannot be told apart from an off-season feed.
class MalformedFeedError(SeasonClosedError):
    pass


class PlanningError(RouterError):
    """User-facing validation failure; the message is rendered as-is by the UI."""


class PlaceNotFoundError(PlanningError):
    def __init__(self, message: str = "Destination not found.") -> None:
        super().__init__(message)


class NotReadyError(RouterError):
    def __init__(self, message: str = "Station data is still loading.") -> None:
        super().__init__(message)

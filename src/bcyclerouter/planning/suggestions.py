from __future__ import annotations

import asyncio
import logging
from typing import Optional

from bcyclerouter.config.models import SuggestionSettings
from bcyclerouter.ingestion.nominatim import NominatimGeocoder, is_query_ready
from bcyclerouter.planning.coordinator import LatestRequestCoordinator
from bcyclerouter.schemas.core import Bounds, GeocodeSuggestion


logger = logging.getLogger(__name__)


class SuggestionSlot:
    """
    Autocomplete state for one input field.

    Each `update()` is a keystroke: it restarts the debounce timer, supersedes whatever lookup is
    still running, and eventually replaces `suggestions` with the answer to the latest text only.
    """

    def __init__(
        self,
        geocoder: NominatimGeocoder,
        *,
        settings: Optional[SuggestionSettings] = None,
    ) -> None:
        self._geocoder = geocoder
        self._settings = settings or SuggestionSettings()
        self._coordinator: LatestRequestCoordinator[list[GeocodeSuggestion]] = LatestRequestCoordinator()
        self._timer: Optional[asyncio.Task[None]] = None
        self.suggestions: list[GeocodeSuggestion] = []
        self.no_results = False

    def update(
        self,
        query: str,
        *,
        bounds: Optional[Bounds] = None,
        enabled: bool = True,
    ) -> Optional["asyncio.Task[None]"]:
        self._cancel_timer()
        self._coordinator.invalidate()

        trimmed = query.strip()
        if not enabled or not is_query_ready(trimmed, min_length=self._settings.min_query_length):
            self.clear()
            return None

        self.no_results = False
        self._timer = asyncio.get_running_loop().create_task(self._debounced(trimmed, bounds))
        return self._timer

    async def _debounced(self, text: str, bounds: Optional[Bounds]) -> None:
        await asyncio.sleep(self._settings.debounce_s)
        await self._coordinator.run(
            lambda: self._geocoder.suggest(text, bounds=bounds, limit=self._settings.limit),
            on_success=self._apply,
            on_error=self._reset,
        )

    def _apply(self, suggestions: list[GeocodeSuggestion]) -> None:
        self.suggestions = suggestions
        self.no_results = not suggestions

    def _reset(self, message: str) -> None:
        logger.debug("Suggestion lookup failed: %s", message)
        self.clear()

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def clear(self) -> None:
        self.suggestions = []
        self.no_results = False

    def close(self) -> None:
        self._cancel_timer()
        self._coordinator.invalidate()

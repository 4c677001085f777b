from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ERROR_MESSAGE = "Something went wrong."


def error_message(exc: BaseException, default: str = DEFAULT_ERROR_MESSAGE) -> str:
    message = str(exc)
    return message if message else default


def _caller_cancelling() -> bool:
    # Task.cancelling() exists on Python 3.11+.
    current = asyncio.current_task()
    cancelling = getattr(current, "cancelling", None)
    return cancelling is not None and cancelling() > 0


class LatestRequestCoordinator(Generic[T]):
    """
    "Only the latest request wins" for one logical slot (e.g. destination suggestions).

    Every `run()` takes the next sequence number. When its task settles, the success, error and
    finally handlers fire only if no newer `run()` (or `invalidate()`) happened in the meantime;
    otherwise the outcome is dropped. The network call itself is not cancelled unless
    `abort_superseded=True`, and correctness never depends on that cancellation.
    """

    def __init__(self, *, abort_superseded: bool = False) -> None:
        self._seq = 0
        self._abort_superseded = abort_superseded
        self._pending: Optional[asyncio.Future[T]] = None
        # Futures cancelled here because a newer run superseded them.
        self._aborted: set[asyncio.Future[T]] = set()

    @property
    def latest(self) -> int:
        return self._seq

    def is_current(self, seq: int) -> bool:
        return seq == self._seq

    def invalidate(self) -> None:
        self._seq += 1
        self._abort_pending()

    def _abort_pending(self) -> None:
        if self._abort_superseded and self._pending is not None and not self._pending.done():
            self._pending.cancel()
            self._aborted.add(self._pending)
        self._pending = None

    async def run(
        self,
        task: Callable[[], Awaitable[T]],
        *,
        on_success: Optional[Callable[[T], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
        on_finally: Optional[Callable[[], None]] = None,
        error_message_default: str = DEFAULT_ERROR_MESSAGE,
    ) -> None:
        self._abort_pending()
        self._seq += 1
        seq = self._seq

        pending = asyncio.ensure_future(task())
        self._pending = pending
        try:
            try:
                result = await pending
            except asyncio.CancelledError:
                # Only our own abort is dropped; cancelling the caller still propagates.
                if pending in self._aborted and not self.is_current(seq) and not _caller_cancelling():
                    return
                raise
            except Exception as exc:
                if not self.is_current(seq):
                    logger.debug("Dropping error from superseded request #%s: %s", seq, exc)
                    return
                if on_error is not None:
                    on_error(error_message(exc, error_message_default))
                return

            if not self.is_current(seq):
                logger.debug("Dropping result from superseded request #%s", seq)
                return
            if on_success is not None:
                on_success(result)
        finally:
            self._aborted.discard(pending)
            if self._pending is pending:
                self._pending = None
            if self.is_current(seq) and on_finally is not None:
                on_finally()

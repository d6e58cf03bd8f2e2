"""Cooperative cancellation for running renders.

A :class:`CancelSignal` is handed to the render invoker, which checks it
at its own checkpoints (or awaits :meth:`CancelSignal.wait`) and aborts by
raising :class:`~renderq.errors.RenderCancelledError`. Nothing is
interrupted preemptively.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable

from renderq.errors import RenderCancelledError

logger = logging.getLogger(__name__)


class CancelSignal:
    """One-shot, idempotent cancellation flag.

    ``cancel()`` may be called from any thread; waiters on the event loop
    that created the signal are woken up thread-safely.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._event = asyncio.Event()
        try:
            self._loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation. Calls after the first are no-ops."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        self._set_event()
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Cancel callback failed")

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on cancellation (immediately if already cancelled)."""
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return
        callback()

    def raise_if_cancelled(self) -> None:
        """Checkpoint for invokers.

        Raises:
            RenderCancelledError: If cancellation was requested.
        """
        if self._cancelled:
            raise RenderCancelledError("Render was cancelled")

    async def wait(self) -> None:
        """Block until cancellation is requested."""
        await self._event.wait()

    def _set_event(self) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            self._event.set()
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._event.set()
        else:
            loop.call_soon_threadsafe(self._event.set)


def make_cancel_signal() -> tuple[Callable[[], None], CancelSignal]:
    """Create a fresh signal and the handle that trips it."""
    signal = CancelSignal()
    return signal.cancel, signal

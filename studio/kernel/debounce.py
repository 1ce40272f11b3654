"""
Single-shot debounced timer.

Each schedule() replaces the pending call and restarts the delay. A cancelled
timer never fires. flush() runs the pending call immediately.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable


class Debouncer:
    """Runs the most recently scheduled callback once the delay has elapsed quietly."""

    def __init__(self, delay: float):
        self.delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self._callback: Callable[[], None] | None = None

    @property
    def pending(self) -> bool:
        return self._callback is not None

    def schedule(self, callback: Callable[[], None]) -> None:
        """
        (Re)start the timer for callback.

        Without a running event loop there is nothing to wait on, so the
        callback runs immediately.
        """
        self.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            callback()
            return
        self._callback = callback
        self._handle = loop.call_later(self.delay, self._fire)

    def _fire(self) -> None:
        callback, self._callback, self._handle = self._callback, None, None
        if callback is not None:
            callback()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._callback = None

    def flush(self) -> None:
        """Run the pending callback now, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._fire()

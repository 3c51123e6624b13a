"""Coalescing of camera-move events.

Pan and zoom fire many events per second. The debouncer restarts a timer on
every event and, once the camera has been still for ``delay`` seconds, runs
the callback a single time with the latest viewport.
"""

import asyncio
import logging
from typing import Callable

from mindgraph.models.viewport import Viewport

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.1


class ViewportDebouncer:
    """Runs ``callback`` at most once per burst of viewport changes.

    Must be used from inside a running asyncio event loop.
    """

    def __init__(
        self,
        callback: Callable[[Viewport], None],
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        if delay < 0:
            raise ValueError(f"Debounce delay must be non-negative, got {delay}")
        self._callback = callback
        self.delay = delay
        self._latest: Viewport | None = None
        self._handle: asyncio.TimerHandle | None = None
        self.events_received = 0
        self.runs = 0

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def notify(self, viewport: Viewport) -> None:
        """Record a camera move and restart the timer."""
        self.events_received += 1
        self._latest = viewport
        if self._handle is not None:
            self._handle.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> None:
        """Run the pending callback now, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()

    def cancel(self) -> None:
        """Drop the pending callback."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._latest = None

    def _fire(self) -> None:
        self._handle = None
        viewport, self._latest = self._latest, None
        if viewport is None:
            return
        self.runs += 1
        logger.debug(f"Viewport settled after {self.events_received} events, culling pass {self.runs}")
        self._callback(viewport)

"""
Recurring callbacks on the event loop.

Every pipeline component that polls (feeder, dispatcher, status reporter) is
driven by a ``RecurringTick``: the callback runs on the loop thread and is
re-registered with ``call_later`` until it is stopped.
"""

import asyncio
from typing import Callable, Optional

from dead_link_monitor.utils.logging import get_logger
from dead_link_monitor.utils.errors import handle_error


logger = get_logger(__name__)


class RecurringTick:
    """A callback re-registered on the loop at a fixed interval until stopped."""

    def __init__(
        self,
        name: str,
        callback: Callable[[], None],
        interval: float,
        loop: Optional[asyncio.AbstractEventLoop] = None
    ):
        """
        Initialize tick.

        Args:
            name: Name used in log messages
            callback: Function run once per tick
            interval: Seconds between the end of one run and the next
            loop: Event loop; defaults to the running loop at start()
        """
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.name = name
        self.callback = callback
        self.interval = interval
        self._loop = loop
        self._handle: Optional[asyncio.Handle] = None
        self._running = False
        self.runs = 0

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, delay: Optional[float] = None) -> None:
        """
        Schedule the first run.

        Args:
            delay: Seconds before the first run; None runs it on the next
                loop iteration
        """
        if self._running:
            return
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._running = True
        if delay is None:
            self._handle = self._loop.call_soon(self._run)
        else:
            self._handle = self._loop.call_later(delay, self._run)
        logger.debug(f"Tick {self.name} started (interval={self.interval}s)")

    def stop(self) -> None:
        """Deregister the tick. Safe to call from inside the callback."""
        if not self._running:
            return
        self._running = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        logger.debug(f"Tick {self.name} stopped after {self.runs} runs")

    def _run(self) -> None:
        self._handle = None
        if not self._running:
            return

        self.runs += 1
        try:
            self.callback()
        except Exception as e:
            # A failing tick must not end the run; log it and keep ticking
            handle_error(e, logger, {"tick": self.name}, reraise=False)

        if self._running:
            self._handle = self._loop.call_later(self.interval, self._run)

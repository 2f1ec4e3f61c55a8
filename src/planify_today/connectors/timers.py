# src/planify_today/connectors/timers.py

from __future__ import annotations

import asyncio
import logging

from ..core.ports import SOURCE_CONTINUE, TimerCallback

logger = logging.getLogger(__name__)


class RepeatingTimer:
    """One periodic source on an asyncio loop; lives until removed or the callback returns False."""

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: TimerCallback) -> None:
        self._loop = loop
        self.interval = max(0.0, float(interval))
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self.cancelled = False
        self.fired = 0

    def schedule(self) -> None:
        if self.cancelled:
            return
        self._handle = self._loop.call_later(self.interval, self._fire)

    def cancel(self) -> None:
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if self.cancelled:
            return
        self.fired += 1
        try:
            keep = self._callback()
        except Exception:
            logger.exception("Timer callback crashed; keeping the timer")
            keep = SOURCE_CONTINUE

        # The callback may have removed this very timer.
        if keep and not self.cancelled:
            self.schedule()
        elif not keep:
            self.cancelled = True


class AsyncioTimerSource:
    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self.active: set[RepeatingTimer] = set()

    def add_seconds(self, interval: float, callback: TimerCallback) -> RepeatingTimer:
        timer = RepeatingTimer(self._loop, interval, callback)
        timer.schedule()
        self.active.add(timer)
        return timer

    def remove(self, handle: RepeatingTimer) -> None:
        handle.cancel()
        self.active.discard(handle)

"""Countdown to the next daily level, shown while today's month is in view."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta

from daily.calendar_utils import next_midnight
from daily.clock import Clock

logger = logging.getLogger(__name__)


class NextDayCountdown:
    """Ticks until the next UTC midnight, then fires ``on_elapsed`` once.

    Only one countdown runs at a time: ``restart`` cancels the previous task.
    """

    def __init__(
        self,
        clock: Clock,
        on_tick: Callable[[timedelta], None],
        on_elapsed: Callable[[], None],
        tick_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._clock = clock
        self._on_tick = on_tick
        self._on_elapsed = on_elapsed
        self._tick = tick_seconds
        self._sleep = sleep
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    def restart(self) -> asyncio.Task:
        """Cancel any running countdown and start a fresh one.

        Must be called from inside a running event loop.
        """
        self.cancel()
        target = next_midnight(self._clock.now())
        self._task = asyncio.get_running_loop().create_task(self._run(target))
        logger.debug("Next-day countdown started, target %s", target.isoformat())
        return self._task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self, target) -> None:
        while True:
            remaining = target - self._clock.now()
            if remaining <= timedelta(0):
                break
            self._on_tick(remaining)
            await self._sleep(min(self._tick, remaining.total_seconds()))

        logger.info("Day boundary crossed, refreshing daily lobby")
        # on_elapsed may restart us; don't let that cancel the finishing task
        if self._task is asyncio.current_task():
            self._task = None
        self._on_elapsed()

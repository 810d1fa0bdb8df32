"""Recurring timer driving the metrics flush cycle."""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class FlushScheduler:
    """Runs a callback every ``period`` seconds on the running event loop.

    Only one timer exists per scheduler: start() cancels a running timer
    before arming a new one, so restarting never stacks periodic flushes.
    A failing callback is logged and the timer keeps running.
    """

    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self._task: asyncio.Task[None] | None = None
        self.period: float | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, period: float) -> None:
        """Arm the timer, replacing any timer that is already running.

        Args:
            period: Seconds between callback invocations. Must be positive.
        """
        if period <= 0:
            raise ValueError(f"period must be positive, got {period!r}")
        self.stop()
        self.period = period
        self._task = asyncio.get_running_loop().create_task(self._run(period))

    def stop(self) -> None:
        """Cancel the timer if it is running."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self, period: float) -> None:
        while True:
            await asyncio.sleep(period)
            try:
                self.callback()
            except Exception:
                logger.exception("Error in scheduled flush")

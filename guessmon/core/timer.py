"""
Cancellable repeating round timer
"""
import asyncio
import logging
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class RoundTimer:
    """
    Calls `on_tick` once per `interval` seconds until cancelled

    Must be started from inside a running event loop. After cancel() no
    further tick is delivered, even one whose sleep already finished.
    """

    def __init__(self, interval: float, on_tick: Callable[[], None]):
        self.interval = interval
        self.on_tick = on_tick
        self.cancelled = False
        self._task: Optional[asyncio.Task] = None

    def start(self) -> "RoundTimer":
        if self._task is None and not self.cancelled:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self

    def cancel(self) -> None:
        self.cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done() and not self.cancelled

    async def _run(self) -> None:
        while not self.cancelled:
            await asyncio.sleep(self.interval)
            if self.cancelled:
                return
            try:
                self.on_tick()
            except Exception:
                logger.exception("Round timer callback failed")
                self.cancelled = True

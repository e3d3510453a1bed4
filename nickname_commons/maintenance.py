"""
Periodic sweeping of expired cache entries and idle rate-limit windows
"""
import asyncio
from typing import Dict, Optional, Protocol
from .constants import TimeConstants
from .logger import logger


class Cleanable(Protocol):
    def cleanup(self) -> int:
        ...


class PeriodicCleanup:
    """
    Background task calling cleanup() on a set of targets every interval

    The task only exists between start() and stop(); nothing runs as a
    side effect of construction.
    """

    def __init__(self, targets: Dict[str, Cleanable], interval: float = TimeConstants.CLEANUP_INTERVAL):
        self.targets = targets
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> Dict[str, int]:
        """Sweep every target now; returns removed counts by target name"""
        removed = {name: target.cleanup() for name, target in self.targets.items()}
        logger.debug("Periodic cleanup completed", removed=removed)
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.run_once()
            except Exception as e:
                logger.error("Periodic cleanup failed", error=e)

    def start(self) -> None:
        """Start sweeping; a second call while running is a no-op"""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Periodic cleanup started", interval_seconds=self.interval, targets=list(self.targets))

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Periodic cleanup stopped")

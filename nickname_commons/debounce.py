"""
Debouncing of bursty input before an async check runs
"""
import asyncio
from typing import Any, Awaitable, Callable, Optional, Set
from .constants import TimeConstants
from .logger import logger


class DebounceCoordinator:
    """
    Runs callback once per burst of push() calls

    The callback fires delay seconds after the last push with the last
    pushed value. Cancelling only stops a pending timer; callbacks that
    already started run to completion and it is up to them to notice they
    have been superseded.
    """

    def __init__(self, callback: Callable[[Any], Awaitable[Any]],
                 delay: float = TimeConstants.NICKNAME_DEBOUNCE_DELAY):
        self.callback = callback
        self.delay = delay
        self.last_value: Any = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """A timer is armed and has not fired yet"""
        return self._timer is not None

    def push(self, value: Any) -> None:
        self.cancel()
        self.last_value = value
        self._loop = asyncio.get_running_loop()
        self._timer = self._loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self) -> None:
        self._timer = None
        task = self._loop.create_task(self.callback(self.last_value))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Debounced callback failed", error=task.exception())

    async def drain(self) -> None:
        """Wait for callbacks that already started"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

"""
Sliding-window rate limiting keyed by caller or resource
"""
import time
from collections import deque
from functools import wraps
from typing import Awaitable, Callable, Deque, Dict, TypeVar
from .constants import ErrorConstants
from .exceptions import RateLimitError
from .logger import rate_limit_logger as logger


T = TypeVar('T')


class RateLimiter:
    """
    Allows at most max_requests per key inside any trailing window

    Each key keeps the timestamps of its admitted requests. A timestamp
    falls out of the window once window_seconds have fully elapsed.
    """

    def __init__(self, max_requests: int, window_seconds: float,
                 message: str = ErrorConstants.RATE_LIMIT_EXCEEDED, name: str = 'rate-limiter',
                 clock: Callable[[], float] = time.monotonic):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self.name = name
        self._clock = clock
        self._windows: Dict[str, Deque[float]] = {}

    def _prune(self, key: str, now: float) -> Deque[float]:
        timestamps = self._windows.get(key)
        if timestamps is None:
            return deque()
        while timestamps and now - timestamps[0] >= self.window_seconds:
            timestamps.popleft()
        if not timestamps:
            del self._windows[key]
        return timestamps

    def try_request(self, key: str) -> bool:
        """
        Admit one request for key or raise

        Raises:
            RateLimitError: The window is full; retry_after says when the
                oldest request leaves it
        """
        now = self._clock()
        timestamps = self._prune(key, now)

        if len(timestamps) >= self.max_requests:
            retry_after = self.window_seconds - (now - timestamps[0])
            logger.warning("Rate limit exceeded", limiter=self.name, key=key,
                           limit=self.max_requests, retry_after=round(retry_after, 3))
            raise RateLimitError(self.message, retry_after=retry_after, limit=self.max_requests, key=key)

        timestamps.append(now)
        self._windows[key] = timestamps
        return True

    def get_remaining_requests(self, key: str) -> int:
        timestamps = self._prune(key, self._clock())
        return max(0, self.max_requests - len(timestamps))

    def get_retry_after(self, key: str) -> float:
        """Seconds until the oldest request in the window expires, 0 when none"""
        now = self._clock()
        timestamps = self._prune(key, now)
        if not timestamps:
            return 0.0
        return self.window_seconds - (now - timestamps[0])

    def reset(self, key: str) -> None:
        self._windows.pop(key, None)

    def clear(self) -> None:
        self._windows.clear()

    def cleanup(self) -> int:
        """Forget keys whose whole window has expired; returns how many"""
        now = self._clock()
        before = len(self._windows)
        for key in list(self._windows):
            self._prune(key, now)
        return before - len(self._windows)

    def __len__(self) -> int:
        return len(self._windows)


def with_rate_limit(func: Callable[..., Awaitable[T]], limiter: RateLimiter,
                    key_func: Callable[..., str]) -> Callable[..., Awaitable[T]]:
    """
    Guard an async callable with a RateLimiter

    The limiter is consulted before func runs, so rejected calls never
    reach it.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        limiter.try_request(key_func(*args, **kwargs))
        return await func(*args, **kwargs)

    wrapper.limiter = limiter
    return wrapper

"""
In-memory TTL cache with bounded size
"""
import asyncio
import re
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, Pattern, TypeVar, Union
from .constants import CacheConstants
from .logger import cache_logger as logger


T = TypeVar('T')

_MISSING = object()


@dataclass
class CacheEntry(Generic[T]):
    value: T
    expires_at: float


class Cache:
    """
    Key/value cache with per-entry expiry

    Expired entries are dropped lazily on read or by cleanup(). When the
    cache is full, adding a new key evicts the entry inserted first;
    overwriting an existing key keeps its original position.

    The cache also tracks computations in flight per key. Deleting or
    clearing a key detaches its in-flight computation, which then may no
    longer store its result nor be joined by new callers.
    """

    def __init__(self, ttl: float = CacheConstants.DEFAULT_TTL, max_size: int = CacheConstants.DEFAULT_MAX_SIZE,
                 name: str = 'cache', clock: Callable[[], float] = time.monotonic):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.ttl = ttl
        self.max_size = max_size
        self.name = name
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._in_flight: Dict[str, asyncio.Future] = {}

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        if self._clock() > entry.expires_at:
            del self._entries[key]
            return default
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        if key not in self._entries and len(self._entries) >= self.max_size:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("Cache entry evicted", cache=self.name, key=oldest)

        expires_at = self._clock() + (self.ttl if ttl is None else ttl)
        self._entries[key] = CacheEntry(value, expires_at)

    def delete(self, key: str) -> bool:
        """Remove a key and detach its in-flight computation; True if an entry was stored"""
        self._detach(key)
        return self._entries.pop(key, _MISSING) is not _MISSING

    def delete_pattern(self, pattern: Union[str, Pattern]) -> int:
        """Remove every key matching a regular expression; returns how many entries"""
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        for key in [key for key in self._in_flight if regex.search(key)]:
            self._detach(key)
        matching = [key for key in self._entries if regex.search(key)]
        for key in matching:
            del self._entries[key]
        return len(matching)

    def clear(self) -> None:
        self._in_flight.clear()
        self._entries.clear()

    def in_flight(self, key: str) -> Optional[asyncio.Future]:
        """Computation currently filling key, if any"""
        return self._in_flight.get(key)

    def track_in_flight(self, key: str, future: asyncio.Future) -> None:
        self._in_flight[key] = future

    def release_in_flight(self, key: str, future: asyncio.Future) -> bool:
        """
        Stop tracking a finished computation

        Returns:
            False when the key was deleted, cleared or taken over by a
            newer computation meanwhile; its result must not be stored
        """
        if self._in_flight.get(key) is not future:
            return False
        del self._in_flight[key]
        return True

    def _detach(self, key: str) -> None:
        if self._in_flight.pop(key, None) is not None:
            logger.debug("In-flight computation detached", cache=self.name, key=key)

    def cleanup(self) -> int:
        """Drop all expired entries; returns how many were removed"""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now > entry.expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Expired cache entries removed", cache=self.name, removed=len(expired))
        return len(expired)

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def size(self) -> int:
        """Number of stored entries, including expired ones not yet swept"""
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def with_cache(func: Callable[..., Awaitable[T]], cache: Cache, key_func: Callable[..., str],
               coalesce: bool = True) -> Callable[..., Awaitable[T]]:
    """
    Memoize an async callable in a Cache

    Only successful results are stored, and only when the key was not
    deleted while the value was being computed. With coalesce enabled,
    callers arriving while the same key is already being computed wait for
    that computation instead of starting their own, and share its outcome.

    Each computation runs as its own task. Cancelling a caller only stops
    that caller's wait; the others still get the result.

    Args:
        func: Coroutine function to wrap
        cache: Cache receiving resolved values
        key_func: Builds the cache key from the call arguments
        coalesce: Share in-flight computations per key

    Returns:
        Wrapped coroutine function
    """

    async def compute(key: str, args: tuple, kwargs: dict):
        task = asyncio.current_task()
        try:
            result = await func(*args, **kwargs)
        except BaseException:
            cache.release_in_flight(key, task)
            raise
        if cache.release_in_flight(key, task):
            cache.set(key, result)
        else:
            logger.debug("Result computed before invalidation not stored", cache=cache.name, key=key)
        return result

    @wraps(func)
    async def wrapper(*args, **kwargs):
        key = key_func(*args, **kwargs)

        cached = cache.get(key, _MISSING)
        if cached is not _MISSING:
            logger.debug("Cache hit", cache=cache.name, key=key)
            return cached

        pending = cache.in_flight(key) if coalesce else None
        if pending is not None:
            logger.debug("Joining in-flight lookup", cache=cache.name, key=key)
            return await asyncio.shield(pending)

        task = asyncio.get_running_loop().create_task(compute(key, args, kwargs))
        # Mark the outcome as retrieved even when every caller stopped waiting
        task.add_done_callback(lambda t: t.cancelled() or t.exception())
        cache.track_in_flight(key, task)
        return await asyncio.shield(task)

    wrapper.cache = cache
    return wrapper

"""
Nickname availability and update service
Orchestrates rate limiting, caching and resilient store access
"""
import re
import time
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar
from ..cache import Cache, with_cache
from ..config import Config, config as default_config
from ..constants import CacheConstants, ErrorConstants
from ..contracts.profile_store import ProfileRecord, ProfileStore
from ..error_handler import error_handler
from ..exceptions import RateLimitError, ValidationError
from ..logger import availability_logger as logger
from ..maintenance import PeriodicCleanup
from ..models.nickname import AvailabilityResult
from ..performance import PerformanceMonitor
from ..rate_limiter import RateLimiter
from ..resilience import with_retry, with_timeout
from ..validation_utils import is_reserved_nickname, normalize_nickname


T = TypeVar('T')


class NicknameAvailabilityService:
    """
    Answers whether a nickname can be taken and changes profile nicknames

    Caches, rate limiters, the performance monitor and the cleanup task
    all belong to the instance; build one per process and share it.
    """

    def __init__(self, store: ProfileStore, settings: Config = None,
                 clock: Callable[[], float] = time.monotonic, monitor: PerformanceMonitor = None):
        settings = settings or default_config
        self.store = store

        self.query_timeout = settings.query_timeout
        self.max_retries = settings.max_retries
        self.retry_delay = settings.retry_delay
        self.exponential_backoff = settings.exponential_backoff

        self.availability_cache = Cache(settings.availability_cache_ttl, settings.availability_cache_max_size,
                                        name='availability', clock=clock)
        self.profile_cache = Cache(settings.profile_cache_ttl, settings.profile_cache_max_size,
                                   name='profile', clock=clock)

        self.availability_limiter = RateLimiter(settings.availability_rate_limit, settings.availability_rate_window,
                                                ErrorConstants.AVAILABILITY_RATE_LIMITED, 'availability', clock)
        self.caller_limiter = RateLimiter(settings.caller_rate_limit, settings.caller_rate_window,
                                          ErrorConstants.AVAILABILITY_RATE_LIMITED, 'caller', clock)
        self.profile_search_limiter = RateLimiter(settings.profile_search_rate_limit,
                                                  settings.profile_search_rate_window,
                                                  ErrorConstants.PROFILE_SEARCH_RATE_LIMITED, 'profile-search', clock)
        self.update_limiter = RateLimiter(settings.update_rate_limit, settings.update_rate_window,
                                          ErrorConstants.UPDATE_RATE_LIMITED, 'update', clock)

        self.monitor = monitor or PerformanceMonitor(settings.slow_operation_threshold)
        self.periodic_cleanup = PeriodicCleanup({
            'availability_cache': self.availability_cache,
            'profile_cache': self.profile_cache,
            'availability_limiter': self.availability_limiter,
            'caller_limiter': self.caller_limiter,
            'profile_search_limiter': self.profile_search_limiter,
            'update_limiter': self.update_limiter,
        }, settings.cleanup_interval)

        self._cached_availability = with_cache(self._lookup_availability, self.availability_cache,
                                               key_func=self.availability_key)
        self._cached_profile = with_cache(self._lookup_profile, self.profile_cache,
                                          key_func=self.profile_key)

    @staticmethod
    def availability_key(canonical: str, canonical_current: str = '') -> str:
        return f'{CacheConstants.AVAILABILITY_KEY_PREFIX}:{canonical}:{canonical_current}'

    @staticmethod
    def profile_key(canonical: str) -> str:
        return f'{CacheConstants.PROFILE_KEY_PREFIX}:{canonical}'

    @staticmethod
    def caller_key(caller_id: str) -> str:
        return f'{CacheConstants.CALLER_KEY_PREFIX}:{caller_id}'

    async def _call_store(self, operation: str, func: Callable[[], Awaitable[T]]) -> T:
        """Run one store call under timeout, retry and latency measurement"""
        async def attempt():
            return await with_timeout(func, self.query_timeout, operation)

        return await self.monitor.measure(operation, lambda: with_retry(
            attempt,
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            exponential_backoff=self.exponential_backoff,
            operation=operation
        ))

    async def check_availability(self, nickname: str, current_nickname: Optional[str] = None,
                                 caller_id: Optional[str] = None) -> AvailabilityResult:
        """
        Check whether a nickname can be taken

        Reserved words and the caller's own nickname are answered without
        touching the rate limiter, the cache or the store. Rate-limit
        rejections come back as an unavailable result carrying retry_after.

        Args:
            nickname: Nickname to check, any case
            current_nickname: Nickname the caller already owns, if any
            caller_id: Rate limit per caller instead of per nickname

        Returns:
            AvailabilityResult

        Raises:
            ValidationError: Empty nickname
            CommonsServiceError: Classified store failure after retries
        """
        canonical = normalize_nickname(nickname)
        if not canonical:
            raise ValidationError(ErrorConstants.MISSING_REQUIRED_FIELDS, field='nickname')

        if is_reserved_nickname(canonical):
            return AvailabilityResult(is_available=False, error=ErrorConstants.NICKNAME_RESERVED)

        canonical_current = normalize_nickname(current_nickname) if current_nickname else ''
        if canonical_current and canonical == canonical_current:
            return AvailabilityResult(is_available=True)

        try:
            if caller_id:
                self.caller_limiter.try_request(self.caller_key(caller_id))
            else:
                self.availability_limiter.try_request(f'{CacheConstants.AVAILABILITY_KEY_PREFIX}:{canonical}')
        except RateLimitError as e:
            return AvailabilityResult(is_available=False, error=e.message, retry_after=e.retry_after)

        return await self._cached_availability(canonical, canonical_current)

    async def _lookup_availability(self, canonical: str, canonical_current: str) -> AvailabilityResult:
        try:
            profile = await self._call_store(
                'find_by_nickname',
                lambda: self.store.find_by_nickname_case_insensitive(canonical)
            )
        except Exception as error:
            raise error_handler.handle(error, 'check_availability', nickname=canonical)

        if profile is None:
            logger.debug("Nickname is free", nickname=canonical)
            return AvailabilityResult(is_available=True)
        return AvailabilityResult(is_available=False, error=ErrorConstants.NICKNAME_TAKEN)

    async def find_profile_by_nickname(self, nickname: str) -> Optional[ProfileRecord]:
        """
        Look up the profile owning a nickname

        Raises:
            RateLimitError: Too many lookups for this nickname
            CommonsServiceError: Classified store failure after retries
        """
        canonical = normalize_nickname(nickname)
        if not canonical:
            raise ValidationError(ErrorConstants.MISSING_REQUIRED_FIELDS, field='nickname')

        self.profile_search_limiter.try_request(self.profile_key(canonical))
        return await self._cached_profile(canonical)

    async def _lookup_profile(self, canonical: str) -> Optional[ProfileRecord]:
        try:
            return await self._call_store(
                'find_profile',
                lambda: self.store.find_by_nickname_case_insensitive(canonical)
            )
        except Exception as error:
            raise error_handler.handle(error, 'find_profile_by_nickname', nickname=canonical)

    async def update_nickname(self, profile_id: str, new_nickname: str,
                              old_nickname: Optional[str] = None) -> Optional[str]:
        """
        Change a profile's nickname

        Cached answers for both the previous and the new nickname are
        dropped once the store accepts the write.

        Args:
            profile_id: Profile being changed
            new_nickname: Requested nickname, any case
            old_nickname: Previous nickname when the caller knows it

        Returns:
            The nickname the profile held before, when known

        Raises:
            RateLimitError: Too many changes for this profile
            DuplicateError: Another profile owns the nickname
            CommonsServiceError: Other classified store failure
        """
        self.update_limiter.try_request(f'{CacheConstants.UPDATE_KEY_PREFIX}:{profile_id}')

        canonical = normalize_nickname(new_nickname)
        if not canonical:
            raise ValidationError(ErrorConstants.MISSING_REQUIRED_FIELDS, field='nickname')

        try:
            previous = await self._call_store(
                'update_nickname',
                lambda: self.store.update_nickname(profile_id, canonical)
            )
        except Exception as error:
            raise error_handler.handle(error, 'update_nickname', profile_id=profile_id)

        self.invalidate_nickname_cache(canonical)
        for stale in {old_nickname, previous}:
            if stale:
                self.invalidate_nickname_cache(stale)

        logger.log_service_operation('update_nickname', entity_type='profile', entity_id=profile_id)
        return previous

    def invalidate_nickname_cache(self, nickname: str) -> int:
        """Forget cached availability answers and the cached profile for a nickname"""
        canonical = normalize_nickname(nickname)
        pattern = re.compile(f'^{re.escape(CacheConstants.AVAILABILITY_KEY_PREFIX)}:{re.escape(canonical)}:')
        removed = self.availability_cache.delete_pattern(pattern)
        if self.profile_cache.delete(self.profile_key(canonical)):
            removed += 1
        logger.debug("Nickname cache invalidated", nickname=canonical, removed=removed)
        return removed

    def clear_caches(self) -> None:
        self.availability_cache.clear()
        self.profile_cache.clear()

    def cleanup_caches(self) -> Dict[str, int]:
        return {
            'availability_cache': self.availability_cache.cleanup(),
            'profile_cache': self.profile_cache.cleanup(),
        }

    def cleanup_rate_limiters(self) -> Dict[str, int]:
        return {
            'availability_limiter': self.availability_limiter.cleanup(),
            'caller_limiter': self.caller_limiter.cleanup(),
            'profile_search_limiter': self.profile_search_limiter.cleanup(),
            'update_limiter': self.update_limiter.cleanup(),
        }

    def get_remaining_checks(self, caller_id: str) -> int:
        return self.caller_limiter.get_remaining_requests(self.caller_key(caller_id))

    def get_check_retry_after(self, caller_id: str) -> float:
        return self.caller_limiter.get_retry_after(self.caller_key(caller_id))

    def reset_check_rate_limit(self, caller_id: str) -> None:
        self.caller_limiter.reset(self.caller_key(caller_id))

    def get_stats(self) -> Dict[str, Any]:
        """Sizes of the in-memory structures plus store latency stats"""
        return {
            'availability_cache_size': len(self.availability_cache),
            'profile_cache_size': len(self.profile_cache),
            'tracked_rate_limit_keys': len(self.availability_limiter) + len(self.caller_limiter)
            + len(self.profile_search_limiter) + len(self.update_limiter),
            'store_latency': self.monitor.report(),
        }

    def start(self) -> None:
        """Begin periodic sweeping of caches and rate limiters"""
        self.periodic_cleanup.start()

    async def stop(self) -> None:
        await self.periodic_cleanup.stop()

    async def __aenter__(self) -> 'NicknameAvailabilityService':
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

"""
Timeout and retry wrappers for store calls
"""
import asyncio
from typing import Awaitable, Callable, Optional, TypeVar
from .constants import DatabaseConstants, ErrorConstants
from .error_handler import error_handler
from .exceptions import CommonsServiceError, NetworkError
from .logger import logger


T = TypeVar('T')


async def with_timeout(func: Callable[[], Awaitable[T]], timeout: float = DatabaseConstants.QUERY_TIMEOUT,
                       operation: str = None) -> T:
    """
    Run func, giving up after timeout seconds

    The pending call is cancelled when the deadline passes.

    Raises:
        NetworkError: The deadline passed first (retryable)
    """
    try:
        return await asyncio.wait_for(func(), timeout)
    except asyncio.TimeoutError as error:
        raise NetworkError(ErrorConstants.REQUEST_TIMED_OUT, operation=operation, original_error=error) from error


async def with_retry(func: Callable[[], Awaitable[T]],
                     max_retries: int = DatabaseConstants.MAX_RETRIES,
                     retry_delay: float = DatabaseConstants.RETRY_DELAY,
                     exponential_backoff: bool = True,
                     should_retry: Optional[Callable[[CommonsServiceError], bool]] = None,
                     on_retry: Optional[Callable[[CommonsServiceError, int], None]] = None,
                     operation: str = None) -> T:
    """
    Run func, retrying classified failures that allow it

    Every failure is classified first. The classified error is raised as
    soon as it is not retryable or max_retries extra attempts are spent.

    Args:
        func: Zero-argument coroutine function
        max_retries: Attempts allowed after the first one
        retry_delay: Seconds before the first retry
        exponential_backoff: Double the delay after every attempt
        should_retry: Decides per error; defaults to the error's retryable flag
        on_retry: Called with (error, attempt number) before each retry
        operation: Name used in logs and classification

    Returns:
        func's result
    """
    should_retry = should_retry or (lambda error: error.retryable)

    attempt = 0
    while True:
        try:
            return await func()
        except Exception as error:
            app_error = error_handler.classify(error, operation)
            if attempt >= max_retries or not should_retry(app_error):
                if app_error is error:
                    raise
                raise app_error from error

            attempt += 1
            delay = retry_delay * (2 ** (attempt - 1)) if exponential_backoff else retry_delay
            logger.warning("Retrying operation", operation=operation, attempt=attempt,
                           delay_seconds=delay, error_code=app_error.error_code)
            if on_retry:
                on_retry(app_error, attempt)
            await asyncio.sleep(delay)

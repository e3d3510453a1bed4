"""
Lambda handler decorators for the nickname service
"""
import time
from functools import wraps
from typing import Callable
from .error_handler import error_handler
from .exceptions import CommonsServiceError
from .utils import create_failure_response
from .logger import logger


def direct_lambda_handler(function_name: str = None, log_requests: bool = True):
    """
    Decorator for Lambda handlers returning protocol-agnostic responses

    The wrapped handler may raise; failures are turned into failure
    responses so the function never errors at the Lambda level.

    Args:
        function_name: Name reported in logs and response metadata
        log_requests: Whether to log request start/end
    """
    def decorator(func: Callable) -> Callable:
        name = function_name or getattr(func, '__name__', 'unknown')

        @wraps(func)
        def wrapper(event, context):
            start_time = time.time()

            if log_requests:
                logger.log_lambda_start(name, event, context)

            try:
                result = func(event, context)

                if log_requests:
                    duration_ms = (time.time() - start_time) * 1000
                    logger.log_lambda_end(name, True, duration_ms)

                return result

            except ValueError as e:
                # Malformed request
                if log_requests:
                    duration_ms = (time.time() - start_time) * 1000
                    logger.log_lambda_end(name, False, duration_ms, error=str(e))

                return create_failure_response(
                    'VALIDATION_ERROR',
                    str(e),
                    {
                        'required_fields': ['nickname'],
                        'optional_fields': ['current_nickname', 'caller_id', 'get_rules']
                    },
                    name
                )

            except CommonsServiceError as e:
                # Already classified and logged by the service
                if log_requests:
                    duration_ms = (time.time() - start_time) * 1000
                    logger.log_lambda_end(name, False, duration_ms, error=e.message)

                details = e.to_dict()
                details['status_code'] = error_handler.status_code_for(e)
                return create_failure_response(e.error_code or 'SERVICE_ERROR', e.message, details, name)

            except Exception as e:
                if log_requests:
                    duration_ms = (time.time() - start_time) * 1000
                    logger.log_lambda_end(name, False, duration_ms, error=str(e))

                logger.error(f"Unexpected error in {name}", error=e)

                return create_failure_response(
                    'INTERNAL_ERROR',
                    'Nickname check failed due to internal error',
                    None,
                    name
                )

        return wrapper
    return decorator

"""
Error classification for the nickname service
Maps raw store, AWS and asyncio failures onto the service error taxonomy
"""
import asyncio
from typing import Optional
from botocore.exceptions import (
    BotoCoreError, ClientError, ConnectTimeoutError,
    EndpointConnectionError, ReadTimeoutError
)
from pynamodb.exceptions import DoesNotExist, PynamoDBException, TableDoesNotExist
from .constants import DatabaseConstants, ErrorConstants, HTTPConstants
from .contracts.profile_store import UniqueConstraintViolation
from .exceptions import (
    CommonsServiceError, DatabaseError, DuplicateError, NetworkError,
    NotFoundError, RateLimitError, UnknownError, ValidationError
)
from .logger import logger


_NETWORK_FAILURES = (
    asyncio.TimeoutError, TimeoutError, ConnectionError,
    EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError,
)


class AWSErrorHandler:
    """
    Centralized error classification for the nickname service
    """

    @staticmethod
    def classify(error: Exception, operation: str = None, table_name: str = None) -> CommonsServiceError:
        """
        Classify any failure into the service error taxonomy

        Taxonomy instances pass through untouched, so classifying twice is
        harmless. Nothing is logged here; callers log terminal errors once
        through handle().

        Args:
            error: The exception that occurred
            operation: The operation being performed
            table_name: Optional table name for context

        Returns:
            A CommonsServiceError subclass carrying the retryable flag
        """
        if isinstance(error, CommonsServiceError):
            return error

        if isinstance(error, UniqueConstraintViolation):
            return DuplicateError(value=error.nickname, original_error=error)

        if isinstance(error, _NETWORK_FAILURES):
            if isinstance(error, (asyncio.TimeoutError, TimeoutError, ConnectTimeoutError, ReadTimeoutError)):
                message = ErrorConstants.REQUEST_TIMED_OUT
            else:
                message = ErrorConstants.CONNECTION_ERROR
            return NetworkError(message, operation=operation, original_error=error)

        if isinstance(error, DoesNotExist):
            return NotFoundError(entity_type='profile', original_error=error)

        if isinstance(error, TableDoesNotExist):
            return DatabaseError(ErrorConstants.DATABASE_UNAVAILABLE, operation, table_name,
                                 original_error=error, retryable=False)

        if isinstance(error, PynamoDBException):
            return AWSErrorHandler._classify_aws_code(
                getattr(error, 'cause_response_code', None), error, operation, table_name
            )

        if isinstance(error, ClientError):
            error_code = error.response.get('Error', {}).get('Code', 'Unknown')
            return AWSErrorHandler._classify_aws_code(error_code, error, operation, table_name)

        if isinstance(error, BotoCoreError):
            return DatabaseError(operation=operation, table=table_name, original_error=error)

        return UnknownError(original_error=error)

    @staticmethod
    def _classify_aws_code(error_code: Optional[str], error: Exception, operation: str,
                           table_name: str) -> CommonsServiceError:
        if error_code == DatabaseConstants.CONDITIONAL_CHECK_FAILED:
            return DuplicateError(original_error=error)
        if error_code == DatabaseConstants.RESOURCE_NOT_FOUND:
            return DatabaseError(ErrorConstants.DATABASE_UNAVAILABLE, operation, table_name,
                                 original_error=error, retryable=False)
        # Throttling and every other store failure are worth another attempt
        return DatabaseError(operation=operation, table=table_name, original_error=error)

    @staticmethod
    def handle(error: Exception, operation: str, **context) -> CommonsServiceError:
        """
        Classify a terminal failure and log it exactly once

        Args:
            error: The exception that occurred
            operation: The operation being performed
            **context: Extra fields for the log entry

        Returns:
            The classified error, ready to raise
        """
        app_error = AWSErrorHandler.classify(error, operation, context.get('table_name'))
        log_context = {
            'operation': operation,
            'error_code': app_error.error_code,
            'retryable': app_error.retryable,
            **context
        }

        if isinstance(app_error, (ValidationError, DuplicateError, NotFoundError, RateLimitError)):
            logger.warning(f"{operation} rejected: {app_error.message}", **log_context)
        else:
            logger.error(f"{operation} failed: {app_error.message}",
                         error=app_error.original_error or app_error, **log_context)

        return app_error

    @staticmethod
    def status_code_for(error: CommonsServiceError) -> int:
        """HTTP status code matching an error category"""
        if isinstance(error, ValidationError):
            return HTTPConstants.BAD_REQUEST
        if isinstance(error, NotFoundError):
            return HTTPConstants.NOT_FOUND
        if isinstance(error, DuplicateError):
            return HTTPConstants.CONFLICT
        if isinstance(error, RateLimitError):
            return HTTPConstants.TOO_MANY_REQUESTS
        if isinstance(error, (NetworkError, DatabaseError)):
            return HTTPConstants.SERVICE_UNAVAILABLE
        return HTTPConstants.INTERNAL_SERVER_ERROR


# Global error handler instance
error_handler = AWSErrorHandler()


def classify_error(error: Exception, operation: str = None) -> CommonsServiceError:
    """Convenience wrapper around AWSErrorHandler.classify"""
    return error_handler.classify(error, operation)

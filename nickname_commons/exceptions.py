"""
Nickname Service Exceptions
Error taxonomy shared by the validation, availability and update paths
"""
from .constants import ErrorConstants


class CommonsServiceError(Exception):
    """Base exception for all nickname service errors"""

    retryable = False

    def __init__(self, message: str, error_code: str = None, details: dict = None,
                 original_error: Exception = None, retryable: bool = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.original_error = original_error
        if retryable is not None:
            self.retryable = retryable
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for API responses"""
        result = {
            'error': self.__class__.__name__,
            'message': self.message,
            'retryable': self.retryable
        }
        if self.error_code:
            result['error_code'] = self.error_code
        if self.details:
            result['details'] = self.details
        return result


class ValidationError(CommonsServiceError):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: str = None, value: str = None, original_error: Exception = None):
        self.field = field
        self.value = value

        details = {}
        if field:
            details['field'] = field
        if value:
            details['value'] = value

        super().__init__(message, 'VALIDATION_ERROR', details, original_error)


class NetworkError(CommonsServiceError):
    """Raised when the store cannot be reached or does not answer in time"""

    retryable = True

    def __init__(self, message: str = ErrorConstants.CONNECTION_ERROR, operation: str = None,
                 original_error: Exception = None):
        self.operation = operation
        details = {'operation': operation} if operation else {}
        super().__init__(message, 'NETWORK_ERROR', details, original_error)


class DatabaseError(CommonsServiceError):
    """Raised when a store operation fails"""

    retryable = True

    def __init__(self, message: str = ErrorConstants.DATABASE_ERROR, operation: str = None,
                 table: str = None, original_error: Exception = None, retryable: bool = None):
        self.operation = operation
        self.table = table

        details = {}
        if operation:
            details['operation'] = operation
        if table:
            details['table'] = table

        super().__init__(message, 'DATABASE_ERROR', details, original_error, retryable)


class DuplicateError(CommonsServiceError):
    """Raised when a nickname is already claimed by another profile"""

    def __init__(self, message: str = ErrorConstants.NICKNAME_TAKEN, field: str = 'nickname',
                 value: str = None, original_error: Exception = None):
        self.field = field
        self.value = value

        details = {'field': field}
        if value:
            details['value'] = value

        super().__init__(message, 'DUPLICATE_ENTITY', details, original_error)


class NotFoundError(CommonsServiceError):
    """Raised when an entity is not found"""

    def __init__(self, message: str = ErrorConstants.PROFILE_NOT_FOUND, entity_type: str = None,
                 entity_id: str = None, original_error: Exception = None):
        self.entity_type = entity_type
        self.entity_id = entity_id

        details = {}
        if entity_type:
            details['entity_type'] = entity_type
        if entity_id:
            details['entity_id'] = entity_id

        super().__init__(message, 'ENTITY_NOT_FOUND', details, original_error)


class RateLimitError(CommonsServiceError):
    """Raised when a rate limit is exceeded"""

    def __init__(self, message: str = ErrorConstants.RATE_LIMIT_EXCEEDED, retry_after: float = 0.0,
                 limit: int = None, key: str = None):
        self.retry_after = retry_after
        self.limit = limit
        self.key = key

        details = {'retry_after_seconds': round(retry_after, 3)}
        if limit:
            details['limit'] = limit

        super().__init__(message, 'RATE_LIMIT_EXCEEDED', details)


class UnknownError(CommonsServiceError):
    """Raised for failures that match no other category"""

    def __init__(self, message: str = ErrorConstants.UNEXPECTED_ERROR, original_error: Exception = None):
        super().__init__(message, 'UNKNOWN_ERROR', None, original_error)

"""
Profile nickname commons
Validation, availability checking and nickname updates for profile services
"""
from .cache import Cache, with_cache
from .debounce import DebounceCoordinator
from .exceptions import (
    CommonsServiceError, ValidationError, NetworkError, DatabaseError,
    DuplicateError, NotFoundError, RateLimitError, UnknownError
)
from .models.nickname import AvailabilityResult, CheckResult, CheckStatus, NicknameValidationResult
from .rate_limiter import RateLimiter, with_rate_limit
from .resilience import with_retry, with_timeout
from .validation_utils import is_reserved_nickname, normalize_nickname
from .validators.nickname import NicknameValidator, validate_nickname

__version__ = '1.0.0'

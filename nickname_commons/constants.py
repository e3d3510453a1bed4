"""
Nickname Service Constants
Validation rules, user-facing messages and pipeline tuning defaults
"""


class HTTPConstants:
    """HTTP status codes"""

    BAD_REQUEST = 400
    NOT_FOUND = 404
    CONFLICT = 409
    TOO_MANY_REQUESTS = 429
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503


class ValidationConstants:
    """Validation rules and patterns"""

    MIN_NICKNAME_LENGTH = 3
    MAX_NICKNAME_LENGTH = 36
    NICKNAME_PATTERN = r'^[A-Za-z0-9_-]+$'
    # A single alphanumeric, or alphanumeric at both ends
    NICKNAME_BOUNDARY_PATTERN = r'^[A-Za-z0-9](?:.*[A-Za-z0-9])?$'
    CONSECUTIVE_SYMBOLS_PATTERN = r'[-_]{2,}'

    # Compared against the canonical (lowercase) form
    RESERVED_NICKNAMES = frozenset([
        'admin', 'api', 'www', 'profile', 'signin', 'signup',
        'login', 'logout', 'create', 'edit', 'delete', 'settings',
        'help', 'about', 'contact', 'terms', 'privacy', 'support',
        'blog', 'news', 'docs', 'documentation',
    ])


class CacheConstants:
    """Cache sizing and key prefixes"""

    DEFAULT_TTL = 5 * 60  # seconds
    DEFAULT_MAX_SIZE = 100

    AVAILABILITY_KEY_PREFIX = 'availability'
    PROFILE_KEY_PREFIX = 'profile'
    UPDATE_KEY_PREFIX = 'update'
    CALLER_KEY_PREFIX = 'caller'


class DatabaseConstants:
    """Store call policy"""

    QUERY_TIMEOUT = 5.0  # seconds
    MAX_RETRIES = 2
    RETRY_DELAY = 1.0  # seconds, doubled per attempt when backing off

    CONDITIONAL_CHECK_FAILED = 'ConditionalCheckFailedException'
    RESOURCE_NOT_FOUND = 'ResourceNotFoundException'


class TimeConstants:
    """Time-related constants"""

    NICKNAME_DEBOUNCE_DELAY = 0.5  # seconds
    CLEANUP_INTERVAL = 5 * 60
    SLOW_OPERATION_THRESHOLD = 0.2
    MAX_STORED_METRICS = 1000


class ErrorConstants:
    """User-facing message constants"""

    # Generic errors
    MISSING_REQUIRED_FIELDS = 'Missing required fields'
    UNEXPECTED_ERROR = 'An unexpected error occurred'

    # Validation errors
    NICKNAME_TOO_SHORT = f'Nickname must be at least {ValidationConstants.MIN_NICKNAME_LENGTH} characters'
    NICKNAME_TOO_LONG = f'Nickname must be {ValidationConstants.MAX_NICKNAME_LENGTH} characters or fewer'
    NICKNAME_INVALID_CHARACTERS = 'Nickname may only contain letters, numbers, hyphens (-) and underscores (_)'
    NICKNAME_INVALID_BOUNDARY = 'Nickname cannot start or end with a symbol'
    NICKNAME_CONSECUTIVE_SYMBOLS = 'Nickname cannot contain consecutive symbols'
    NICKNAME_RESERVED = 'This nickname is reserved and cannot be used'

    # Availability
    NICKNAME_TAKEN = 'This nickname is already in use'
    NICKNAME_AVAILABLE = 'This nickname is available'
    NICKNAME_UNAVAILABLE = 'This nickname cannot be used'
    NICKNAME_CURRENT = 'This is your current nickname'
    NICKNAME_CHECKING = 'Checking availability...'

    # Rate limiting
    RATE_LIMIT_EXCEEDED = 'Rate limit reached, please wait and retry'
    AVAILABILITY_RATE_LIMITED = 'Too many nickname checks, please wait and retry'
    PROFILE_SEARCH_RATE_LIMITED = 'Too many profile searches, please wait and retry'
    UPDATE_RATE_LIMITED = 'Too many nickname changes, please wait and retry'

    # Store errors
    CONNECTION_ERROR = 'Connection error, please check your network and retry'
    REQUEST_TIMED_OUT = 'Request timed out'
    DATABASE_ERROR = 'A server error occurred, please retry later'
    DATABASE_UNAVAILABLE = 'Database resource is not available'
    PROFILE_NOT_FOUND = 'Profile not found'

"""
Result types for nickname validation and availability checks
"""
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional

from ..constants import ErrorConstants


class CheckStatus(str, Enum):
    """Lifecycle of a single nickname check"""
    IDLE = 'idle'
    CHECKING = 'checking'
    AVAILABLE = 'available'
    UNAVAILABLE = 'unavailable'
    ERROR = 'error'


@dataclass(frozen=True)
class NicknameValidationResult:
    """Outcome of the synchronous rule check; error holds the first failing rule"""
    is_valid: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AvailabilityResult:
    """Answer of the availability service for one nickname"""
    is_available: bool
    error: Optional[str] = None
    retry_after: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {'is_available': self.is_available}
        if self.error:
            result['error'] = self.error
        if self.retry_after is not None:
            result['retry_after'] = round(self.retry_after, 3)
        return result


@dataclass(frozen=True)
class CheckResult:
    """
    State published to whoever displays a nickname check

    idle results are never valid nor available, and an available
    nickname is always a valid one.
    """
    status: CheckStatus
    message: Optional[str] = None
    is_valid: bool = False
    is_available: bool = False

    def __post_init__(self):
        if self.status == CheckStatus.IDLE and (self.is_valid or self.is_available):
            raise ValueError("An idle check cannot be valid or available")
        if self.status == CheckStatus.AVAILABLE and not (self.is_valid and self.is_available):
            raise ValueError("An available nickname must be valid and available")
        if self.status != CheckStatus.AVAILABLE and self.is_available:
            raise ValueError(f"A {self.status.value} check cannot be available")

    @classmethod
    def idle(cls) -> 'CheckResult':
        return cls(CheckStatus.IDLE)

    @classmethod
    def checking(cls) -> 'CheckResult':
        return cls(CheckStatus.CHECKING, ErrorConstants.NICKNAME_CHECKING, is_valid=True)

    @classmethod
    def available(cls, message: str = ErrorConstants.NICKNAME_AVAILABLE) -> 'CheckResult':
        return cls(CheckStatus.AVAILABLE, message, is_valid=True, is_available=True)

    @classmethod
    def unavailable(cls, message: str = ErrorConstants.NICKNAME_UNAVAILABLE) -> 'CheckResult':
        return cls(CheckStatus.UNAVAILABLE, message, is_valid=True)

    @classmethod
    def error(cls, message: str, is_valid: bool = False) -> 'CheckResult':
        return cls(CheckStatus.ERROR, message, is_valid=is_valid)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'message': self.message,
            'is_valid': self.is_valid,
            'is_available': self.is_available
        }

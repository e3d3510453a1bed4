"""
Rule-based nickname validation
"""
import re
from typing import Any, Callable, Dict, List, Optional, Tuple
from ..constants import ValidationConstants, ErrorConstants
from ..models.nickname import NicknameValidationResult
from ..validation_utils import is_reserved_nickname
from ..logger import nickname_logger as logger


class NicknameValidator:
    """
    Checks a nickname against an ordered list of rules

    Rules run in a fixed order and only the first failure is reported, so
    the message shown to a user is stable for a given input.
    """

    def __init__(self):
        self.valid_pattern = re.compile(ValidationConstants.NICKNAME_PATTERN)
        self.boundary_pattern = re.compile(ValidationConstants.NICKNAME_BOUNDARY_PATTERN, re.DOTALL)
        self.consecutive_special = re.compile(ValidationConstants.CONSECUTIVE_SYMBOLS_PATTERN)

        self.min_length = ValidationConstants.MIN_NICKNAME_LENGTH
        self.max_length = ValidationConstants.MAX_NICKNAME_LENGTH

        self.rules: List[Tuple[str, Callable[[str], bool], str]] = [
            ('min_length', lambda n: len(n) >= self.min_length, ErrorConstants.NICKNAME_TOO_SHORT),
            ('max_length', lambda n: len(n) <= self.max_length, ErrorConstants.NICKNAME_TOO_LONG),
            ('characters', lambda n: self.valid_pattern.fullmatch(n) is not None,
             ErrorConstants.NICKNAME_INVALID_CHARACTERS),
            ('boundaries', lambda n: self.boundary_pattern.fullmatch(n) is not None,
             ErrorConstants.NICKNAME_INVALID_BOUNDARY),
            ('consecutive_symbols', lambda n: self.consecutive_special.search(n) is None,
             ErrorConstants.NICKNAME_CONSECUTIVE_SYMBOLS),
            ('reserved', lambda n: not is_reserved_nickname(n), ErrorConstants.NICKNAME_RESERVED),
        ]

    def first_failure(self, nickname: str) -> Optional[Tuple[str, str]]:
        """Name and message of the first rule the nickname breaks, if any"""
        nickname = nickname or ""
        for name, check, message in self.rules:
            if not check(nickname):
                return name, message
        return None

    def validate(self, nickname: str) -> NicknameValidationResult:
        """
        Validate a nickname

        Args:
            nickname: Nickname exactly as typed

        Returns:
            NicknameValidationResult with the first failing rule's message
        """
        failure = self.first_failure(nickname)
        if failure:
            rule, message = failure
            logger.debug("Nickname rejected", rule=rule, length=len(nickname or ""))
            return NicknameValidationResult(is_valid=False, error=message)
        return NicknameValidationResult(is_valid=True)

    def quick_validate(self, nickname: str) -> bool:
        """True when every rule passes"""
        return self.first_failure(nickname) is None

    def get_validation_rules(self) -> Dict[str, Any]:
        """
        Get validation rules for frontend display

        Returns:
            Validation rules dictionary
        """
        return {
            'min_length': self.min_length,
            'max_length': self.max_length,
            'allowed_characters': 'Letters (a-z, A-Z), numbers (0-9), hyphens (-), underscores (_)',
            'pattern_rules': [
                'Must start with a letter or number',
                'Must end with a letter or number',
                'Cannot contain consecutive symbols (--, __, -_ or _-)',
                'Case-insensitive: JohnDoe and johndoe are the same nickname'
            ],
            'reserved_words': sorted(ValidationConstants.RESERVED_NICKNAMES),
            'examples': ['john_doe', 'jane-smith', 'writer2024', 'a1b'],
        }


# Global validator instance
nickname_validator = NicknameValidator()


def validate_nickname(nickname: str) -> NicknameValidationResult:
    """Validate a nickname with the shared validator"""
    return nickname_validator.validate(nickname)


def quick_validate_nickname(nickname: str) -> bool:
    return nickname_validator.quick_validate(nickname)

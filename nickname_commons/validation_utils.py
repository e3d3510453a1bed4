"""
Nickname Service Validation Utilities
Canonicalization and request-shape helpers shared by validators and services
"""
from typing import List, Dict, Any

from .constants import ValidationConstants


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> List[str]:
    """
    Validate that all required fields are present in the data.

    Args:
        data: Dictionary containing the data to validate
        required_fields: List of required field names

    Returns:
        List of missing field names (empty if all fields are present)
    """
    if not isinstance(data, dict):
        return required_fields

    missing_fields = []
    for field in required_fields:
        if field not in data or data[field] is None or data[field] == "":
            missing_fields.append(field)

    return missing_fields


def normalize_nickname(nickname: str) -> str:
    """
    Canonical form of a nickname, used for every key and uniqueness check.

    Only case is folded; surrounding whitespace is kept so that the
    character rule still rejects it. Idempotent.

    Args:
        nickname: Nickname as typed

    Returns:
        Lowercased nickname
    """
    if not nickname:
        return ""
    return nickname.lower()


def is_reserved_nickname(nickname: str) -> bool:
    """Check a nickname against the reserved word list, ignoring case"""
    return normalize_nickname(nickname) in ValidationConstants.RESERVED_NICKNAMES

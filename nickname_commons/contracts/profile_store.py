"""
Profile Store Contracts
Operations the nickname pipeline needs from whatever persists profiles
"""
from typing import Optional, Protocol, runtime_checkable


class UniqueConstraintViolation(Exception):
    """Raised by a store when a nickname is already owned by another profile"""

    def __init__(self, nickname: str, owner_id: str = None):
        self.nickname = nickname
        self.owner_id = owner_id
        super().__init__(f"Nickname '{nickname}' is already claimed")


@runtime_checkable
class ProfileRecord(Protocol):
    """Minimal view of a stored profile"""

    profile_id: str
    nickname: Optional[str]


@runtime_checkable
class ProfileStore(Protocol):
    """Contract definitions for the profile store"""

    async def find_by_nickname_case_insensitive(self, nickname: str) -> Optional[ProfileRecord]:
        """
        Look up the profile owning a nickname, ignoring case

        Returns:
            The owning profile, or None when nobody holds the nickname.
            Any other failure is raised as-is and classified by the caller.
        """
        ...

    async def update_nickname(self, profile_id: str, nickname: str) -> Optional[str]:
        """
        Assign a nickname to a profile

        The store's case-insensitive uniqueness constraint is the only
        arbiter between concurrent writers.

        Returns:
            The nickname the profile held before the write, when known

        Raises:
            UniqueConstraintViolation: another profile already holds it
        """
        ...

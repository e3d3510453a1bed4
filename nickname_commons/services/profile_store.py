"""
DynamoDB-backed implementation of the profile store contract
"""
import asyncio
from typing import Optional
from pynamodb.exceptions import DoesNotExist
from ..models.profile import Profile, NicknameClaim
from ..validation_utils import normalize_nickname
from ..logger import availability_logger as logger


class DynamoProfileStore:
    """
    Profile store over the Profile and NicknameClaim tables

    PynamoDB is blocking, so every call runs in a worker thread to keep
    the event loop free while DynamoDB answers.
    """

    async def find_by_nickname_case_insensitive(self, nickname: str) -> Optional[Profile]:
        return await asyncio.to_thread(self._find_by_nickname, normalize_nickname(nickname))

    async def update_nickname(self, profile_id: str, nickname: str) -> Optional[str]:
        return await asyncio.to_thread(self._update_nickname, profile_id, normalize_nickname(nickname))

    async def create_profile(self, profile_id: str, nickname: Optional[str] = None) -> Profile:
        """Create a profile, claiming its nickname first when one is given"""
        return await asyncio.to_thread(self._create_profile, profile_id,
                                       normalize_nickname(nickname) if nickname else None)

    def _find_by_nickname(self, canonical: str) -> Optional[Profile]:
        owner_id = NicknameClaim.owner_of(canonical)
        if owner_id is None:
            return None

        try:
            return Profile.get(owner_id)
        except DoesNotExist:
            # A claim without its profile still blocks the nickname
            logger.warning("Nickname claim points to a missing profile", profile_id=owner_id)
            return Profile(profile_id=owner_id, nickname=canonical)

    def _update_nickname(self, profile_id: str, canonical: str) -> Optional[str]:
        profile = Profile.get(profile_id)
        previous = profile.nickname
        previous_canonical = normalize_nickname(previous) if previous else None

        if previous_canonical == canonical:
            return previous

        NicknameClaim.claim(canonical, profile_id)
        try:
            profile.set_nickname(canonical)
        except Exception:
            # Give the new claim back so the nickname is not stranded
            NicknameClaim.release(canonical, profile_id)
            raise

        if previous_canonical:
            NicknameClaim.release(previous_canonical, profile_id)

        logger.log_service_operation('update_nickname', entity_type='profile', entity_id=profile_id)
        return previous

    def _create_profile(self, profile_id: str, canonical: Optional[str]) -> Profile:
        if canonical:
            NicknameClaim.claim(canonical, profile_id)
        profile = Profile(profile_id=profile_id, nickname=canonical)
        profile.save()
        return profile

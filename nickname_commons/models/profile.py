"""
PynamoDB models for profiles and their nickname claims
One claim item per canonical nickname enforces case-insensitive uniqueness
"""
from datetime import datetime, timezone
from typing import Optional
from pynamodb.models import Model
from pynamodb.attributes import UnicodeAttribute, UTCDateTimeAttribute
from pynamodb.exceptions import DeleteError, DoesNotExist, PutError
from ..config import config
from ..constants import DatabaseConstants
from ..contracts.profile_store import UniqueConstraintViolation
from ..logger import availability_logger as logger


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(Model):
    """
    A user profile; nickname holds the canonical nickname currently owned
    """

    class Meta:
        table_name = config.profile_table_name
        region = config.aws_region
        billing_mode = 'PAY_PER_REQUEST'

    profile_id = UnicodeAttribute(hash_key=True)
    nickname = UnicodeAttribute(null=True)

    created_at = UTCDateTimeAttribute(default=_utcnow)
    updated_at = UTCDateTimeAttribute(default=_utcnow)

    def save(self, **kwargs):
        """Override save to update timestamp"""
        self.updated_at = _utcnow()
        return super().save(**kwargs)

    def set_nickname(self, nickname: str) -> None:
        self.update(actions=[
            Profile.nickname.set(nickname),
            Profile.updated_at.set(_utcnow()),
        ])
        logger.log_database_operation(
            table_name=self.Meta.table_name,
            operation='update_nickname',
            success=True,
            profile_id=self.profile_id
        )


class NicknameClaim(Model):
    """
    Ownership record keyed by canonical nickname

    Saving a claim is conditional on the key being free (or already ours),
    which makes DynamoDB the single arbiter between concurrent writers.
    """

    class Meta:
        table_name = config.nickname_claim_table_name
        region = config.aws_region
        billing_mode = 'PAY_PER_REQUEST'

    nickname = UnicodeAttribute(hash_key=True)
    profile_id = UnicodeAttribute()
    claimed_at = UTCDateTimeAttribute(default=_utcnow)

    @classmethod
    def owner_of(cls, nickname: str) -> Optional[str]:
        """Profile id holding a canonical nickname, or None"""
        try:
            return cls.get(nickname).profile_id
        except DoesNotExist:
            return None

    @classmethod
    def claim(cls, nickname: str, profile_id: str) -> 'NicknameClaim':
        """
        Claim a canonical nickname for a profile

        Raises:
            UniqueConstraintViolation: Another profile owns the nickname
        """
        claim = cls(nickname=nickname, profile_id=profile_id)
        try:
            claim.save(condition=cls.nickname.does_not_exist() | (cls.profile_id == profile_id))
        except PutError as e:
            if e.cause_response_code == DatabaseConstants.CONDITIONAL_CHECK_FAILED:
                raise UniqueConstraintViolation(nickname) from e
            raise

        logger.log_database_operation(
            table_name=cls.Meta.table_name,
            operation='claim',
            success=True,
            profile_id=profile_id
        )
        return claim

    @classmethod
    def release(cls, nickname: str, profile_id: str) -> bool:
        """
        Release a claim if this profile still owns it

        Returns:
            False when the claim was missing or held by someone else
        """
        try:
            cls(nickname=nickname, profile_id=profile_id).delete(condition=cls.profile_id == profile_id)
            return True
        except DeleteError as e:
            if e.cause_response_code == DatabaseConstants.CONDITIONAL_CHECK_FAILED:
                logger.warning("Nickname claim not owned by profile, left in place",
                               profile_id=profile_id)
                return False
            raise

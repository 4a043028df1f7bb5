"""
Access-code gating and user profiles.

A user is let in once they have redeemed a valid access code. Redeeming the
same code again is a no-op success.
"""
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.models import Profile
from app.repositories import AccessCodeRepository, ProfileRepository, UserAccessRepository

logger = get_logger(__name__)


class AccessCodeError(Exception):
    """Base class for redemption failures; maps to HTTP 400."""
    code = "ACCESS_CODE_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidAccessCodeError(AccessCodeError):
    code = "INVALID_ACCESS_CODE"

    def __init__(self, message: str = "Invalid access code"):
        super().__init__(message)


class ExpiredAccessCodeError(AccessCodeError):
    code = "ACCESS_CODE_EXPIRED"

    def __init__(self, message: str = "Access code has expired"):
        super().__init__(message)


class ExhaustedAccessCodeError(AccessCodeError):
    code = "ACCESS_CODE_EXHAUSTED"

    def __init__(self, message: str = "Access code has reached its maximum uses"):
        super().__init__(message)


class AccessService:

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.utcnow):
        self.db = db
        self.clock = clock
        self.codes = AccessCodeRepository(db)
        self.grants = UserAccessRepository(db)
        self.profiles = ProfileRepository(db)

    def redeem(self, user_id: str, code: str) -> Dict[str, Any]:
        """
        Redeem `code` for `user_id`.

        Raises:
            InvalidAccessCodeError: Unknown or inactive code
            ExpiredAccessCodeError: Past expires_at
            ExhaustedAccessCodeError: current_uses has reached max_uses
        """
        access_code = self.codes.find_active(code.strip())
        if access_code is None:
            raise InvalidAccessCodeError()

        if self.grants.find_grant(user_id, access_code.id) is not None:
            return {"granted": True, "alreadyRedeemed": True}

        if access_code.expires_at is not None and access_code.expires_at <= self.clock():
            raise ExpiredAccessCodeError()
        if access_code.max_uses is not None and access_code.current_uses >= access_code.max_uses:
            raise ExhaustedAccessCodeError()

        self.grants.create(user_id=user_id, access_code_id=access_code.id, activated_at=self.clock())
        access_code.current_uses = (access_code.current_uses or 0) + 1
        self.codes.save()
        logger.info(f"✅ Access code redeemed by user {user_id}")
        return {"granted": True, "alreadyRedeemed": False}

    def has_access(self, user_id: str) -> bool:
        return self.grants.user_has_access(user_id)

    def upsert_profile(
        self,
        user_id: str,
        display_name: Optional[str] = None,
        preferred_sportsbook: Optional[str] = None
    ) -> Profile:
        profile = self.profiles.find_by_id(user_id)
        now = self.clock()
        if profile is None:
            profile = self.profiles.create(id=user_id, created_at=now)
        if display_name is not None:
            profile.display_name = display_name
        if preferred_sportsbook is not None:
            profile.preferred_sportsbook = preferred_sportsbook
        profile.updated_at = now
        self.profiles.save()
        return self.profiles.refresh(profile)

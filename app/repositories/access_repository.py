"""Access code, user access and profile repositories."""
from typing import Optional

from sqlalchemy.orm import Session

from app.models.models import AccessCode, UserAccess, Profile
from app.repositories.base import BaseRepository


class AccessCodeRepository(BaseRepository[AccessCode]):

    def __init__(self, db: Session):
        super().__init__(AccessCode, db)

    def find_active(self, code: str) -> Optional[AccessCode]:
        return self.filter_by_first(code=code, is_active=True)


class UserAccessRepository(BaseRepository[UserAccess]):

    def __init__(self, db: Session):
        super().__init__(UserAccess, db)

    def find_grant(self, user_id: str, access_code_id: str) -> Optional[UserAccess]:
        return self.filter_by_first(user_id=user_id, access_code_id=access_code_id)

    def user_has_access(self, user_id: str) -> bool:
        """True when the user holds at least one active grant."""
        return self.count(UserAccess.user_id == user_id, UserAccess.is_active.is_(True)) > 0


class ProfileRepository(BaseRepository[Profile]):

    def __init__(self, db: Session):
        super().__init__(Profile, db)

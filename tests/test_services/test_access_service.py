"""Tests for access-code redemption and profiles.

Test Strategy:
1. A valid code grants access and counts a use
2. Redeeming the same code twice is a success without a second use
3. Unknown, inactive, expired and exhausted codes raise typed errors
4. Profiles are created on first write and updated after
"""
from datetime import timedelta
import sys
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import FIXED_NOW

from app.models.models import AccessCode, UserAccess
from app.services.core.access_service import (
    AccessService,
    ExhaustedAccessCodeError,
    ExpiredAccessCodeError,
    InvalidAccessCodeError,
)


def _code(db: Session, code: str = "EDGE2025", **kwargs) -> AccessCode:
    row = AccessCode(code=code, **kwargs)
    db.add(row)
    db.commit()
    return row


def _service(db: Session) -> AccessService:
    return AccessService(db, clock=lambda: FIXED_NOW)


class TestRedeem:

    def test_valid_code_grants_access(self, db_session: Session):
        code = _code(db_session, max_uses=10)
        service = _service(db_session)

        result = service.redeem("user-1", " EDGE2025 ")

        assert result == {"granted": True, "alreadyRedeemed": False}
        assert service.has_access("user-1")
        assert not service.has_access("user-2")
        db_session.refresh(code)
        assert code.current_uses == 1

    def test_second_redeem_is_noop_success(self, db_session: Session):
        code = _code(db_session, max_uses=1)
        service = _service(db_session)

        service.redeem("user-1", "EDGE2025")
        result = service.redeem("user-1", "EDGE2025")

        assert result == {"granted": True, "alreadyRedeemed": True}
        assert db_session.query(UserAccess).count() == 1
        db_session.refresh(code)
        assert code.current_uses == 1

    # Failures
    # ─────────────────────────────────────────────────────────────

    def test_unknown_code(self, db_session: Session):
        with pytest.raises(InvalidAccessCodeError) as exc_info:
            _service(db_session).redeem("user-1", "NOPE")
        assert exc_info.value.code == "INVALID_ACCESS_CODE"

    def test_inactive_code_is_invalid(self, db_session: Session):
        _code(db_session, is_active=False)
        with pytest.raises(InvalidAccessCodeError):
            _service(db_session).redeem("user-1", "EDGE2025")

    def test_expired_code(self, db_session: Session):
        _code(db_session, expires_at=FIXED_NOW - timedelta(minutes=1))
        with pytest.raises(ExpiredAccessCodeError) as exc_info:
            _service(db_session).redeem("user-1", "EDGE2025")
        assert exc_info.value.code == "ACCESS_CODE_EXPIRED"

    def test_exhausted_code(self, db_session: Session):
        _code(db_session, max_uses=1)
        service = _service(db_session)
        service.redeem("user-1", "EDGE2025")

        with pytest.raises(ExhaustedAccessCodeError) as exc_info:
            service.redeem("user-2", "EDGE2025")
        assert exc_info.value.code == "ACCESS_CODE_EXHAUSTED"
        assert not service.has_access("user-2")


class TestProfiles:

    def test_create_then_update(self, db_session: Session):
        service = _service(db_session)

        created = service.upsert_profile("user-1", display_name="Sharp")
        updated = service.upsert_profile("user-1", preferred_sportsbook="FanDuel")

        assert created.id == updated.id == "user-1"
        assert updated.display_name == "Sharp"
        assert updated.preferred_sportsbook == "FanDuel"

"""Tests for ParlayService.

Test Strategy:
1. Totals are computed from the picks, not taken from the caller
2. Listing is per user, newest first
3. Deleting checks ownership and cascades to picks
"""
from datetime import timedelta
import sys
from pathlib import Path

from sqlalchemy.orm import Session

sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import FIXED_NOW

from app.models.models import ParlayPick
from app.services.core.parlay_service import ParlayService, parlay_to_dict


def _pick(player: str, confidence: float) -> dict:
    return {
        "player_name": player,
        "prop_type": "Points",
        "line": 24.5,
        "bet_type": "over",
        "odds": "-110",
        "confidence": confidence,
    }


class TestCreate:

    def test_totals_are_computed(self, db_session: Session):
        service = ParlayService(db_session, clock=lambda: FIXED_NOW)

        parlay = service.create_parlay(
            "user-1",
            "Lakers night",
            [_pick("LeBron James", 80), _pick("Anthony Davis", 71), _pick("Austin Reaves", 65)],
            game_info={"home": "Los Angeles Lakers"},
        )

        assert parlay.total_picks == 3
        assert parlay.average_confidence == 72.0
        data = parlay_to_dict(parlay)
        assert data["gameInfo"] == {"home": "Los Angeles Lakers"}
        assert [p["playerName"] for p in data["picks"]] == ["LeBron James", "Anthony Davis", "Austin Reaves"]
        assert data["createdAt"] == FIXED_NOW.isoformat()

    def test_list_is_per_user_newest_first(self, db_session: Session):
        now = {"value": FIXED_NOW}
        service = ParlayService(db_session, clock=lambda: now["value"])
        service.create_parlay("user-1", "first", [_pick("A", 60)])
        now["value"] = FIXED_NOW + timedelta(hours=1)
        service.create_parlay("user-1", "second", [_pick("B", 60)])
        service.create_parlay("user-2", "other", [_pick("C", 60)])

        assert [p.name for p in service.list_parlays("user-1")] == ["second", "first"]


class TestDelete:

    def test_owner_can_delete(self, db_session: Session):
        service = ParlayService(db_session)
        parlay = service.create_parlay("user-1", "slip", [_pick("A", 60), _pick("B", 70)])

        assert service.delete_parlay(parlay.id, user_id="user-1") is True
        assert service.list_parlays("user-1") == []
        assert db_session.query(ParlayPick).count() == 0

    def test_other_user_cannot_delete(self, db_session: Session):
        service = ParlayService(db_session)
        parlay = service.create_parlay("user-1", "slip", [_pick("A", 60)])

        assert service.delete_parlay(parlay.id, user_id="user-2") is False
        assert service.delete_parlay("missing") is False
        assert len(service.list_parlays("user-1")) == 1

"""
Saved parlay (bet slip) service.

Parlays are stored with their picks; total picks and average confidence are
always computed here rather than trusted from the client.
"""
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.models import Parlay, ParlayPick
from app.repositories import ParlayRepository

logger = get_logger(__name__)


def parlay_to_dict(parlay: Parlay) -> Dict[str, Any]:
    return {
        "id": parlay.id,
        "userId": parlay.user_id,
        "name": parlay.name,
        "gameInfo": parlay.game_info or {},
        "totalPicks": parlay.total_picks,
        "averageConfidence": parlay.average_confidence,
        "notes": parlay.notes,
        "createdAt": parlay.created_at.isoformat() if parlay.created_at else None,
        "picks": [
            {
                "id": pick.id,
                "playerName": pick.player_name,
                "propType": pick.prop_type,
                "line": pick.line,
                "betType": pick.bet_type,
                "odds": pick.odds,
                "confidence": pick.confidence,
            }
            for pick in parlay.picks
        ],
    }


class ParlayService:
    """Service for saving and listing a user's parlays."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.utcnow):
        self.db = db
        self.clock = clock
        self.repository = ParlayRepository(db)

    def create_parlay(
        self,
        user_id: str,
        name: str,
        picks: List[Dict[str, Any]],
        game_info: Optional[Dict[str, Any]] = None,
        notes: Optional[str] = None
    ) -> Parlay:
        """
        Args:
            picks: dicts with player_name, prop_type, line, bet_type, odds, confidence
        """
        now = self.clock()
        confidences = [float(p["confidence"]) for p in picks]
        parlay = self.repository.create(
            user_id=user_id,
            name=name,
            game_info=game_info or {},
            total_picks=len(picks),
            average_confidence=round(sum(confidences) / len(confidences), 2) if confidences else None,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        parlay.picks = [
            ParlayPick(
                user_id=user_id,
                player_name=p["player_name"],
                prop_type=p["prop_type"],
                line=p["line"],
                bet_type=p["bet_type"],
                odds=p["odds"],
                confidence=p["confidence"],
                created_at=now,
            )
            for p in picks
        ]
        self.repository.save()
        logger.info(f"✅ Saved parlay '{name}' with {len(picks)} picks for user {user_id}")
        return self.repository.refresh(parlay)

    def list_parlays(self, user_id: str) -> List[Parlay]:
        return self.repository.for_user(user_id)

    def delete_parlay(self, parlay_id: str, user_id: Optional[str] = None) -> bool:
        """False when the parlay does not exist or belongs to someone else."""
        parlay = self.repository.find_by_id(parlay_id)
        if parlay is None or (user_id is not None and parlay.user_id != user_id):
            return False
        self.db.delete(parlay)
        self.repository.save()
        return True

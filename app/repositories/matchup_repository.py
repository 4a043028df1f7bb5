"""Player matchup repository."""
from typing import List, Optional, Sequence, Dict, Any

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from app.models.models import PlayerMatchup
from app.repositories.base import BaseRepository

MATCHUP_CONFLICT_COLUMNS = ("player_name", "opponent_name", "game_date", "stat_type")


class MatchupRepository(BaseRepository[PlayerMatchup]):
    """Repository for the player_matchups table."""

    def __init__(self, db: Session):
        super().__init__(PlayerMatchup, db)

    def head_to_head(
        self,
        player_name: str,
        opponent_name: Optional[str] = None,
        stat_type: Optional[str] = None,
        limit: int = 20
    ) -> List[PlayerMatchup]:
        """A player's stored head-to-head rows, newest first."""
        query = self.query().filter(func.lower(PlayerMatchup.player_name) == player_name.lower())
        if opponent_name:
            query = query.filter(func.lower(PlayerMatchup.opponent_name) == opponent_name.lower())
        if stat_type:
            query = query.filter(func.lower(PlayerMatchup.stat_type) == stat_type.lower())
        return query.order_by(desc(PlayerMatchup.game_date)).limit(limit).all()

    def insert_ignoring_duplicates(self, rows: Sequence[Dict[str, Any]]) -> int:
        """Insert, skipping rows whose conflict key already exists."""
        return self.upsert(rows, MATCHUP_CONFLICT_COLUMNS, update=False)

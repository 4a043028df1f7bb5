"""Live odds repository."""
from typing import List, Optional, Sequence, Dict, Any

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from app.models.models import LiveOdds
from app.repositories.base import BaseRepository

ODDS_CONFLICT_COLUMNS = ("player_name", "stat_type", "sportsbook")


class LiveOddsRepository(BaseRepository[LiveOdds]):
    """Repository for the live_odds table."""

    def __init__(self, db: Session):
        super().__init__(LiveOdds, db)

    def latest(self, limit: int = 100, sport: Optional[str] = None) -> List[LiveOdds]:
        """Most recently updated odds rows."""
        query = self.query()
        if sport:
            query = query.filter(LiveOdds.sport == sport)
        return query.order_by(desc(LiveOdds.last_updated)).limit(limit).all()

    def for_player(
        self,
        player_name: str,
        stat_type: Optional[str] = None,
        limit: int = 5
    ) -> List[LiveOdds]:
        """Odds for a player (case-insensitive), optionally one stat type."""
        query = self.query().filter(func.lower(LiveOdds.player_name) == player_name.lower())
        if stat_type:
            query = query.filter(func.lower(LiveOdds.stat_type) == stat_type.lower())
        return query.order_by(desc(LiveOdds.last_updated)).limit(limit).all()

    def upsert_odds(self, rows: Sequence[Dict[str, Any]]) -> int:
        """Upsert on (player_name, stat_type, sportsbook)."""
        return self.upsert(rows, ODDS_CONFLICT_COLUMNS)

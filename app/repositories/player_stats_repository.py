"""Player stats repository."""
from typing import List, Sequence, Dict, Any

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from app.models.models import PlayerStat
from app.repositories.base import BaseRepository

STATS_CONFLICT_COLUMNS = ("player_name", "stat_type", "game_date")


class PlayerStatsRepository(BaseRepository[PlayerStat]):
    """Repository for the player_stats table."""

    def __init__(self, db: Session):
        super().__init__(PlayerStat, db)

    def recent_window(self, days: int = 14, limit: int = 200) -> List[PlayerStat]:
        """Stats from the last `days` days, newest game first."""
        return self.recent("game_date", days, limit=limit)

    def for_player(self, player_name: str, stat_type: str = None, limit: int = 10) -> List[PlayerStat]:
        """A player's most recent stat rows (case-insensitive name match)."""
        query = self.query().filter(func.lower(PlayerStat.player_name) == player_name.lower())
        if stat_type:
            query = query.filter(func.lower(PlayerStat.stat_type) == stat_type.lower())
        return query.order_by(desc(PlayerStat.game_date)).limit(limit).all()

    def upsert_stats(self, rows: Sequence[Dict[str, Any]]) -> int:
        """Upsert on (player_name, stat_type, game_date)."""
        return self.upsert(rows, STATS_CONFLICT_COLUMNS)

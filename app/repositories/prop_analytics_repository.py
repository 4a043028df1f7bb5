"""Prop analytics repository."""
from typing import List, Optional, Sequence, Dict, Any

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from app.models.models import PropAnalytics
from app.repositories.base import BaseRepository

ANALYTICS_CONFLICT_COLUMNS = ("player_name", "stat_type", "sport")


class PropAnalyticsRepository(BaseRepository[PropAnalytics]):
    """Repository for the prop_analytics table."""

    def __init__(self, db: Session):
        super().__init__(PropAnalytics, db)

    def latest(self, limit: int = 50, sport: Optional[str] = None) -> List[PropAnalytics]:
        """Most recently calculated analytics rows."""
        query = self.query()
        if sport:
            query = query.filter(PropAnalytics.sport == sport)
        return query.order_by(desc(PropAnalytics.calculated_at)).limit(limit).all()

    def find_for(self, player_name: str, stat_type: str) -> Optional[PropAnalytics]:
        """Latest analytics row for a player/stat pair, any sport."""
        return (
            self.query()
            .filter(
                func.lower(PropAnalytics.player_name) == player_name.lower(),
                func.lower(PropAnalytics.stat_type) == stat_type.lower(),
            )
            .order_by(desc(PropAnalytics.calculated_at))
            .first()
        )

    def for_player(self, player_name: str) -> List[PropAnalytics]:
        return self.where(func.lower(PropAnalytics.player_name) == player_name.lower())

    def upsert_analytics(self, rows: Sequence[Dict[str, Any]]) -> int:
        """Upsert on (player_name, stat_type, sport)."""
        return self.upsert(rows, ANALYTICS_CONFLICT_COLUMNS)

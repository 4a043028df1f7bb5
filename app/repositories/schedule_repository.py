"""Games schedule repository."""
from datetime import date
from typing import List, Optional, Sequence, Dict, Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.models import GameSchedule
from app.repositories.base import BaseRepository

SCHEDULE_CONFLICT_COLUMNS = ("game_id",)

LIVE_STATUSES = ("live", "in_progress")


class ScheduleRepository(BaseRepository[GameSchedule]):
    """Repository for the games_schedule table."""

    def __init__(self, db: Session):
        super().__init__(GameSchedule, db)

    def find_by_game_id(self, game_id: str) -> Optional[GameSchedule]:
        return self.filter_by_first(game_id=game_id)

    def find_by_external_id(self, data_source: str, external_id: str) -> Optional[GameSchedule]:
        """Lookup by the provider's own game id."""
        return self.where_first(
            GameSchedule.data_source == data_source,
            GameSchedule.external_id == external_id,
        )

    def on_date(self, sport: str, game_date: date) -> List[GameSchedule]:
        return self.where(GameSchedule.sport == sport, GameSchedule.game_date == game_date)

    def upcoming(self, limit: int = 200) -> List[GameSchedule]:
        """Games from today onwards plus anything currently live."""
        return (
            self.query()
            .filter(or_(GameSchedule.game_date >= date.today(), GameSchedule.status.in_(LIVE_STATUSES)))
            .order_by(GameSchedule.game_date, GameSchedule.game_time)
            .limit(limit)
            .all()
        )

    def search(
        self,
        start_date: date,
        end_date: date,
        sport: Optional[str] = None,
        team: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 10
    ) -> List[GameSchedule]:
        """Schedule search by date window, sport, team substring and status."""
        query = self.query().filter(
            GameSchedule.game_date >= start_date,
            GameSchedule.game_date <= end_date,
        )
        if sport and sport != "all":
            query = query.filter(GameSchedule.sport == sport)
        if team:
            pattern = f"%{team}%"
            query = query.filter(or_(GameSchedule.home_team.ilike(pattern), GameSchedule.away_team.ilike(pattern)))
        if status:
            query = query.filter(GameSchedule.status == status)
        return query.order_by(GameSchedule.game_date, GameSchedule.game_time).limit(limit).all()

    def upsert_games(self, rows: Sequence[Dict[str, Any]]) -> int:
        """Upsert on game_id; last writer wins."""
        return self.upsert(rows, SCHEDULE_CONFLICT_COLUMNS)

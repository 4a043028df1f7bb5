"""
Repository layer for data access.

Usage:
    from app.repositories import LiveOddsRepository
    from app.core.database import SessionLocal

    db = SessionLocal()
    odds = LiveOddsRepository(db).latest(limit=100)
    db.close()
"""

from app.repositories.base import BaseRepository
from app.repositories.odds_repository import LiveOddsRepository
from app.repositories.player_stats_repository import PlayerStatsRepository
from app.repositories.prop_analytics_repository import PropAnalyticsRepository
from app.repositories.matchup_repository import MatchupRepository
from app.repositories.schedule_repository import ScheduleRepository
from app.repositories.access_repository import (
    AccessCodeRepository,
    UserAccessRepository,
    ProfileRepository,
)
from app.repositories.parlay_repository import ParlayRepository

__all__ = [
    "BaseRepository",
    "LiveOddsRepository",
    "PlayerStatsRepository",
    "PropAnalyticsRepository",
    "MatchupRepository",
    "ScheduleRepository",
    "AccessCodeRepository",
    "UserAccessRepository",
    "ProfileRepository",
    "ParlayRepository",
]

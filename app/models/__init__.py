"""
Models module.

All leagues share one set of tables; filter by the `sport` column for
league-specific queries.

Usage:
    from app.models import LiveOdds, PlayerStat, GameSchedule
"""
from app.models.models import (
    Base,
    DataProvenance,
    LiveOdds,
    PlayerStat,
    PlayerMatchup,
    PropAnalytics,
    GameSchedule,
    AccessCode,
    UserAccess,
    Profile,
    Parlay,
    ParlayPick,
    model_to_dict,
)

__all__ = [
    "Base",
    "DataProvenance",
    "LiveOdds",
    "PlayerStat",
    "PlayerMatchup",
    "PropAnalytics",
    "GameSchedule",
    "AccessCode",
    "UserAccess",
    "Profile",
    "Parlay",
    "ParlayPick",
    "model_to_dict",
]

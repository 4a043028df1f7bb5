"""API adapters for normalizing data from external sources.

Each adapter fetches from one provider, normalizes into table rows and
upserts through the repositories.

Available adapters:
- sportsdata_odds_adapter: SportsData.io alternate-market player props
- sportsdata_stats_adapter: SportsData.io player season stats
- mock_odds_adapter: synthetic prop odds
- sportsblaze_adapter: SportsBlaze weekly schedule
- odds_api_adapter: The Odds API scores
- fox_sports_adapter: Fox Sports score-page scrape

Base classes:
- BaseAPIAdapter: Shared retry, circuit breaker and fetch/persist flow
- BaseScheduleAdapter: Schedule persistence through ScheduleMatcher
"""
from app.services.core.base_api_adapter import BaseAPIAdapter, FetchResult, SPORT_CONFIG
from app.services.sync.adapters.schedule_adapter import BaseScheduleAdapter
from app.services.sync.adapters.fox_sports_adapter import FoxSportsScoresAdapter
from app.services.sync.adapters.mock_odds_adapter import MockOddsAdapter
from app.services.sync.adapters.odds_api_adapter import OddsApiScoresAdapter
from app.services.sync.adapters.sportsblaze_adapter import SportsBlazeScheduleAdapter
from app.services.sync.adapters.sportsdata_odds_adapter import SportsDataOddsAdapter
from app.services.sync.adapters.sportsdata_stats_adapter import SportsDataStatsAdapter

__all__ = [
    "BaseAPIAdapter",
    "BaseScheduleAdapter",
    "FetchResult",
    "SPORT_CONFIG",
    "FoxSportsScoresAdapter",
    "MockOddsAdapter",
    "OddsApiScoresAdapter",
    "SportsBlazeScheduleAdapter",
    "SportsDataOddsAdapter",
    "SportsDataStatsAdapter",
]

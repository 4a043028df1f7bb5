"""SportsData.io player season stats.

Season totals are converted to per-game values (total / Games) so they sit on
the same scale as prop lines, and stat types use the same names the odds
fetchers store ("Points", "Passing Yards", ...). Rows are dated today: one
snapshot per player and stat per day.

A 404 or 422 from SportsData means the season has no stats yet; that is a
successful fetch with zero rows.
"""
from typing import Any, Dict, List, Optional

import httpx
from pybreaker import CircuitBreakerError

from app.core.config import settings
from app.core.logging import get_logger
from app.models.models import DataProvenance
from app.repositories.player_stats_repository import PlayerStatsRepository
from app.services.core.base_api_adapter import BaseAPIAdapter, FetchResult
from app.services.core.circuit_breaker import sportsdata_breaker

logger = get_logger(__name__)

BASE_URL = "https://api.sportsdata.io/v3"
MAX_PLAYERS = 200
NO_SEASON_STATUSES = (404, 422)

# SportsData field -> stat type, per sport
SEASON_STAT_FIELDS = {
    "NBA": {"Points": "Points", "Rebounds": "Rebounds", "Assists": "Assists"},
    "WNBA": {"Points": "Points", "Rebounds": "Rebounds", "Assists": "Assists"},
    "NFL": {
        "PassingYards": "Passing Yards",
        "RushingYards": "Rushing Yards",
        "ReceivingYards": "Receiving Yards",
    },
    "MLB": {"Hits": "Hits", "HomeRuns": "Home Runs", "RunsBattedIn": "RBIs"},
    "NHL": {"Goals": "Goals", "Assists": "Assists", "ShotsOnGoal": "Shots on Goal"},
}


class SportsDataStatsAdapter(BaseAPIAdapter):
    """Per-game season averages for up to 200 players of one sport."""

    provider = "sportsdata_io"
    breaker = sportsdata_breaker

    def __init__(self, db, sport: str = "NBA", api_key: Optional[str] = None, season: Optional[int] = None, **kwargs):
        super().__init__(db, sport, **kwargs)
        self.api_key = api_key if api_key is not None else settings.SPORTSDATA_API_KEY
        self.season = season or self.today().year

    def _url(self) -> str:
        return f"{BASE_URL}/{self.config['sportsdata_key']}/stats/json/PlayerSeasonStats/{self.season}"

    async def fetch(self) -> FetchResult:
        if not self.api_key:
            logger.warning("SPORTSDATA_API_KEY not configured, skipping stats fetch")
            return FetchResult(
                source=self.provider, sport=self.sport, error="SportsData.io key not configured"
            )

        try:
            response = await self.request(self._url(), headers={"Ocp-Apim-Subscription-Key": self.api_key})
            stats = response.json() or []
        except httpx.HTTPStatusError as e:
            if e.response.status_code in NO_SEASON_STATUSES:
                return FetchResult(
                    source=self.provider,
                    sport=self.sport,
                    message=f"No stats available for {self.sport} season {self.season}",
                )
            logger.error(f"❌ SportsData.io stats fetch failed for {self.sport}: {e}")
            return FetchResult(source=self.provider, sport=self.sport, error=str(e))
        except (httpx.HTTPError, CircuitBreakerError, ValueError) as e:
            logger.error(f"❌ SportsData.io stats fetch failed for {self.sport}: {e}")
            return FetchResult(source=self.provider, sport=self.sport, error=str(e))

        rows = self.parse_stats(stats[:MAX_PLAYERS])
        if not rows:
            return FetchResult(
                source=self.provider, sport=self.sport, message=f"No stats available for {self.sport}"
            )
        return FetchResult(source=self.provider, sport=self.sport, rows=rows)

    def parse_stats(self, stats: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        fields = SEASON_STAT_FIELDS.get(self.sport, {})
        game_date = self.today()
        rows = []
        for stat in stats:
            games = stat.get("Games") or 0
            if games <= 0:
                continue
            name = stat.get("Name") or f"{stat.get('FirstName') or ''} {stat.get('LastName') or ''}".strip()
            if not name:
                continue
            for field_name, stat_type in fields.items():
                rows.append({
                    "player_name": name,
                    "team": stat.get("Team") or "Unknown",
                    "sport": self.sport,
                    "stat_type": stat_type,
                    "value": round((stat.get(field_name) or 0) / games, 2),
                    "game_date": game_date,
                    "season_year": self.season,
                    "minutes_played": stat.get("Minutes"),
                    "source": self.provider,
                    "provenance": DataProvenance.LIVE.value,
                })
        return rows

    def persist(self, result: FetchResult) -> int:
        repo = PlayerStatsRepository(self.db)
        count = repo.upsert_stats(result.rows)
        repo.save()
        self._record_upsert("player_stats", result, count)
        return count

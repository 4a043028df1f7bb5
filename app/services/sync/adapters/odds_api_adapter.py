"""The Odds API scores adapter.

Endpoint:
    GET https://api.the-odds-api.com/v4/sports/{sport_key}/scores/
    Params: apiKey, daysFrom=3, dateFormat=iso

Data transformation:
- game_id is "odds_api_{event id}"; the event id is kept as external_id
- status: completed -> final, any score posted -> live, otherwise scheduled
- game_time is the commence time as HH:MM:SS (UTC)

Unlike the schedule scrapers this source has no sample-data fallback: a
failure is reported in the summary and nothing is written.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from pybreaker import CircuitBreakerError

from app.core.config import settings
from app.core.logging import get_logger
from app.models.models import DataProvenance
from app.services.core.base_api_adapter import SPORT_BY_ODDS_API_KEY, FetchResult
from app.services.core.circuit_breaker import odds_api_breaker
from app.services.sync.adapters.schedule_adapter import BaseScheduleAdapter, parse_score

logger = get_logger(__name__)

BASE_URL = "https://api.the-odds-api.com/v4/sports"
DAYS_FROM = 3


def derive_status(game: Dict[str, Any], home_score: Optional[int], away_score: Optional[int]) -> str:
    if game.get("completed"):
        return "final"
    if home_score is not None or away_score is not None:
        return "live"
    return "scheduled"


def _team_score(scores: Optional[List[Dict[str, Any]]], team: str) -> Optional[int]:
    for entry in scores or []:
        if entry.get("name") == team:
            return parse_score(entry.get("score"))
    return None


class OddsApiScoresAdapter(BaseScheduleAdapter):
    """
    Adapter for The Odds API scores endpoint.

    Covers the last three days plus upcoming games for one sport.
    """

    provider = "odds_api"
    breaker = odds_api_breaker

    def __init__(self, db, sport: str = "NBA", api_key: Optional[str] = None, **kwargs):
        super().__init__(db, sport, **kwargs)
        self.api_key = api_key if api_key is not None else settings.THE_ODDS_API_KEY

    async def fetch(self) -> FetchResult:
        if not self.api_key:
            logger.warning("THE_ODDS_API_KEY not configured, skipping scores fetch")
            return FetchResult(source=self.provider, sport=self.sport, error="The Odds API key not configured")

        try:
            response = await self.request(
                f"{BASE_URL}/{self.config['odds_api_key']}/scores/",
                params={"apiKey": self.api_key, "daysFrom": str(DAYS_FROM), "dateFormat": "iso"},
            )
            games = response.json() or []
        except (httpx.HTTPError, CircuitBreakerError, ValueError) as e:
            logger.error(f"❌ The Odds API scores fetch failed for {self.sport}: {e}")
            return FetchResult(source=self.provider, sport=self.sport, error=str(e))

        rows = self.parse_games(games)
        logger.info(f"Fetched {len(rows)} {self.sport} games from The Odds API")
        return FetchResult(source=self.provider, sport=self.sport, rows=rows)

    def parse_games(self, games: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        rows = []
        for game in games:
            commence = game.get("commence_time")
            if not commence:
                continue
            commence_time = datetime.fromisoformat(commence.replace("Z", "+00:00"))
            home_team = game.get("home_team") or "TBD"
            away_team = game.get("away_team") or "TBD"
            home_score = _team_score(game.get("scores"), home_team)
            away_score = _team_score(game.get("scores"), away_team)

            rows.append({
                "game_id": f"odds_api_{game.get('id')}",
                "external_id": game.get("id"),
                "sport": SPORT_BY_ODDS_API_KEY.get(game.get("sport_key"), self.sport),
                "home_team": home_team,
                "away_team": away_team,
                "game_date": commence_time.date(),
                "game_time": commence_time.strftime("%H:%M:%S"),
                "status": derive_status(game, home_score, away_score),
                "home_score": home_score,
                "away_score": away_score,
                "season_year": commence_time.year,
                "venue": None,
                "network": None,
                "home_record": None,
                "away_record": None,
                "week_number": None,
                "data_source": self.provider,
                "provenance": DataProvenance.LIVE.value,
            })
        return rows

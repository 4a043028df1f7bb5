"""SportsBlaze schedule adapter.

Endpoint:
    GET https://api.sportsblaze.net/v1/schedule/{sport}
    Header: X-API-Key

Without a key, or when the request fails, one sample game per sport is
stored instead, tagged `fallback` and dated today.
"""
from typing import Any, Dict, List, Optional

import httpx
from pybreaker import CircuitBreakerError

from app.core.config import settings
from app.core.logging import get_logger
from app.models.models import DataProvenance
from app.services.core.base_api_adapter import FetchResult
from app.services.core.circuit_breaker import sportsblaze_breaker
from app.services.sync.adapters.schedule_adapter import BaseScheduleAdapter, parse_game_date, parse_score

logger = get_logger(__name__)

BASE_URL = "https://api.sportsblaze.net/v1/schedule"
DEFAULT_GAME_TIME = "12:00 PM ET"

SAMPLE_GAMES: Dict[str, Dict[str, Any]] = {
    "NFL": {
        "home_team": "Buffalo Bills", "away_team": "Miami Dolphins",
        "game_time": "1:00 PM ET", "venue": "Highmark Stadium", "network": "CBS",
        "home_record": "0-0", "away_record": "0-0", "status": "scheduled", "week_number": 2,
    },
    "MLB": {
        "home_team": "Los Angeles Dodgers", "away_team": "San Francisco Giants",
        "game_time": "7:10 PM PT", "venue": "Dodger Stadium", "network": "Fox Sports",
        "home_record": "98-64", "away_record": "80-82", "status": "scheduled",
    },
    "NBA": {
        "home_team": "Los Angeles Lakers", "away_team": "Golden State Warriors",
        "game_time": "7:30 PM PT", "venue": "Crypto.com Arena", "network": "ESPN",
        "home_record": "Preseason", "away_record": "Preseason", "status": "scheduled",
    },
    "NHL": {
        "home_team": "New York Rangers", "away_team": "New Jersey Devils",
        "game_time": "7:00 PM ET", "venue": "Madison Square Garden", "network": "FOX Sports",
        "home_record": "Preseason", "away_record": "Preseason", "status": "scheduled",
    },
    "WNBA": {
        "home_team": "Las Vegas Aces", "away_team": "New York Liberty",
        "game_time": "9:00 PM ET", "venue": "Michelob ULTRA Arena", "network": "FOX Sports",
        "home_record": "32-8", "away_record": "30-10", "status": "final",
        "home_score": 87, "away_score": 92,
    },
}


def _name(value: Any) -> Optional[str]:
    """Team or venue given either as a string or as {"name": ...}."""
    if isinstance(value, dict):
        return value.get("name")
    return value


def _record(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return value.get("record")
    return None


class SportsBlazeScheduleAdapter(BaseScheduleAdapter):
    """Weekly schedule for one sport from SportsBlaze."""

    provider = "sportsblaze"
    breaker = sportsblaze_breaker

    def __init__(self, db, sport: str = "NBA", api_key: Optional[str] = None, **kwargs):
        super().__init__(db, sport, **kwargs)
        self.api_key = api_key if api_key is not None else settings.SPORTSBLAZE_API_KEY

    async def fetch(self) -> FetchResult:
        if not self.api_key:
            logger.info("No SportsBlaze API key found, using sample schedule")
            return self._fallback("SportsBlaze key not configured")

        try:
            response = await self.request(
                f"{BASE_URL}/{self.sport.lower()}",
                headers={"X-API-Key": self.api_key, "Content-Type": "application/json"},
            )
            games = (response.json() or {}).get("games") or []
        except (httpx.HTTPError, CircuitBreakerError, ValueError, AttributeError) as e:
            logger.error(f"❌ SportsBlaze {self.sport} schedule fetch failed: {e}")
            return self._fallback(str(e))

        logger.info(f"Received {len(games)} {self.sport} games from SportsBlaze")
        if not games:
            return self._fallback("SportsBlaze returned no games")
        return FetchResult(source=self.provider, sport=self.sport, rows=self.parse_games(games))

    def parse_games(self, games: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        today = self.today()
        rows = []
        for game in games:
            game_date = parse_game_date(game.get("game_date") or game.get("date"), today)
            broadcast = game.get("broadcast")
            rows.append({
                "game_id": f"sportsblaze_{self.sport.lower()}_{game.get('id')}",
                "external_id": str(game.get("id")) if game.get("id") is not None else None,
                "sport": self.sport,
                "home_team": _name(game.get("home_team")) or "TBD",
                "away_team": _name(game.get("away_team")) or "TBD",
                "game_date": game_date,
                "game_time": game.get("game_time") or game.get("time") or DEFAULT_GAME_TIME,
                "venue": _name(game.get("venue")),
                "network": (broadcast or {}).get("network") if isinstance(broadcast, dict) else game.get("network"),
                "status": game.get("status") or "scheduled",
                "home_score": parse_score(game.get("home_score")),
                "away_score": parse_score(game.get("away_score")),
                "week_number": game.get("week_number") or game.get("week"),
                "season_year": game.get("season_year") or game_date.year,
                "home_record": _record(game.get("home_team")),
                "away_record": _record(game.get("away_team")),
                "data_source": self.provider,
                "provenance": DataProvenance.LIVE.value,
            })
        return rows

    def _fallback(self, reason: str) -> FetchResult:
        today = self.today()
        sample = SAMPLE_GAMES[self.sport]
        row = {
            "game_id": f"sportsblaze_mock_{self.sport.lower()}_1",
            "sport": self.sport,
            "game_date": today,
            "season_year": today.year,
            "home_score": None,
            "away_score": None,
            "week_number": None,
            "data_source": "sportsblaze_mock",
            "provenance": DataProvenance.FALLBACK.value,
        }
        row.update(sample)
        return FetchResult(
            source=self.provider,
            sport=self.sport,
            rows=[row],
            provenance=DataProvenance.FALLBACK.value,
            message=f"Using sample schedule: {reason}",
        )

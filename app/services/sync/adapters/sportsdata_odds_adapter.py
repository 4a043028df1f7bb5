"""SportsData.io alternate-market player prop odds.

Endpoint:
    GET https://api.sportsdata.io/v3/{sport}/odds/json/AlternateMarketGameOddsByDate/{date}

Each game carries PregameOdds (one entry per sportsbook) and
AlternateMarketPregameOdds (the player markets). Payouts are decimal and are
converted to American odds strings before storage.

When the key is missing, the circuit is open, or the request fails, mock odds
are generated instead and tagged `fallback`.
"""
import random
from typing import Any, Dict, List, Optional

from pybreaker import CircuitBreakerError
import httpx

from app.core.config import settings
from app.core.logging import get_logger
from app.models.models import DataProvenance
from app.repositories.odds_repository import LiveOddsRepository
from app.services.core.base_api_adapter import BaseAPIAdapter, FetchResult
from app.services.core.circuit_breaker import sportsdata_breaker
from app.services.edge.heuristics import decimal_to_american
from app.services.sync.adapters.mock_odds_adapter import VALUE_RATINGS, generate_mock_odds

logger = get_logger(__name__)

BASE_URL = "https://api.sportsdata.io/v3"

# SportsData market name -> our stat type
MARKET_STAT_TYPES = {
    "Player Points": "Points",
    "Player Rebounds": "Rebounds",
    "Player Assists": "Assists",
    "Player Threes": "3-Pointers Made",
    "Player Passing Yards": "Passing Yards",
    "Player Rushing Yards": "Rushing Yards",
    "Player Receiving Yards": "Receiving Yards",
    "Player Receptions": "Receptions",
    "Player Touchdowns": "Touchdowns",
    "Player Hits": "Hits",
    "Player Home Runs": "Home Runs",
    "Player RBIs": "RBIs",
    "Player Goals": "Goals",
    "Player Shots on Goal": "Shots on Goal",
}
DEFAULT_STAT_TYPE = "Points"


class SportsDataOddsAdapter(BaseAPIAdapter):
    """Player prop odds from SportsData.io for one sport and date."""

    provider = "sportsdata_io"
    breaker = sportsdata_breaker

    def __init__(
        self,
        db,
        sport: str = "NBA",
        api_key: Optional[str] = None,
        rng: Optional[random.Random] = None,
        **kwargs
    ):
        super().__init__(db, sport, **kwargs)
        self.api_key = api_key if api_key is not None else settings.SPORTSDATA_API_KEY
        self.rng = rng or random.Random()

    def _url(self, date_str: str) -> str:
        return (
            f"{BASE_URL}/{self.config['sportsdata_key']}/odds/json/"
            f"AlternateMarketGameOddsByDate/{date_str}"
        )

    async def fetch(self, date_str: Optional[str] = None) -> FetchResult:
        date_str = date_str or self.today().isoformat()

        if not self.api_key:
            logger.warning(f"SPORTSDATA_API_KEY not configured, generating {self.sport} mock odds")
            return self._fallback("SportsData.io key not configured")

        try:
            response = await self.request(
                self._url(date_str),
                headers={"Ocp-Apim-Subscription-Key": self.api_key},
            )
            games = response.json() or []
        except (httpx.HTTPError, CircuitBreakerError, ValueError) as e:
            logger.error(f"❌ SportsData.io odds fetch failed for {self.sport}: {e}")
            return self._fallback(str(e))

        rows = self.parse_games(games)
        logger.info(f"Parsed {len(rows)} {self.sport} player props from SportsData.io")
        return FetchResult(source=self.provider, sport=self.sport, rows=rows)

    def parse_games(self, games: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        rows = []
        for game in games:
            home_team = game.get("HomeTeam") or "Unknown"
            bookmakers = game.get("PregameOdds") or []
            markets = game.get("AlternateMarketPregameOdds") or []
            for book in bookmakers:
                sportsbook = book.get("Sportsbook") or "Unknown"
                for market in markets:
                    market_type = market.get("MarketType") or ""
                    if "Player" not in market_type:
                        continue
                    rows.append({
                        "player_name": market.get("PlayerName") or "Unknown Player",
                        "team": home_team,
                        "sport": self.sport,
                        "stat_type": MARKET_STAT_TYPES.get(market_type, DEFAULT_STAT_TYPE),
                        "line": market.get("Value") or 0,
                        "over_odds": decimal_to_american(market.get("OverPayout")),
                        "under_odds": decimal_to_american(market.get("UnderPayout")),
                        "sportsbook": sportsbook,
                        "confidence_score": self.rng.randrange(50, 90),
                        "value_rating": self.rng.choice(VALUE_RATINGS),
                        "data_source": self.provider,
                        "provenance": DataProvenance.LIVE.value,
                    })
        return rows

    def _fallback(self, reason: str) -> FetchResult:
        rows = generate_mock_odds(
            self.sport,
            self.config,
            self.rng,
            data_source="sportsdata_io_mock",
            provenance=DataProvenance.FALLBACK.value,
        )
        return FetchResult(
            source=self.provider,
            sport=self.sport,
            rows=rows,
            provenance=DataProvenance.FALLBACK.value,
            message=f"Using mock odds: {reason}",
        )

    def persist(self, result: FetchResult) -> int:
        repo = LiveOddsRepository(self.db)
        count = repo.upsert_odds(result.rows)
        repo.save()
        self._record_upsert("live_odds", result, count)
        return count

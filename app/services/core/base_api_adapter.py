"""
Base API Adapter for third-party sports data sources.

This module provides a common base class and sport configuration for the
fetchers that pull odds, stats and schedules from external APIs and persist
them through the repositories.

The base adapter provides:
- Shared retry logic with exponential backoff (transient failures only)
- A per-provider circuit breaker around each request
- Sport-specific configuration for the five supported leagues
- A fetch -> persist -> summary flow shared by every fetcher

Usage:
    class SportsBlazeScheduleAdapter(BaseAPIAdapter):
        provider = "sportsblaze"
        breaker = sportsblaze_breaker

        async def fetch(self) -> FetchResult:
            ...

        def persist(self, result: FetchResult) -> int:
            ...

    adapter = SportsBlazeScheduleAdapter(db, sport="NBA")
    summary = await adapter.sync()
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

import httpx
from pybreaker import CircuitBreaker
from sqlalchemy.orm import Session
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from app.core.config import settings
from app.core.logging import get_logger
from app.core.metrics import record_provider_failure, record_provider_success, record_rows_upserted
from app.models.models import DataProvenance

logger = get_logger(__name__)

SUPPORTED_SPORTS = ("NBA", "NFL", "MLB", "NHL", "WNBA")

# Sport configuration for API adapters: provider keys plus the sample rosters
# the synthetic generators draw from
SPORT_CONFIG: Dict[str, Dict[str, Any]] = {
    "NBA": {
        "name": "NBA",
        "sportsdata_key": "nba",
        "odds_api_key": "basketball_nba",
        "fox_path": "nba",
        "thesportsdb_sport": "Basketball",
        "players": ["LeBron James", "Stephen Curry", "Luka Doncic", "Giannis Antetokounmpo"],
        "teams": ["LAL", "GSW", "DAL", "MIL", "BOS", "MIA"],
        "stat_types": ["Points", "Rebounds", "Assists", "3-Pointers Made", "Steals"],
        "line_range": (15.0, 45.0),
    },
    "NFL": {
        "name": "NFL",
        "sportsdata_key": "nfl",
        "odds_api_key": "americanfootball_nfl",
        "fox_path": "nfl",
        "thesportsdb_sport": "American Football",
        "players": ["Josh Allen", "Patrick Mahomes", "Lamar Jackson", "Dak Prescott"],
        "teams": ["BUF", "KC", "BAL", "DAL", "SF", "PHI"],
        "stat_types": ["Passing Yards", "Rushing Yards", "Receptions", "Passing TDs", "Rushing TDs"],
        "line_range": (15.0, 45.0),
    },
    "MLB": {
        "name": "MLB",
        "sportsdata_key": "mlb",
        "odds_api_key": "baseball_mlb",
        "fox_path": "mlb",
        "thesportsdb_sport": "Baseball",
        "players": ["Mookie Betts", "Aaron Judge", "Ronald Acuna Jr.", "Mike Trout"],
        "teams": ["LAD", "NYY", "ATL", "LAA", "HOU", "TB"],
        "stat_types": ["Hits", "Total Bases", "Runs", "RBIs", "Strikeouts"],
        "line_range": (15.0, 45.0),
    },
    "NHL": {
        "name": "NHL",
        "sportsdata_key": "nhl",
        "odds_api_key": "icehockey_nhl",
        "fox_path": "nhl",
        "thesportsdb_sport": "Ice Hockey",
        "players": ["Connor McDavid", "Leon Draisaitl", "Nathan MacKinnon", "David Pastrnak"],
        "teams": ["EDM", "COL", "BOS", "TOR", "FLA", "CAR"],
        "stat_types": ["Goals", "Assists", "Points", "Shots on Goal"],
        "line_range": (15.0, 45.0),
    },
    "WNBA": {
        "name": "WNBA",
        "sportsdata_key": "wnba",
        "odds_api_key": "basketball_wnba",
        "fox_path": "wnba",
        "thesportsdb_sport": "Basketball",
        "players": ["A'ja Wilson", "Breanna Stewart", "Diana Taurasi", "Sabrina Ionescu"],
        "teams": ["LV", "NY", "PHX", "SEA", "CHI", "LAS"],
        "stat_types": ["Points", "Rebounds", "Assists", "3-Pointers Made", "Steals"],
        "line_range": (15.0, 45.0),
    },
}

SPORT_BY_ODDS_API_KEY = {config["odds_api_key"]: sport for sport, config in SPORT_CONFIG.items()}


def is_transient_http_error(exc: BaseException) -> bool:
    """Transport failures, 429 and 5xx responses are worth retrying; other 4xx are not."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return isinstance(exc, httpx.RequestError)


@dataclass
class FetchResult:
    """Rows produced by one fetch, ready to persist."""
    source: str
    sport: str
    rows: List[Dict[str, Any]] = field(default_factory=list)
    provenance: str = DataProvenance.LIVE.value
    error: Optional[str] = None
    message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    def summary(self, upserted: int) -> Dict[str, Any]:
        result = {
            "success": self.success,
            "source": self.source,
            "sport": self.sport,
            "count": upserted,
            "provenance": self.provenance,
        }
        if self.error:
            result["error"] = self.error
        if self.message:
            result["message"] = self.message
        return result


class BaseAPIAdapter:
    """
    Base class for adapters that fetch data from external sports APIs.

    Subclasses set `provider` and `breaker` and implement fetch() and
    persist(). The httpx client can be injected (tests pass one built on
    httpx.MockTransport); otherwise it is created lazily.

    Attributes:
        db: Database session
        sport: League code (must exist in SPORT_CONFIG)
        config: Sport configuration dict
    """

    provider = "base"
    breaker: Optional[CircuitBreaker] = None
    max_attempts = 3

    def __init__(
        self,
        db: Session,
        sport: str = "NBA",
        client: Optional[httpx.AsyncClient] = None,
        retry_wait=None,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        if sport not in SPORT_CONFIG:
            raise ValueError(f"Unknown sport: {sport}. Must be one of: {list(SPORT_CONFIG.keys())}")

        self.db = db
        self.sport = sport
        self.config = SPORT_CONFIG[sport]
        self.clock = clock
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=2, max=10)
        self._client = client
        self._owns_client = client is None

    def today(self) -> date:
        return self.clock().date()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(settings.HTTP_TIMEOUT),
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
                follow_redirects=True,
            )
        return self._client

    async def _fetch_with_retry(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """
        GET with retry logic.

        Raises:
            httpx.HTTPStatusError: On HTTP errors (after retries for 429/5xx)
            httpx.RequestError: On network errors, after retries
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception(is_transient_http_error),
            reraise=True,
        ):
            with attempt:
                response = await client.get(url, params=params, headers=headers)
                response.raise_for_status()
        return response

    async def request(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """
        Fetch a URL through the provider's circuit breaker and the retry policy.

        Raises:
            CircuitBreakerError: The provider's circuit is open
            httpx.HTTPError: The request failed after retries
        """
        client = await self._get_client()
        try:
            if self.breaker is not None:
                with self.breaker.calling():
                    response = await self._fetch_with_retry(client, url, params=params, headers=headers)
            else:
                response = await self._fetch_with_retry(client, url, params=params, headers=headers)
        except Exception as e:
            record_provider_failure(self.provider, type(e).__name__)
            raise
        record_provider_success(self.provider)
        return response

    async def fetch(self) -> FetchResult:
        raise NotImplementedError

    def persist(self, result: FetchResult) -> int:
        """Upsert the fetched rows; returns the number of rows written."""
        raise NotImplementedError

    def _record_upsert(self, table: str, result: FetchResult, count: int) -> None:
        record_rows_upserted(table, result.provenance, count)
        logger.info(
            f"✅ {self.provider} {self.sport}: upserted {count} {table} rows ({result.provenance})"
        )

    async def sync(self) -> Dict[str, Any]:
        """Fetch, persist and summarise."""
        try:
            result = await self.fetch()
        finally:
            await self.close()
        upserted = self.persist(result) if result.rows else 0
        return result.summary(upserted)

    async def close(self):
        """Close the HTTP client if this adapter created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

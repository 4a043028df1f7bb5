"""
Player search backed by TheSportsDB, with a static roster fallback.

TheSportsDB's free endpoint returns a whole league's roster, so the query is
applied client-side. Results are cached per (sport, query) in a TTLCache.
"""
import asyncio
from typing import Any, Dict, List, Optional

import httpx
from pybreaker import CircuitBreakerError

from app.core.config import settings
from app.core.logging import get_logger
from app.core.metrics import record_provider_failure, record_provider_success
from app.services.core.base_api_adapter import SUPPORTED_SPORTS
from app.services.core.circuit_breaker import thesportsdb_breaker
from app.services.core.ttl_cache import TTLCache

logger = get_logger(__name__)

THESPORTSDB_URL = "https://www.thesportsdb.com/api/v1/json/3/search_all_players.php"

MIN_QUERY_LENGTH = 2
PER_SPORT_LIMIT = 15
ALL_SPORTS_LIMIT = 20
ALL_SPORTS = "All"

STATIC_PLAYERS: List[Dict[str, Any]] = [
    {"id": 1001, "name": "Josh Allen", "team": "Buffalo Bills", "sport": "NFL", "position": "QB"},
    {"id": 1002, "name": "Patrick Mahomes", "team": "Kansas City Chiefs", "sport": "NFL", "position": "QB"},
    {"id": 1003, "name": "Lamar Jackson", "team": "Baltimore Ravens", "sport": "NFL", "position": "QB"},
    {"id": 1011, "name": "Christian McCaffrey", "team": "San Francisco 49ers", "sport": "NFL", "position": "RB"},
    {"id": 1019, "name": "Travis Kelce", "team": "Kansas City Chiefs", "sport": "NFL", "position": "TE"},
    {"id": 1022, "name": "Tyreek Hill", "team": "Miami Dolphins", "sport": "NFL", "position": "WR"},
    {"id": 2001, "name": "Mike Trout", "team": "Los Angeles Angels", "sport": "MLB", "position": "OF"},
    {"id": 2002, "name": "Mookie Betts", "team": "Los Angeles Dodgers", "sport": "MLB", "position": "OF"},
    {"id": 2003, "name": "Aaron Judge", "team": "New York Yankees", "sport": "MLB", "position": "OF"},
    {"id": 2009, "name": "Shohei Ohtani", "team": "Los Angeles Dodgers", "sport": "MLB", "position": "DH/P"},
    {"id": 2017, "name": "Gerrit Cole", "team": "New York Yankees", "sport": "MLB", "position": "P"},
    {"id": 3001, "name": "Connor McDavid", "team": "Edmonton Oilers", "sport": "NHL", "position": "C"},
    {"id": 3002, "name": "Leon Draisaitl", "team": "Edmonton Oilers", "sport": "NHL", "position": "C"},
    {"id": 3003, "name": "Nathan MacKinnon", "team": "Colorado Avalanche", "sport": "NHL", "position": "C"},
    {"id": 3004, "name": "Auston Matthews", "team": "Toronto Maple Leafs", "sport": "NHL", "position": "C"},
    {"id": 3008, "name": "Cale Makar", "team": "Colorado Avalanche", "sport": "NHL", "position": "D"},
    {"id": 4001, "name": "A'ja Wilson", "team": "Las Vegas Aces", "sport": "WNBA", "position": "F"},
    {"id": 4002, "name": "Breanna Stewart", "team": "New York Liberty", "sport": "WNBA", "position": "F"},
    {"id": 4005, "name": "Sabrina Ionescu", "team": "New York Liberty", "sport": "WNBA", "position": "G"},
    {"id": 4018, "name": "Napheesa Collier", "team": "Minnesota Lynx", "sport": "WNBA", "position": "F"},
    {"id": 5001, "name": "LeBron James", "team": "Los Angeles Lakers", "sport": "NBA", "position": "F"},
    {"id": 5002, "name": "Stephen Curry", "team": "Golden State Warriors", "sport": "NBA", "position": "G"},
    {"id": 5003, "name": "Luka Doncic", "team": "Dallas Mavericks", "sport": "NBA", "position": "G"},
    {"id": 5004, "name": "Giannis Antetokounmpo", "team": "Milwaukee Bucks", "sport": "NBA", "position": "F"},
    {"id": 5005, "name": "Jayson Tatum", "team": "Boston Celtics", "sport": "NBA", "position": "F"},
    {"id": 5006, "name": "Nikola Jokic", "team": "Denver Nuggets", "sport": "NBA", "position": "C"},
]


def search_static(query: str, sport: str = ALL_SPORTS) -> List[Dict[str, Any]]:
    needle = query.lower()
    matches = [
        p for p in STATIC_PLAYERS
        if needle in p["name"].lower() and (sport == ALL_SPORTS or p["sport"] == sport)
    ]
    return matches[:PER_SPORT_LIMIT]


def _parse_player(raw: Dict[str, Any], sport: str) -> Optional[Dict[str, Any]]:
    try:
        player_id = int(raw.get("idPlayer"))
    except (TypeError, ValueError):
        return None
    return {
        "id": player_id,
        "name": raw.get("strPlayer") or "",
        "team": raw.get("strTeam") or "Free Agent",
        "sport": sport,
        "position": raw.get("strPosition") or "N/A",
    }


class PlayerSearchService:
    """
    Usage:
        service = PlayerSearchService(cache=TTLCache(ttl=600, capacity=256))
        players = await service.search("lebron", sport="NBA")
    """

    def __init__(
        self,
        cache: Optional[TTLCache] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None
    ):
        self.cache = cache or TTLCache(
            ttl=settings.PLAYER_SEARCH_CACHE_TTL,
            capacity=settings.PLAYER_SEARCH_CACHE_SIZE,
        )
        self.timeout = timeout or settings.HTTP_TIMEOUT
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    async def _fetch_roster(self, sport: str) -> List[Dict[str, Any]]:
        client = await self._get_client()
        with thesportsdb_breaker.calling():
            response = await client.get(THESPORTSDB_URL, params={"l": sport})
            response.raise_for_status()
        return response.json().get("player") or []

    async def search_sport(self, query: str, sport: str) -> List[Dict[str, Any]]:
        """One league; falls back to the static roster when the lookup fails."""
        key = (sport, query.lower())
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            roster = await self._fetch_roster(sport)
        except (httpx.HTTPError, CircuitBreakerError, ValueError) as e:
            logger.warning(f"TheSportsDB lookup failed for {sport}, using static players: {e}")
            record_provider_failure("thesportsdb", type(e).__name__)
            return search_static(query, sport)

        record_provider_success("thesportsdb")
        needle = query.lower()
        players = []
        for raw in roster:
            if needle not in (raw.get("strPlayer") or "").lower():
                continue
            player = _parse_player(raw, sport)
            if player is not None:
                players.append(player)
            if len(players) >= PER_SPORT_LIMIT:
                break

        self.cache.set(key, players)
        return players

    async def search(self, query: str, sport: str = ALL_SPORTS) -> List[Dict[str, Any]]:
        """Queries shorter than two characters return nothing."""
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []
        if sport != ALL_SPORTS:
            return await self.search_sport(query, sport)

        results = await asyncio.gather(*(self.search_sport(query, s) for s in SUPPORTED_SPORTS))
        players = [p for sport_players in results for p in sport_players]
        return players[:ALL_SPORTS_LIMIT]

    async def close(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


_player_search_service: Optional[PlayerSearchService] = None


def get_player_search_service() -> PlayerSearchService:
    """Process-wide service so the cache is shared across requests."""
    global _player_search_service
    if _player_search_service is None:
        _player_search_service = PlayerSearchService()
    return _player_search_service

"""Synthetic player-prop odds for when no odds provider is reachable.

Rows are tagged `synthetic` so consumers can tell them apart from real lines.
"""
import random
from typing import Any, Dict, List, Optional

from app.models.models import DataProvenance
from app.repositories.odds_repository import LiveOddsRepository
from app.services.core.base_api_adapter import BaseAPIAdapter, FetchResult

SPORTSBOOKS = ["DraftKings", "FanDuel", "BetMGM", "Caesars", "PointsBet"]
VALUE_RATINGS = ["high", "medium", "low"]


def format_american(odds: int) -> str:
    return f"+{odds}" if odds > 0 else str(odds)


def generate_mock_odds(
    sport: str,
    config: Dict[str, Any],
    rng: random.Random,
    data_source: str = "mock_generator",
    provenance: str = DataProvenance.SYNTHETIC.value
) -> List[Dict[str, Any]]:
    """One row per (player, stat type) with a random book, line and prices."""
    teams = config["teams"]
    low, high = config["line_range"]
    rows = []
    for player in config["players"]:
        team = rng.choice(teams)
        for stat_type in config["stat_types"]:
            line = round(rng.random() * (high - low) + low, 1)
            rows.append({
                "player_name": player,
                "team": team,
                "sport": sport,
                "stat_type": stat_type,
                "line": line,
                "opening_line": line,
                "line_movement": "stable",
                "over_odds": format_american(rng.randrange(-150, 150)),
                "under_odds": format_american(rng.randrange(-150, 150)),
                "sportsbook": rng.choice(SPORTSBOOKS),
                "confidence_score": rng.randrange(60, 95),
                "value_rating": rng.choice(VALUE_RATINGS),
                "data_source": data_source,
                "provenance": provenance,
            })
    return rows


class MockOddsAdapter(BaseAPIAdapter):
    """Generates prop odds locally; makes no network calls."""

    provider = "mock_generator"

    def __init__(self, db, sport: str = "NBA", rng: Optional[random.Random] = None, **kwargs):
        super().__init__(db, sport, **kwargs)
        self.rng = rng or random.Random()

    async def fetch(self) -> FetchResult:
        rows = generate_mock_odds(self.sport, self.config, self.rng)
        return FetchResult(
            source=self.provider,
            sport=self.sport,
            rows=rows,
            provenance=DataProvenance.SYNTHETIC.value,
        )

    def persist(self, result: FetchResult) -> int:
        repo = LiveOddsRepository(self.db)
        count = repo.upsert_odds(result.rows)
        repo.save()
        self._record_upsert("live_odds", result, count)
        return count

"""Prop analytics population.

For every (player, stat type) quoted in live_odds for a sport, the stored
player_stats values are summarised against the average posted line:

- season_average: mean of every stored value
- recent_form: mean of the five newest values
- hit_rate: percent of those five that went over the average line
- edge_percentage: heuristics.line_edge(recent_form, average line)
- trend_direction: up/down when recent form is more than 5% away from the
  season average, steady otherwise

Pairs with no stats are skipped. When nothing at all can be computed for a
sport, synthetic rows are generated from a fixed player list instead and
tagged `synthetic`.
"""
import random
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.core.metrics import record_rows_upserted
from app.models.models import DataProvenance, LiveOdds, PlayerStat
from app.repositories.odds_repository import LiveOddsRepository
from app.repositories.player_stats_repository import PlayerStatsRepository
from app.repositories.prop_analytics_repository import PropAnalyticsRepository
from app.services.core.base_api_adapter import SPORT_CONFIG
from app.services.edge import heuristics
from app.services.edge.analyzer import worst_provenance

logger = get_logger(__name__)

RECENT_GAMES = 5
TREND_BAND = 0.05

SYNTHETIC_PLAYERS: Dict[str, List[Tuple[str, str]]] = {
    "NBA": [
        ("LeBron James", "LAL"), ("Stephen Curry", "GSW"), ("Kevin Durant", "PHX"),
        ("Giannis Antetokounmpo", "MIL"), ("Luka Doncic", "DAL"), ("Jayson Tatum", "BOS"),
        ("Joel Embiid", "PHI"), ("Nikola Jokic", "DEN"), ("Ja Morant", "MEM"), ("Damian Lillard", "MIL"),
    ],
    "NFL": [
        ("Josh Allen", "BUF"), ("Lamar Jackson", "BAL"), ("Patrick Mahomes", "KC"),
        ("Joe Burrow", "CIN"), ("Dak Prescott", "DAL"), ("Justin Jefferson", "MIN"),
        ("Cooper Kupp", "LAR"), ("Tyreek Hill", "MIA"), ("Travis Kelce", "KC"), ("Christian McCaffrey", "SF"),
    ],
    "MLB": [
        ("Mike Trout", "LAA"), ("Mookie Betts", "LAD"), ("Aaron Judge", "NYY"),
        ("Ronald Acuna Jr.", "ATL"), ("Juan Soto", "NYY"), ("Shohei Ohtani", "LAD"),
        ("Freddie Freeman", "LAD"), ("Manny Machado", "SD"), ("Vladimir Guerrero Jr.", "TOR"), ("Bo Bichette", "TOR"),
    ],
    "NHL": [
        ("Connor McDavid", "EDM"), ("Nathan MacKinnon", "COL"), ("Leon Draisaitl", "EDM"),
        ("Erik Karlsson", "PIT"), ("David Pastrnak", "BOS"), ("Auston Matthews", "TOR"),
        ("Mitch Marner", "TOR"), ("Cale Makar", "COL"), ("Sidney Crosby", "PIT"), ("Alexander Ovechkin", "WSH"),
    ],
}

SYNTHETIC_STAT_TYPES: Dict[str, List[str]] = {
    "NBA": ["Points", "Rebounds", "Assists", "3-Pointers Made", "Steals", "Blocks"],
    "NFL": ["Passing Yards", "Rushing Yards", "Receiving Yards", "Touchdowns", "Receptions", "Completions"],
    "MLB": ["Hits", "Runs", "RBIs", "Home Runs", "Stolen Bases", "Strikeouts"],
    "NHL": ["Goals", "Assists", "Points", "Shots on Goal", "Hits", "Blocked Shots"],
}


def trend_direction(recent_form: float, season_average: float) -> str:
    if season_average <= 0:
        return "steady"
    if recent_form > season_average * (1 + TREND_BAND):
        return "up"
    if recent_form < season_average * (1 - TREND_BAND):
        return "down"
    return "steady"


def summarize(values: Sequence[float], average_line: float) -> Dict[str, Any]:
    """Analytics columns for stat values (newest first) against an average line."""
    recent = list(values[:RECENT_GAMES])
    season_average = heuristics.average(values)
    recent_form = heuristics.average(recent)
    hits = sum(1 for value in recent if value > average_line)
    return {
        "season_average": round(season_average, 2),
        "recent_form": round(recent_form, 2),
        "hit_rate": round(hits / len(recent) * 100, 1),
        "edge_percentage": round(heuristics.line_edge(recent_form, average_line), 2),
        "trend_direction": trend_direction(recent_form, season_average),
    }


class PropAnalyticsPopulator:
    """Recompute prop_analytics for one sport."""

    def __init__(
        self,
        db: Session,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.db = db
        self.rng = rng or random.Random()
        self.clock = clock
        self.odds_repository = LiveOddsRepository(db)
        self.stats_repository = PlayerStatsRepository(db)
        self.analytics_repository = PropAnalyticsRepository(db)

    def compute(self, sport: str) -> List[Dict[str, Any]]:
        grouped: Dict[Tuple[str, str], List[LiveOdds]] = defaultdict(list)
        for odds in self.odds_repository.filter_by(sport=sport):
            grouped[(odds.player_name, odds.stat_type)].append(odds)

        now = self.clock()
        rows = []
        for (player_name, stat_type), quotes in grouped.items():
            stats: List[PlayerStat] = self.stats_repository.for_player(player_name, stat_type, limit=None)
            if not stats:
                continue
            average_line = heuristics.average(q.line for q in quotes)
            row = {
                "player_name": player_name,
                "team": quotes[0].team,
                "sport": sport,
                "stat_type": stat_type,
                "provenance": worst_provenance(list(quotes) + stats),
                "calculated_at": now,
            }
            row.update(summarize([s.value for s in stats], average_line))
            rows.append(row)
        return rows

    def synthesize(self, sport: str) -> List[Dict[str, Any]]:
        """Random analytics for the sport's sample players."""
        players = SYNTHETIC_PLAYERS.get(sport)
        if players is None:
            config = SPORT_CONFIG[sport]
            players = [(name, self.rng.choice(config["teams"])) for name in config["players"]]
        stat_types = SYNTHETIC_STAT_TYPES.get(sport) or SPORT_CONFIG[sport]["stat_types"]

        now = self.clock()
        rows = []
        for player_name, team in players:
            for stat_type in stat_types:
                rows.append({
                    "player_name": player_name,
                    "team": team,
                    "sport": sport,
                    "stat_type": stat_type,
                    "season_average": round(self.rng.uniform(10, 40), 2),
                    "recent_form": round(self.rng.uniform(8, 43), 2),
                    "hit_rate": round(self.rng.uniform(50, 90), 1),
                    "edge_percentage": round(self.rng.uniform(2, 17), 2),
                    "trend_direction": self.rng.choice(["up", "down"]),
                    "provenance": DataProvenance.SYNTHETIC.value,
                    "calculated_at": now,
                })
        return rows

    def populate(self, sport: str) -> Dict[str, Any]:
        rows = self.compute(sport)
        if not rows:
            logger.warning(f"No odds/stats pairs to analyse for {sport}, generating synthetic analytics")
            rows = self.synthesize(sport)
            provenance = DataProvenance.SYNTHETIC.value
        else:
            provenance = worst_provenance(rows)

        count = self.analytics_repository.upsert_analytics(rows)
        self.analytics_repository.save()
        record_rows_upserted("prop_analytics", provenance, count)
        logger.info(f"✅ Prop analytics {sport}: upserted {count} rows ({provenance})")
        return {"success": True, "sport": sport, "count": count, "provenance": provenance}


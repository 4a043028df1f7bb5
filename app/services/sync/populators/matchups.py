"""Synthetic NBA head-to-head history for player matchup cards.

Ten games per (player, opponent, stat type), one per week going back from
today. Rows are inserted in batches of 100 with ignore-duplicates; each batch
is committed on its own, so a failure part-way keeps the earlier batches.
"""
import random
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.core.metrics import record_rows_upserted
from app.models.models import DataProvenance
from app.repositories.matchup_repository import MatchupRepository

logger = get_logger(__name__)

BATCH_SIZE = 100
GAMES_PER_MATCHUP = 10

MATCHUP_PLAYERS: List[Tuple[str, str, List[str]]] = [
    ("LeBron James", "LAL", ["Stephen Curry", "Luka Doncic", "Jayson Tatum"]),
    ("Stephen Curry", "GSW", ["LeBron James", "Damian Lillard", "Ja Morant"]),
    ("Luka Doncic", "DAL", ["LeBron James", "Nikola Jokic", "Shai Gilgeous-Alexander"]),
    ("Jayson Tatum", "BOS", ["LeBron James", "Kevin Durant", "Jimmy Butler"]),
    ("Nikola Jokic", "DEN", ["Anthony Davis", "Joel Embiid", "Giannis Antetokounmpo"]),
    ("Giannis Antetokounmpo", "MIL", ["Joel Embiid", "Kevin Durant", "Jayson Tatum"]),
]

OPPONENT_TEAMS = ["LAL", "GSW", "DAL", "BOS", "DEN", "MIL", "PHI", "BKN", "MIA"]

# stat type -> (value low, value span, line noise)
STAT_RANGES: Dict[str, Tuple[float, float, float]] = {
    "points": (15, 20, 5),
    "rebounds": (4, 8, 3),
    "assists": (3, 8, 2),
}
DEFAULT_STAT_RANGE = (1, 4, 2)

STAT_TYPES = ["points", "rebounds", "assists", "steals", "blocks", "three_pointers"]


def matchup_result(value: float, line: Optional[float]) -> Optional[str]:
    if not line:
        return None
    if value > line:
        return "over"
    if value < line:
        return "under"
    return "push"


class MatchupPopulator:
    """Generate and store synthetic head-to-head rows."""

    def __init__(
        self,
        db: Session,
        rng: Optional[random.Random] = None,
        today: Callable[[], date] = date.today
    ):
        self.db = db
        self.rng = rng or random.Random()
        self.today = today
        self.repository = MatchupRepository(db)

    def _value(self, stat_type: str) -> float:
        low, span, _ = STAT_RANGES.get(stat_type, DEFAULT_STAT_RANGE)
        return round(self.rng.random() * span + low, 1)

    def generate(self) -> List[Dict[str, Any]]:
        today = self.today()
        rows = []
        for player_name, player_team, opponents in MATCHUP_PLAYERS:
            for opponent in opponents:
                for stat_type in STAT_TYPES:
                    _, _, noise = STAT_RANGES.get(stat_type, DEFAULT_STAT_RANGE)
                    for game_index in range(GAMES_PER_MATCHUP):
                        game_date = today - timedelta(days=game_index * 7 + self.rng.randrange(7))
                        player_value = self._value(stat_type)
                        line = float(round(player_value + (self.rng.random() - 0.5) * noise))
                        rows.append({
                            "player_name": player_name,
                            "player_team": player_team,
                            "opponent_name": opponent,
                            "opponent_team": self.rng.choice(OPPONENT_TEAMS),
                            "game_date": game_date,
                            "stat_type": stat_type,
                            "player_value": player_value,
                            "opponent_value": self._value(stat_type),
                            "player_line": line,
                            "result": matchup_result(player_value, line),
                            "sport": "NBA",
                            "season_year": game_date.year,
                            "data_source": "matchup_generator",
                            "provenance": DataProvenance.SYNTHETIC.value,
                        })
        return rows

    def populate(self) -> Dict[str, Any]:
        rows = self.generate()
        logger.info(f"Inserting {len(rows)} matchup records...")

        inserted = 0
        for start in range(0, len(rows), BATCH_SIZE):
            batch = rows[start:start + BATCH_SIZE]
            inserted += self.repository.insert_ignoring_duplicates(batch)
            self.repository.save()

        record_rows_upserted("player_matchups", DataProvenance.SYNTHETIC.value, inserted)
        logger.info(f"✅ Player matchups populated: {len(rows)} records")
        return {
            "success": True,
            "message": "Player matchups populated successfully",
            "records": len(rows),
            "provenance": DataProvenance.SYNTHETIC.value,
        }

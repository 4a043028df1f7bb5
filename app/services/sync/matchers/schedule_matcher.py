"""Schedule matcher for de-duplicating games reported by several providers.

Every schedule fetcher produces rows with its own game_id. Before they are
upserted, each row is resolved against what is already stored:

1. game_id - the row's own natural key already exists
2. external_id - the same provider already stored this game under another key
3. fuzzy - same sport and date, home and away team names match
   (normalised containment, then rapidfuzz); logged as a warning.
   Only rows from a live provider are fuzzy matched, so sample games never
   overwrite a real stored game.
4. new - nothing matched, the row keeps its own game_id

When a stored game is found by (2) or (3) the row is rewritten to the
stored game_id, so the upsert updates that row instead of inserting a
duplicate.
"""
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.models import DataProvenance, GameSchedule
from app.repositories.schedule_repository import ScheduleRepository
from app.services.sync.utils.name_normalizer import team_names_match

logger = get_logger(__name__)

MATCH_GAME_ID = "game_id"
MATCH_EXTERNAL_ID = "external_id"
MATCH_FUZZY = "fuzzy"
MATCH_NEW = "new"


class ScheduleMatcher:
    """
    Resolve incoming schedule rows to stored games.

    Rows are plain dicts in the games_schedule column layout.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = ScheduleRepository(db)

    def find_match(self, row: Dict[str, Any]) -> Tuple[Optional[GameSchedule], str]:
        """
        Find the stored game an incoming row refers to.

        Returns:
            (stored game or None, match method)
        """
        existing = self.repository.find_by_game_id(row["game_id"])
        if existing:
            return existing, MATCH_GAME_ID

        if row.get("external_id") and row.get("data_source"):
            existing = self.repository.find_by_external_id(row["data_source"], str(row["external_id"]))
            if existing:
                return existing, MATCH_EXTERNAL_ID

        if row.get("provenance", DataProvenance.LIVE.value) != DataProvenance.LIVE.value:
            return None, MATCH_NEW

        for candidate in self.repository.on_date(row["sport"], row["game_date"]):
            if (
                team_names_match(candidate.home_team, row["home_team"])
                and team_names_match(candidate.away_team, row["away_team"])
            ):
                logger.warning(
                    f"Fuzzy schedule match: {row['away_team']} @ {row['home_team']} "
                    f"({row.get('data_source')}, {row['game_id']}) -> stored game {candidate.game_id} "
                    f"({candidate.away_team} @ {candidate.home_team}, {candidate.data_source})"
                )
                return candidate, MATCH_FUZZY

        return None, MATCH_NEW

    def resolve(self, row: Dict[str, Any]) -> Tuple[Dict[str, Any], str]:
        """Copy of `row` keyed to the stored game it matches, plus the match method."""
        existing, method = self.find_match(row)
        if existing is None or method == MATCH_GAME_ID:
            return row, method

        resolved = dict(row)
        resolved["game_id"] = existing.game_id
        return resolved, method

    def resolve_batch(self, rows: Sequence[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """
        Resolve a batch of rows.

        Returns:
            (resolved rows, count of rows per match method)
        """
        resolved = []
        methods: Counter = Counter()
        for row in rows:
            resolved_row, method = self.resolve(row)
            resolved.append(resolved_row)
            methods[method] += 1

        if methods[MATCH_FUZZY]:
            logger.warning(f"{methods[MATCH_FUZZY]} of {len(rows)} schedule rows resolved by fuzzy team matching")
        return resolved, dict(methods)

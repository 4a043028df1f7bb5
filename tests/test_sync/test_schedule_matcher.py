"""Tests for ScheduleMatcher and schedule upserts.

Test Strategy:
1. Resolution order: game_id, then provider external id, then fuzzy teams
2. Fuzzy matches are logged as warnings; sample rows are never fuzzy matched
3. Rows resolved to a stored game update it instead of inserting a duplicate
4. A second upsert of the same game keeps the later status
"""
import logging
import sys
from datetime import date
from pathlib import Path

from sqlalchemy.orm import Session

sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import add_game

from app.models.models import GameSchedule
from app.repositories.schedule_repository import ScheduleRepository
from app.services.sync.matchers.schedule_matcher import (
    MATCH_EXTERNAL_ID,
    MATCH_FUZZY,
    MATCH_GAME_ID,
    MATCH_NEW,
    ScheduleMatcher,
)

GAME_DATE = date(2025, 1, 15)


def _row(game_id: str, home: str, away: str, **overrides) -> dict:
    row = {
        "game_id": game_id,
        "sport": "NBA",
        "home_team": home,
        "away_team": away,
        "game_date": GAME_DATE,
        "game_time": "7:30 PM ET",
        "status": "scheduled",
        "season_year": 2025,
        "data_source": "fox_sports",
    }
    row.update(overrides)
    return row


class TestScheduleMatcher:
    """Resolving incoming rows to stored games."""

    # Match methods
    # ─────────────────────────────────────────────────────────────

    def test_same_game_id(self, db_session: Session):
        add_game(db_session, "sportsblaze_nba_1", "Los Angeles Lakers", "Golden State Warriors", game_date=GAME_DATE)

        _, method = ScheduleMatcher(db_session).find_match(
            _row("sportsblaze_nba_1", "Los Angeles Lakers", "Golden State Warriors")
        )

        assert method == MATCH_GAME_ID

    def test_provider_external_id(self, db_session: Session):
        add_game(
            db_session, "odds_api_old", "Boston Celtics", "Miami Heat",
            game_date=GAME_DATE, external_id="abc", data_source="odds_api",
        )

        resolved, method = ScheduleMatcher(db_session).resolve(
            _row("odds_api_new", "Celtics", "Heat", external_id="abc", data_source="odds_api")
        )

        assert method == MATCH_EXTERNAL_ID
        assert resolved["game_id"] == "odds_api_old"

    def test_fuzzy_team_match_is_logged(self, db_session: Session, caplog):
        add_game(
            db_session, "sportsblaze_nba_1", "Los Angeles Lakers", "Golden State Warriors",
            game_date=GAME_DATE, data_source="sportsblaze",
        )

        with caplog.at_level(logging.WARNING, logger="app.services.sync.matchers.schedule_matcher"):
            resolved, method = ScheduleMatcher(db_session).resolve(_row("fox_nba_9", "Lakers", "Warriors"))

        assert method == MATCH_FUZZY
        assert resolved["game_id"] == "sportsblaze_nba_1"
        assert any("Fuzzy schedule match" in r.getMessage() for r in caplog.records)

    def test_sample_rows_are_not_fuzzy_matched(self, db_session: Session):
        add_game(db_session, "sportsblaze_nba_1", "Los Angeles Lakers", "Golden State Warriors", game_date=GAME_DATE)

        resolved, method = ScheduleMatcher(db_session).resolve(
            _row("fox_nba_live_1", "Lakers", "Warriors", provenance="fallback", data_source="fox_sports_sample")
        )

        assert method == MATCH_NEW
        assert resolved["game_id"] == "fox_nba_live_1"

    def test_different_date_is_new(self, db_session: Session):
        add_game(db_session, "sportsblaze_nba_1", "Los Angeles Lakers", "Golden State Warriors", game_date=GAME_DATE)

        resolved, method = ScheduleMatcher(db_session).resolve(
            _row("fox_nba_9", "Lakers", "Warriors", game_date=date(2025, 1, 16))
        )

        assert method == MATCH_NEW
        assert resolved["game_id"] == "fox_nba_9"

    def test_swapped_home_and_away_is_new(self, db_session: Session):
        add_game(db_session, "sportsblaze_nba_1", "Los Angeles Lakers", "Golden State Warriors", game_date=GAME_DATE)

        _, method = ScheduleMatcher(db_session).find_match(_row("fox_nba_9", "Warriors", "Lakers"))

        assert method == MATCH_NEW

    def test_resolve_batch_counts_methods(self, db_session: Session, caplog):
        add_game(db_session, "sportsblaze_nba_1", "Los Angeles Lakers", "Golden State Warriors", game_date=GAME_DATE)

        with caplog.at_level(logging.WARNING, logger="app.services.sync.matchers.schedule_matcher"):
            rows, methods = ScheduleMatcher(db_session).resolve_batch([
                _row("fox_nba_9", "Lakers", "Warriors"),
                _row("fox_nba_10", "Boston Celtics", "Miami Heat"),
            ])

        assert methods == {MATCH_FUZZY: 1, MATCH_NEW: 1}
        assert [r["game_id"] for r in rows] == ["sportsblaze_nba_1", "fox_nba_10"]
        assert any("resolved by fuzzy team matching" in r.getMessage() for r in caplog.records)


class TestScheduleUpsert:
    """Persisting resolved rows."""

    def test_second_upsert_keeps_later_status(self, db_session: Session):
        repo = ScheduleRepository(db_session)
        repo.upsert_games([_row("fox_nba_1", "Lakers", "Warriors", status="scheduled")])
        repo.save()
        repo.upsert_games([_row("fox_nba_1", "Lakers", "Warriors", status="final", home_score=110, away_score=104)])
        repo.save()
        db_session.expire_all()

        games = db_session.query(GameSchedule).all()
        assert len(games) == 1
        assert games[0].status == "final"
        assert games[0].home_score == 110

    def test_last_row_in_batch_wins(self, db_session: Session):
        repo = ScheduleRepository(db_session)
        repo.upsert_games([
            _row("fox_nba_1", "Lakers", "Warriors", status="scheduled"),
            _row("fox_nba_1", "Lakers", "Warriors", status="live"),
        ])
        repo.save()

        assert db_session.query(GameSchedule).one().status == "live"

    def test_fuzzy_resolved_row_updates_stored_game(self, db_session: Session):
        add_game(
            db_session, "sportsblaze_nba_1", "Los Angeles Lakers", "Golden State Warriors",
            game_date=GAME_DATE, status="scheduled",
        )
        rows, _ = ScheduleMatcher(db_session).resolve_batch([_row("fox_nba_9", "Lakers", "Warriors", status="live")])

        repo = ScheduleRepository(db_session)
        repo.upsert_games(rows)
        repo.save()
        db_session.expire_all()

        games = db_session.query(GameSchedule).all()
        assert len(games) == 1
        assert games[0].game_id == "sportsblaze_nba_1"
        assert games[0].status == "live"

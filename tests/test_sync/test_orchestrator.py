"""Integration tests for SyncOrchestrator.

Test Strategy:
1. populate_all runs schedule, odds, stats and analytics for every sport
2. The summary marks each step ✓/✗ with a success count
3. A step that raises is rolled back and reported without stopping the rest
4. Analytics are computed from stored odds and stats, synthetic otherwise
5. Matchups are synthetic and idempotent

Each test follows the pattern:
- Given: An orchestrator with no provider keys (fallback paths) and a
  MockTransport client that refuses every request
- When: An orchestrator method is called
- Then: Summary and database state match
"""
import random
import sys
from pathlib import Path

import httpx
import pytest
from sqlalchemy.orm import Session
from tenacity import wait_none

sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import FIXED_NOW, add_odds, add_stats

from app.models.models import GameSchedule, LiveOdds, PlayerMatchup, PropAnalytics
from app.services.sync.adapters.sportsdata_stats_adapter import SportsDataStatsAdapter
from app.services.sync.orchestrator import SyncOrchestrator
from app.services.sync.populators.prop_analytics import summarize, trend_direction


def _offline_client() -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _orchestrator(db: Session) -> SyncOrchestrator:
    return SyncOrchestrator(
        db,
        client=_offline_client(),
        retry_wait=wait_none(),
        rng=random.Random(42),
        clock=lambda: FIXED_NOW,
    )


class TestPopulateAll:

    @pytest.mark.asyncio
    async def test_summary_without_provider_keys(self, db_session: Session):
        orchestrator = _orchestrator(db_session)

        result = await orchestrator.populate_all(["NBA", "NFL"])
        await orchestrator.close()

        assert result["success"] is True
        summary = result["summary"]
        # schedule and odds fall back to sample data; stats need a key
        assert summary["schedule"] == "✓"
        assert summary["odds"] == "✓"
        assert summary["stats"] == "✗"
        assert summary["stats_count"] == "0/2"
        assert summary["analytics"] == "✓"
        assert summary["analytics_count"] == "2/2"
        assert set(result["details"]["odds"]) == {"NBA", "NFL"}
        assert db_session.query(GameSchedule).count() == 2
        assert db_session.query(LiveOdds).filter(LiveOdds.provenance == "fallback").count() == 40

    @pytest.mark.asyncio
    async def test_failing_step_does_not_stop_others(self, db_session: Session, monkeypatch):
        async def explode(self):
            raise RuntimeError("provider exploded")

        monkeypatch.setattr(SportsDataStatsAdapter, "fetch", explode)
        orchestrator = _orchestrator(db_session)

        result = await orchestrator.populate_all(["NBA"])

        assert result["details"]["stats"]["NBA"] == {"success": False, "sport": "NBA", "error": "provider exploded"}
        assert result["summary"]["analytics"] == "✓"

    @pytest.mark.asyncio
    async def test_live_scores_refresh(self, db_session: Session):
        orchestrator = _orchestrator(db_session)

        results = await orchestrator.refresh_live_scores(["NBA"])

        assert results["NBA"]["odds_api"]["success"] is False
        assert results["NBA"]["fox_sports"]["provenance"] == "fallback"
        assert db_session.query(GameSchedule).filter(GameSchedule.status == "live").count() == 1


class TestAnalytics:

    def test_summarize(self):
        values = [30.0, 28.0, 26.0, 24.0, 22.0, 10.0, 10.0]
        row = summarize(values, average_line=25.0)

        assert row["recent_form"] == 26.0
        assert row["season_average"] == pytest.approx(150 / 7, abs=0.01)
        assert row["hit_rate"] == 60.0
        assert row["edge_percentage"] == 4.0
        assert row["trend_direction"] == "up"

    def test_trend_direction_band(self):
        assert trend_direction(10.5, 10.0) == "steady"
        assert trend_direction(10.6, 10.0) == "up"
        assert trend_direction(9.4, 10.0) == "down"
        assert trend_direction(5.0, 0.0) == "steady"

    @pytest.mark.asyncio
    async def test_computed_from_odds_and_stats(self, db_session: Session):
        add_odds(db_session, "LeBron James", "Points", 25.0, "DraftKings")
        add_stats(db_session, "LeBron James", "Points", [30.0, 30.0, 30.0])

        result = await _orchestrator(db_session).populate_analytics("NBA")

        assert result == {"success": True, "sport": "NBA", "count": 1, "provenance": "live"}
        row = db_session.query(PropAnalytics).one()
        assert row.recent_form == 30.0
        assert row.hit_rate == 100.0
        assert row.edge_percentage == 20.0

    @pytest.mark.asyncio
    async def test_synthetic_when_nothing_to_compute(self, db_session: Session):
        result = await _orchestrator(db_session).populate_analytics("MLB")

        assert result["provenance"] == "synthetic"
        assert result["count"] == 60  # 10 players x 6 stat types
        assert {r.provenance for r in db_session.query(PropAnalytics)} == {"synthetic"}

    @pytest.mark.asyncio
    async def test_recompute_replaces_rows(self, db_session: Session):
        add_odds(db_session, "LeBron James", "Points", 25.0, "DraftKings")
        add_stats(db_session, "LeBron James", "Points", [30.0, 30.0, 30.0])
        orchestrator = _orchestrator(db_session)

        await orchestrator.populate_analytics("NBA")
        await orchestrator.populate_analytics("NBA")

        assert db_session.query(PropAnalytics).count() == 1


class TestMatchups:

    @pytest.mark.asyncio
    async def test_matchups_are_synthetic_and_idempotent(self, db_session: Session):
        first = await _orchestrator(db_session).populate_matchups()
        count = db_session.query(PlayerMatchup).count()
        await _orchestrator(db_session).populate_matchups()

        # 6 players x 3 opponents x 6 stat types x 10 games
        assert first["records"] == 1080
        assert first["provenance"] == "synthetic"
        assert 0 < count <= 1080
        assert db_session.query(PlayerMatchup).count() == count

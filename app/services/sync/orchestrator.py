"""Sync orchestrator for populating odds, stats, schedules and analytics.

This orchestrator coordinates:
- Odds from SportsData.io (mock odds as fallback)
- Player season stats from SportsData.io
- Weekly schedules from SportsBlaze, scores from The Odds API and Fox Sports
- Prop analytics recomputation and synthetic matchup history
- A populate-all run across every requested sport

Recommended schedule (see app/core/scheduler.py):
- odds + schedule: every 30 minutes
- analytics: hourly
- live scores: every 5 minutes

Every step is independent: a failing step is logged, rolled back and
reported as failed without stopping the others.
"""
import random
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

import httpx
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.services.core.base_api_adapter import SUPPORTED_SPORTS
from app.services.sync.adapters.fox_sports_adapter import FoxSportsScoresAdapter
from app.services.sync.adapters.mock_odds_adapter import MockOddsAdapter
from app.services.sync.adapters.odds_api_adapter import OddsApiScoresAdapter
from app.services.sync.adapters.sportsblaze_adapter import SportsBlazeScheduleAdapter
from app.services.sync.adapters.sportsdata_odds_adapter import SportsDataOddsAdapter
from app.services.sync.adapters.sportsdata_stats_adapter import SportsDataStatsAdapter
from app.services.sync.populators.matchups import MatchupPopulator
from app.services.sync.populators.prop_analytics import PropAnalyticsPopulator

logger = get_logger(__name__)

POPULATE_ALL_STEPS = ("schedule", "odds", "stats", "analytics")
OK = "✓"
FAILED = "✗"


class SyncOrchestrator:
    """
    Coordinates the fetchers and populators.

    This is the main entry point for the data sync layer; the data routes and
    the scheduler both go through it. An httpx client, a retry wait, a random
    generator and a clock may be injected for tests; the injected client is
    shared by every adapter and is not closed by them.
    """

    def __init__(
        self,
        db: Session,
        client: Optional[httpx.AsyncClient] = None,
        retry_wait=None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.db = db
        self.client = client
        self.retry_wait = retry_wait
        self.rng = rng or random.Random()
        self.clock = clock

    def _adapter_kwargs(self) -> Dict[str, Any]:
        return {"client": self.client, "retry_wait": self.retry_wait, "clock": self.clock}

    async def _run(self, step: str, sport: Optional[str], func: Callable[[], Awaitable[Dict[str, Any]]]) -> Dict[str, Any]:
        try:
            result = await func()
        except Exception as e:
            logger.error(f"❌ {step} failed for {sport or 'all sports'}: {e}", exc_info=True)
            self.db.rollback()
            return {"success": False, "sport": sport, "error": str(e)}
        return result

    # ========================================================================
    # Single steps
    # ========================================================================

    async def sync_odds(self, sport: str, date_str: Optional[str] = None) -> Dict[str, Any]:
        """SportsData.io player props for a date (default today)."""
        async def step():
            adapter = SportsDataOddsAdapter(self.db, sport, rng=self.rng, **self._adapter_kwargs())
            try:
                result = await adapter.fetch(date_str)
            finally:
                await adapter.close()
            count = adapter.persist(result) if result.rows else 0
            return result.summary(count)
        return await self._run("odds", sport, step)

    async def generate_mock_odds(self, sport: str) -> Dict[str, Any]:
        adapter = MockOddsAdapter(self.db, sport, rng=self.rng, **self._adapter_kwargs())
        return await self._run("mock_odds", sport, adapter.sync)

    async def sync_stats(self, sport: str, season: Optional[int] = None) -> Dict[str, Any]:
        adapter = SportsDataStatsAdapter(self.db, sport, season=season, **self._adapter_kwargs())
        return await self._run("stats", sport, adapter.sync)

    async def sync_schedule(self, sport: str) -> Dict[str, Any]:
        adapter = SportsBlazeScheduleAdapter(self.db, sport, **self._adapter_kwargs())
        return await self._run("schedule", sport, adapter.sync)

    async def sync_scores(self, sport: str) -> Dict[str, Any]:
        adapter = OddsApiScoresAdapter(self.db, sport, **self._adapter_kwargs())
        return await self._run("scores", sport, adapter.sync)

    async def sync_fox_scores(self, sport: str) -> Dict[str, Any]:
        adapter = FoxSportsScoresAdapter(self.db, sport, rng=self.rng, **self._adapter_kwargs())
        return await self._run("fox_scores", sport, adapter.sync)

    async def populate_analytics(self, sport: str) -> Dict[str, Any]:
        async def step():
            return PropAnalyticsPopulator(self.db, rng=self.rng, clock=self.clock).populate(sport)
        return await self._run("analytics", sport, step)

    async def populate_matchups(self) -> Dict[str, Any]:
        async def step():
            return MatchupPopulator(self.db, rng=self.rng, today=lambda: self.clock().date()).populate()
        return await self._run("matchups", None, step)

    # ========================================================================
    # Populate all
    # ========================================================================

    async def populate_all(self, sports: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Run schedule, odds, stats and analytics for each sport, in that order.

        Returns:
            {"success", "message", "summary": {step: "✓"/"✗", "<step>_count": "n/total"},
             "details": {step: {sport: result}}}
        """
        sports: List[str] = list(sports or SUPPORTED_SPORTS)
        steps = {
            "schedule": self.sync_schedule,
            "odds": self.sync_odds,
            "stats": self.sync_stats,
            "analytics": self.populate_analytics,
        }
        details: Dict[str, Dict[str, Any]] = {step: {} for step in POPULATE_ALL_STEPS}

        logger.info(f"Starting data population for {', '.join(sports)}")
        for sport in sports:
            for step in POPULATE_ALL_STEPS:
                details[step][sport] = await steps[step](sport)

        summary: Dict[str, str] = {}
        for step in POPULATE_ALL_STEPS:
            succeeded = sum(1 for r in details[step].values() if r.get("success"))
            summary[step] = OK if succeeded == len(sports) else FAILED
            summary[f"{step}_count"] = f"{succeeded}/{len(sports)}"

        logger.info(f"✅ Data population complete: {summary}")
        return {
            "success": True,
            "message": "Comprehensive data population complete",
            "summary": summary,
            "details": details,
        }

    async def refresh_live_scores(self, sports: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Odds API scores, then the Fox Sports scrape, for each sport."""
        results = {}
        for sport in sports or SUPPORTED_SPORTS:
            results[sport] = {
                "odds_api": await self.sync_scores(sport),
                "fox_sports": await self.sync_fox_scores(sport),
            }
        return results

    async def close(self):
        if self.client is not None:
            await self.client.aclose()

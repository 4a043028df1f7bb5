"""
Automated task scheduler.

This module provides scheduled background jobs for:
- Odds refresh (every 30 minutes)
- Schedule refresh (every 30 minutes)
- Prop analytics recomputation (hourly)
- Live score refresh (every 5 minutes)

Scheduler: APScheduler (lightweight, FastAPI-compatible)
"""
from typing import Awaitable, Callable, Iterable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import SessionLocal
from app.core.logging import get_logger
from app.services.core.base_api_adapter import SUPPORTED_SPORTS
from app.services.sync.orchestrator import SyncOrchestrator

logger = get_logger(__name__)

SessionFactory = Callable[[], Session]


# ============================================================================
# Jobs
# ============================================================================
# Each job opens its own session and never raises; failures are logged.

async def _run_job(
    label: str,
    session_factory: SessionFactory,
    work: Callable[[SyncOrchestrator], Awaitable[str]]
) -> bool:
    db = None
    orchestrator = None
    try:
        db = session_factory()
        orchestrator = SyncOrchestrator(db)
        summary = await work(orchestrator)
        logger.info(f"✅ {label}: {summary}")
        return True
    except Exception as e:
        logger.error(f"❌ {label} failed: {e}")
        return False
    finally:
        if orchestrator is not None:
            await orchestrator.close()
        if db is not None:
            db.close()


async def refresh_odds_job(session_factory: SessionFactory = SessionLocal, sports: Iterable[str] = SUPPORTED_SPORTS) -> bool:
    async def work(orchestrator: SyncOrchestrator) -> str:
        results = [await orchestrator.sync_odds(sport) for sport in sports]
        return f"{sum(r.get('count', 0) for r in results)} props across {len(results)} sports"
    return await _run_job("Odds refresh", session_factory, work)


async def refresh_schedule_job(session_factory: SessionFactory = SessionLocal, sports: Iterable[str] = SUPPORTED_SPORTS) -> bool:
    async def work(orchestrator: SyncOrchestrator) -> str:
        results = [await orchestrator.sync_schedule(sport) for sport in sports]
        return f"{sum(r.get('count', 0) for r in results)} games across {len(results)} sports"
    return await _run_job("Schedule refresh", session_factory, work)


async def recompute_analytics_job(session_factory: SessionFactory = SessionLocal, sports: Iterable[str] = SUPPORTED_SPORTS) -> bool:
    async def work(orchestrator: SyncOrchestrator) -> str:
        results = [await orchestrator.populate_analytics(sport) for sport in sports]
        return f"{sum(r.get('count', 0) for r in results)} rows"
    return await _run_job("Analytics recompute", session_factory, work)


async def refresh_live_scores_job(session_factory: SessionFactory = SessionLocal, sports: Iterable[str] = SUPPORTED_SPORTS) -> bool:
    async def work(orchestrator: SyncOrchestrator) -> str:
        results = await orchestrator.refresh_live_scores(sports)
        return f"{len(results)} sports"
    return await _run_job("Live scores refresh", session_factory, work)



# (job id, name, interval kwargs, job function)
JOBS = (
    ("odds_refresh", "Refresh Odds", {"minutes": 30}, refresh_odds_job),
    ("schedule_refresh", "Refresh Schedule", {"minutes": 30}, refresh_schedule_job),
    ("analytics_recompute", "Recompute Prop Analytics", {"hours": 1}, recompute_analytics_job),
    ("live_scores_refresh", "Refresh Live Scores", {"minutes": 5}, refresh_live_scores_job),
)


class AutomationScheduler:
    """
    Main scheduler for automated background tasks.

    All scheduled jobs should be defined here with clear
    schedules and error handling.
    """

    def __init__(self):
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.running = False

    async def start(self):
        """Start the scheduler."""
        if self.running:
            logger.warning("Scheduler already running")
            return

        logger.info("Starting automation scheduler...")

        self.scheduler = AsyncIOScheduler(
            timezone="UTC",
            job_defaults={
                "coalesce": True,  # Combine missed runs into one
                "max_instances": 1,  # Only one instance of each job
                "misfire_grace_time": 300,
            }
        )

        for job_id, name, interval, func in JOBS:
            self.scheduler.add_job(func, trigger=IntervalTrigger(**interval), id=job_id, name=name)

        self.scheduler.start()
        self.running = True

        logger.info("✅ Scheduler started with %d jobs", len(self.scheduler.get_jobs()))
        self._log_scheduled_jobs()

    async def stop(self):
        """Stop the scheduler."""
        if not self.running:
            return

        logger.info("Stopping scheduler...")
        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("✅ Scheduler stopped")

    def _log_scheduled_jobs(self):
        for job in self.scheduler.get_jobs():
            next_run = job.next_run_time
            next_run_str = next_run.strftime("%Y-%m-%d %H:%M UTC") if next_run else "Pending"
            logger.info(f"  • {job.name} ({job.id}), next run: {next_run_str}")


# Global scheduler instance
_scheduler: Optional[AutomationScheduler] = None


async def start_scheduler() -> Optional[AutomationScheduler]:
    """Start the global scheduler unless SCHEDULER_ENABLED is false."""
    global _scheduler
    if not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false)")
        return None
    if _scheduler is None:
        _scheduler = AutomationScheduler()
        await _scheduler.start()
    return _scheduler


async def stop_scheduler():
    """Stop the global scheduler."""
    global _scheduler
    if _scheduler is not None:
        await _scheduler.stop()
        _scheduler = None


def get_scheduler() -> Optional[AutomationScheduler]:
    """Get the global scheduler instance."""
    return _scheduler

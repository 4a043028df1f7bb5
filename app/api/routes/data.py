"""
Data loading routes.

Provides endpoints for:
- Per-provider fetchers (odds, stats, schedule, scores)
- Synthetic generators (mock odds, matchups) and the analytics population
- populate-all, which runs the core fetchers for several sports

Each fetcher returns its own summary; a failing provider never fails the
request, it shows up as success=false (or fallback provenance) in the data.
All endpoints require the API key when one is configured.

Base path: /api/v1/data
"""
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from app.api.dependencies import get_orchestrator
from app.core.auth import get_api_key
from app.core.errors import success
from app.services.sync.orchestrator import SyncOrchestrator

router = APIRouter(prefix="/data", tags=["data"], dependencies=[Depends(get_api_key)])

Sport = Literal["NBA", "NFL", "MLB", "NHL", "WNBA"]


class PopulateAllRequest(BaseModel):
    sports: List[Sport] = Field(default_factory=lambda: ["NBA", "NFL", "MLB", "NHL"], min_length=1)


class LiveScoresRequest(BaseModel):
    sports: Optional[List[Sport]] = None


@router.post("/odds/{sport}")
async def fetch_odds(
    sport: Sport,
    date: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$", description="Game date (YYYY-MM-DD, default: today)"),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator)
):
    """SportsData.io player props; mock odds tagged as fallback when the provider fails."""
    return success(await orchestrator.sync_odds(sport, date))


@router.post("/mock-odds/{sport}")
async def generate_mock_odds(sport: Sport, orchestrator: SyncOrchestrator = Depends(get_orchestrator)):
    return success(await orchestrator.generate_mock_odds(sport))


@router.post("/stats/{sport}")
async def fetch_stats(
    sport: Sport,
    season: Optional[int] = Query(None, ge=2000, le=2100),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator)
):
    """SportsData.io player season stats (per-game averages)."""
    return success(await orchestrator.sync_stats(sport, season))


@router.post("/schedule/{sport}")
async def fetch_schedule(sport: Sport, orchestrator: SyncOrchestrator = Depends(get_orchestrator)):
    """SportsBlaze schedule, resolved against existing games before upsert."""
    return success(await orchestrator.sync_schedule(sport))


@router.post("/scores/{sport}")
async def fetch_scores(sport: Sport, orchestrator: SyncOrchestrator = Depends(get_orchestrator)):
    """The Odds API scores for the last three days."""
    return success(await orchestrator.sync_scores(sport))


@router.post("/fox-scores/{sport}")
async def fetch_fox_scores(sport: Sport, orchestrator: SyncOrchestrator = Depends(get_orchestrator)):
    return success(await orchestrator.sync_fox_scores(sport))


@router.post("/analytics/{sport}")
async def populate_analytics(sport: Sport, orchestrator: SyncOrchestrator = Depends(get_orchestrator)):
    """Recompute prop analytics from stored odds and stats (synthetic rows when there are none)."""
    return success(await orchestrator.populate_analytics(sport))


@router.post("/matchups")
async def populate_matchups(orchestrator: SyncOrchestrator = Depends(get_orchestrator)):
    return success(await orchestrator.populate_matchups())


@router.post("/populate-all")
async def populate_all(
    request: PopulateAllRequest = PopulateAllRequest(),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator)
):
    """Schedule, odds, stats and analytics for each sport, with a per-step ✓/✗ summary."""
    return success(await orchestrator.populate_all(request.sports))


@router.post("/live-scores")
async def refresh_live_scores(
    request: LiveScoresRequest = LiveScoresRequest(),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator)
):
    return success(await orchestrator.refresh_live_scores(request.sports))

"""
Player routes.

Provides endpoints for:
- Player search (TheSportsDB, cached, static fallback)
- Stored head-to-head matchups for a player

Base path: /api/v1/players
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.dependencies import get_player_search
from app.core.database import get_db
from app.core.errors import success
from app.models.models import model_to_dict
from app.repositories import MatchupRepository
from app.services.core.player_search import PlayerSearchService

router = APIRouter(prefix="/players", tags=["players"])


@router.get("/search")
async def search_players(
    q: str = Query("", max_length=100, description="Player name (at least 2 characters)"),
    sport: Literal["All", "NBA", "NFL", "MLB", "NHL", "WNBA"] = Query("All"),
    service: PlayerSearchService = Depends(get_player_search)
):
    players = await service.search(q, sport)
    return success({"players": players, "count": len(players)})


@router.get("/{player_name}/matchups")
async def get_player_matchups(
    player_name: str,
    opponent: Optional[str] = Query(None, max_length=255),
    stat_type: Optional[str] = Query(None, max_length=100),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Head-to-head rows for a player, newest first."""
    rows = MatchupRepository(db).head_to_head(player_name, opponent_name=opponent, stat_type=stat_type, limit=limit)
    return success({"matchups": [model_to_dict(r) for r in rows], "count": len(rows)})

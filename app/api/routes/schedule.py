"""
Schedule search route.

Base path: /api/v1/schedule
"""
from datetime import date, timedelta
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import success
from app.models.models import model_to_dict
from app.repositories import ScheduleRepository

router = APIRouter(prefix="/schedule", tags=["schedule"])

DEFAULT_DAYS_AHEAD = 7


@router.get("")
async def search_schedule(
    sport: Literal["NBA", "NFL", "MLB", "NHL", "WNBA", "all"] = Query("all"),
    team: Optional[str] = Query(None, max_length=100, description="Home or away team (substring)"),
    dateFrom: Optional[date] = Query(None, description="Start date (default: today)"),
    dateTo: Optional[date] = Query(None, description="End date (default: 7 days from start)"),
    status: Optional[Literal["scheduled", "live", "final"]] = None,
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    start = dateFrom or date.today()
    end = dateTo or start + timedelta(days=DEFAULT_DAYS_AHEAD)
    games = ScheduleRepository(db).search(
        start_date=start,
        end_date=end,
        sport=sport,
        team=team,
        status=status,
        limit=limit,
    )
    return success({
        "games": [model_to_dict(g) for g in games],
        "count": len(games),
        "filters": {
            "sport": sport,
            "team": team,
            "dateFrom": start.isoformat(),
            "dateTo": end.isoformat(),
            "status": status,
        },
    })

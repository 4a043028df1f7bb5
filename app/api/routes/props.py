"""
Prop board route: live odds joined with prop analytics.

Base path: /api/v1/props
"""
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import success
from app.services.core.prop_analytics_service import PropAnalyticsService, PropFilters

router = APIRouter(prefix="/props", tags=["props"])


@router.get("")
async def get_props(
    sortBy: Literal["value", "confidence", "edge", "hit_rate", "recent_form"] = Query("value"),
    category: str = Query("all", max_length=50, description="e.g. nba-scoring, sgp-points"),
    confidence: str = Query("all", pattern=r"^(all|\d{1,3})$", description="Minimum confidence or 'all'"),
    sport: Literal["NBA", "NFL", "MLB", "NHL", "WNBA", "all"] = Query("all"),
    db: Session = Depends(get_db)
):
    """
    Top 20 props for the filters.

    "value" keeps only high value-rating props sorted by confidence; the other
    sort modes order every matching prop descending by that field.
    """
    filters = PropFilters(sort_by=sortBy, category=category, confidence=confidence, sport=sport)
    return success(PropAnalyticsService(db).query(filters))

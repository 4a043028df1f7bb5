"""
Edge analysis routes.

Provides endpoints for:
- Detecting edge opportunities across the five strategy categories
- Listing the category definitions
- Risk/reward categorisation of a set of props with parlay scenarios

Base path: /api/v1/edge
"""
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.dependencies import get_llm_client
from app.core.database import get_db
from app.core.errors import success
from app.services.ai.llm_client import LLMClient
from app.services.edge.analyzer import EdgeFilter, EdgeOpportunityAnalyzer
from app.services.edge.categories import list_categories
from app.services.edge.risk_reward import BetOption, analyze_risk_reward

router = APIRouter(prefix="/edge", tags=["edge"])

SportFilter = Literal["NBA", "NFL", "MLB", "NHL", "WNBA", "all"]
Category = Literal["player_props", "live_betting", "college_sports", "arbitrage", "derivative_markets"]

# American odds ("+150", "-110") or even money
ODDS_PATTERN = r"^([+-]?\d+|(?i:even|ev))$"


# ==================== REQUEST MODELS ====================

class EdgeOpportunitiesRequest(BaseModel):
    category: Optional[Category] = None
    sport: SportFilter = "all"
    minEdge: float = Field(0, ge=0, le=100)
    minConfidence: float = Field(50, ge=0, le=100)


class BetOptionModel(BaseModel):
    id: Optional[str] = None
    player: str = Field(..., min_length=1)
    stat: str = Field(..., min_length=1)
    line: float
    overOdds: str = Field(..., pattern=ODDS_PATTERN)
    underOdds: str = Field(..., pattern=ODDS_PATTERN)
    confidence: float = Field(..., ge=0, le=100)
    valueRating: Literal["high", "medium", "low"] = "medium"
    edge: Optional[float] = None
    sportsbook: Optional[str] = None


class RiskRewardRequest(BaseModel):
    bets: List[BetOptionModel] = Field(..., min_length=1)


# ==================== ENDPOINTS ====================

@router.post("/opportunities")
async def find_edge_opportunities(
    request: EdgeOpportunitiesRequest,
    db: Session = Depends(get_db),
    llm_client: LLMClient = Depends(get_llm_client)
):
    """
    Detect edge opportunities from the current odds, stats and schedule.

    When an LLM key is configured the top opportunities are enriched with
    risk factors and a refined confidence; enrichment failures are ignored.
    """
    analyzer = EdgeOpportunityAnalyzer(db, llm_client=llm_client)
    result = await analyzer.analyze(EdgeFilter(
        category=request.category,
        sport=request.sport,
        min_edge=request.minEdge,
        min_confidence=request.minConfidence,
    ))
    return success(result)


@router.get("/categories")
async def get_edge_categories():
    """The five edge strategy categories with their descriptions."""
    return success(list_categories())


@router.post("/risk-reward")
async def risk_reward(request: RiskRewardRequest):
    """Risk metrics for both sides of each prop, grouped by risk level, plus parlay scenarios."""
    bets = [
        BetOption(
            id=b.id,
            player=b.player,
            stat=b.stat,
            line=b.line,
            over_odds=b.overOdds,
            under_odds=b.underOdds,
            confidence=b.confidence,
            value_rating=b.valueRating,
            edge=b.edge,
            sportsbook=b.sportsbook,
        )
        for b in request.bets
    ]
    return success(analyze_risk_reward(bets))

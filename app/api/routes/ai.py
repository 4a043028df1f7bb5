"""
AI routes backed by the LLM gateway.

Provides endpoints for:
- Sport/player insights
- Explaining a specific edge
- Bankroll-aware betting strategy
- External (non-gameplay) factors for a prop
- The tool-calling assistant
- Parlay slip image analysis

LLM failures surface through the LLMError handlers: 429 rate limited, 402
credits exhausted, 503 not configured, 500 anything else.

Base path: /api/v1/ai
"""
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.dependencies import get_llm_client
from app.core.database import get_db
from app.core.errors import success
from app.core.rate_limit import AI_RATE_LIMIT, limiter
from app.services.ai.assistant import EdgeAssistant
from app.services.ai.explain_service import EdgeExplainer
from app.services.ai.external_factors_service import ExternalFactorsService
from app.services.ai.insights_service import SportsInsightsService
from app.services.ai.llm_client import LLMClient
from app.services.ai.parlay_image_service import ParlayImageAnalyzer
from app.services.ai.strategy_service import BettingStrategyService

router = APIRouter(prefix="/ai", tags=["ai"])

Sport = Literal["NBA", "NFL", "MLB", "NHL", "WNBA"]


# ==================== REQUEST MODELS ====================

class InsightsRequest(BaseModel):
    sport: Sport
    playerName: Optional[str] = Field(None, max_length=100)
    analysisType: Optional[Literal["current_props", "recent_performance", "sport_trends"]] = None


class ExplainEdgeRequest(BaseModel):
    playerName: str = Field(..., min_length=1, max_length=100)
    statType: str = Field(..., min_length=1, max_length=100)
    line: Optional[float] = None
    sport: Optional[Sport] = None


class BettingStrategyRequest(BaseModel):
    bankroll: Optional[float] = Field(None, gt=0)
    riskTolerance: Literal["conservative", "moderate", "aggressive"] = "moderate"
    sport: Optional[Sport] = None


class ExternalFactorsRequest(BaseModel):
    playerName: str = Field(..., min_length=1, max_length=100)
    team: str = Field("", max_length=100)
    opponent: str = Field("", max_length=100)
    sport: Sport
    stat: str = Field("", max_length=100)
    line: float = 0
    recentStats: Optional[List[float]] = None


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str = Field(..., max_length=10000)


class AssistantRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)
    context: Optional[Dict[str, Any]] = None


class ParlayImageRequest(BaseModel):
    image: str = Field(..., min_length=1, description="Base64 image data or an image URL")
    imageType: Literal["image/jpeg", "image/png", "image/webp", "image/gif"] = "image/jpeg"


# ==================== ENDPOINTS ====================

@router.post("/insights")
@limiter.limit(AI_RATE_LIMIT)
async def sports_insights(
    request: Request,
    body: InsightsRequest,
    db: Session = Depends(get_db),
    llm_client: LLMClient = Depends(get_llm_client)
):
    """Narrative insights over recent stats, current props and analytics."""
    service = SportsInsightsService(db, llm_client)
    return success(await service.generate(body.sport, body.playerName, body.analysisType))


@router.post("/explain-edge")
@limiter.limit(AI_RATE_LIMIT)
async def explain_edge(
    request: Request,
    body: ExplainEdgeRequest,
    db: Session = Depends(get_db),
    llm_client: LLMClient = Depends(get_llm_client)
):
    explainer = EdgeExplainer(db, llm_client)
    return success(await explainer.explain(body.playerName, body.statType, sport=body.sport, line=body.line))


@router.post("/betting-strategy")
@limiter.limit(AI_RATE_LIMIT)
async def betting_strategy(
    request: Request,
    body: BettingStrategyRequest,
    db: Session = Depends(get_db),
    llm_client: LLMClient = Depends(get_llm_client)
):
    """
    Staking plan for the opportunities with edge >= 5 and confidence >= 70.

    When nothing qualifies a fixed message is returned and the LLM is not called.
    """
    service = BettingStrategyService(db, llm_client)
    return success(await service.suggest(
        sport=body.sport,
        bankroll=body.bankroll,
        risk_tolerance=body.riskTolerance,
    ))


@router.post("/external-factors")
@limiter.limit(AI_RATE_LIMIT)
async def external_factors(
    request: Request,
    body: ExternalFactorsRequest,
    llm_client: LLMClient = Depends(get_llm_client)
):
    """Structured external-factor insights; an empty list when no LLM key is set."""
    service = ExternalFactorsService(llm_client)
    return success(await service.analyze(
        body.playerName,
        body.sport,
        team=body.team,
        opponent=body.opponent,
        stat=body.stat,
        line=body.line,
        recent_stats=body.recentStats,
    ))


@router.post("/assistant")
@limiter.limit(AI_RATE_LIMIT)
async def assistant(
    request: Request,
    body: AssistantRequest,
    db: Session = Depends(get_db),
    llm_client: LLMClient = Depends(get_llm_client)
):
    """Chat turn with tool calling; returns the reply and the names of the tools used."""
    edge_assistant = EdgeAssistant(db, llm_client)
    messages = [m.model_dump() for m in body.messages]
    return success(await edge_assistant.respond(messages, context=body.context))


@router.post("/parlay-image")
@limiter.limit(AI_RATE_LIMIT)
async def parlay_image(
    request: Request,
    body: ParlayImageRequest,
    llm_client: LLMClient = Depends(get_llm_client)
):
    """Per-bet probability, keep/remove/modify advice, risk level and payout for a slip image."""
    analyzer = ParlayImageAnalyzer(llm_client)
    return success(await analyzer.analyze(body.image, body.imageType))

"""Bankroll-aware betting strategy built on the current edge opportunities."""
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.services.ai.llm_client import LLMClient
from app.services.ai.prompts import NO_OPPORTUNITIES_MESSAGE, STRATEGY_SYSTEM_PROMPT, STRATEGY_USER_PROMPT
from app.services.edge.analyzer import EdgeFilter, EdgeOpportunityAnalyzer

logger = get_logger(__name__)

STRATEGY_MIN_EDGE = 5.0
STRATEGY_MIN_CONFIDENCE = 70.0
RANKED_LIMIT = 10
RETURNED_LIMIT = 5

BASE_UNITS = {"conservative": 1, "moderate": 2, "aggressive": 3}
DEFAULT_UNIT_VALUE = 10.0
BANKROLL_UNIT_FRACTION = 0.01


def unit_value(bankroll: Optional[float]) -> float:
    """1% of the bankroll, or $10 when no bankroll is given."""
    return bankroll * BANKROLL_UNIT_FRACTION if bankroll else DEFAULT_UNIT_VALUE


def rank_by_score(opportunities: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Order by edge x confidence, best first, keeping the top ten."""
    scored = [
        dict(o, score=(o.get("edge_percentage") or 0) * (o.get("confidence") or 0))
        for o in opportunities
    ]
    scored.sort(key=lambda o: o["score"], reverse=True)
    return scored[:RANKED_LIMIT]


def _describe(index: int, opportunity: Dict[str, Any]) -> str:
    books = ", ".join(opportunity.get("books") or []) or "Various"
    return (
        f"{index}. {opportunity['title']}\n"
        f"   - Edge: {opportunity['edge_percentage']:.1f}%\n"
        f"   - Confidence: {opportunity['confidence']:.0f}%\n"
        f"   - Category: {opportunity['category']}\n"
        f"   - Books: {books}"
    )


class BettingStrategyService:
    """
    Ranks qualifying opportunities and asks the LLM for a staking plan.

    The analyzer is run without LLM enhancement so one strategy request costs
    at most one LLM call.
    """

    def __init__(self, db: Session, llm_client: LLMClient, clock: Callable[[], datetime] = datetime.utcnow):
        self.db = db
        self.llm_client = llm_client
        self.clock = clock

    async def suggest(
        self,
        sport: Optional[str] = None,
        bankroll: Optional[float] = None,
        risk_tolerance: str = "moderate"
    ) -> Dict[str, Any]:
        analyzer = EdgeOpportunityAnalyzer(self.db, llm_client=None, clock=self.clock)
        result = await analyzer.analyze(EdgeFilter(
            sport=sport or "all",
            min_edge=STRATEGY_MIN_EDGE,
            min_confidence=STRATEGY_MIN_CONFIDENCE,
        ))
        opportunities = result["opportunities"]
        if not opportunities:
            return {"strategy": NO_OPPORTUNITIES_MESSAGE, "opportunities": []}

        ranked = rank_by_score(opportunities)
        base_units = BASE_UNITS.get(risk_tolerance, BASE_UNITS["moderate"])
        unit = unit_value(bankroll)

        user_prompt = STRATEGY_USER_PROMPT.format(
            sport=sport or "All sports",
            bankroll=f"${bankroll:,.2f}" if bankroll else "Not specified",
            risk_tolerance=risk_tolerance,
            base_units=base_units,
            unit_stake=unit * base_units,
            opportunities="\n".join(_describe(i, o) for i, o in enumerate(ranked, start=1)),
        )
        logger.info(f"Generating betting strategy: sport={sport}, bankroll={bankroll}, risk={risk_tolerance}")
        strategy = await self.llm_client.complete(STRATEGY_SYSTEM_PROMPT, user_prompt)

        return {
            "strategy": strategy,
            "opportunities": ranked[:RETURNED_LIMIT],
            "unitValue": unit,
            "baseUnitSize": base_units,
            "timestamp": self.clock().isoformat(),
        }

"""External (non-gameplay) factors for a player prop, as structured insights."""
from typing import Any, Dict, List, Optional

from app.core.logging import get_logger
from app.services.ai.llm_client import LLMClient, LLMError, LLMQuotaExceededError, LLMRateLimitError
from app.services.ai.prompts import EXTERNAL_FACTORS_SYSTEM_PROMPT, EXTERNAL_FACTORS_USER_PROMPT

logger = get_logger(__name__)

ANALYSIS_TYPE = "external_factors"


class ExternalFactorsService:
    """
    Ask the LLM for motivation, rest, travel and similar factors.

    Without an LLM key, or when the reply cannot be used, the insight list is
    empty. Rate-limit and quota errors still propagate so the caller can
    report them.
    """

    def __init__(self, llm_client: LLMClient):
        self.llm_client = llm_client

    async def analyze(
        self,
        player_name: str,
        sport: str,
        team: str = "",
        opponent: str = "",
        stat: str = "",
        line: float = 0,
        recent_stats: Optional[List[float]] = None
    ) -> Dict[str, Any]:
        if not self.llm_client.enabled:
            return {"insights": [], "analysis_type": ANALYSIS_TYPE}

        user_prompt = EXTERNAL_FACTORS_USER_PROMPT.format(
            player=player_name,
            team=team or "unknown team",
            opponent=opponent or "their next opponent",
            stat=stat or "player",
            sport=sport,
            line=line,
            recent=", ".join(str(v) for v in recent_stats) if recent_stats else "N/A",
        )

        try:
            reply = await self.llm_client.complete_json(EXTERNAL_FACTORS_SYSTEM_PROMPT, user_prompt)
        except (LLMRateLimitError, LLMQuotaExceededError):
            raise
        except LLMError as e:
            logger.warning(f"External factors analysis failed for {player_name}: {e}")
            return {"insights": [], "analysis_type": ANALYSIS_TYPE}

        insights = []
        if isinstance(reply, dict):
            insights = reply.get("insights") or reply.get("factors") or []
        return {
            "insights": [i for i in insights if isinstance(i, dict)],
            "analysis_type": ANALYSIS_TYPE,
        }

"""Explain why an edge exists for one player/stat line."""
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.repositories import LiveOddsRepository, PlayerStatsRepository, PropAnalyticsRepository
from app.services.ai.llm_client import LLMClient
from app.services.ai.prompts import EXPLAIN_SYSTEM_PROMPT, EXPLAIN_USER_PROMPT
from app.services.edge import heuristics
from app.services.sync.utils.name_normalizer import normalize_stat_type

logger = get_logger(__name__)

STATS_LIMIT = 10
ODDS_LIMIT = 5


def _fmt(value: Optional[float], suffix: str = "") -> str:
    if value is None:
        return "N/A"
    return f"{value:.2f}{suffix}" if isinstance(value, float) else f"{value}{suffix}"


class EdgeExplainer:
    """Gathers the numbers behind a prop and asks the LLM to explain them."""

    def __init__(self, db: Session, llm_client: LLMClient, clock: Callable[[], datetime] = datetime.utcnow):
        self.db = db
        self.llm_client = llm_client
        self.clock = clock

    def build_context(
        self,
        player_name: str,
        stat_type: str,
        sport: Optional[str] = None,
        line: Optional[float] = None
    ) -> Dict[str, Any]:
        """The data the explanation is grounded on; also returned to the caller."""
        stats = PlayerStatsRepository(self.db).for_player(player_name, limit=STATS_LIMIT)
        if sport:
            stats = [s for s in stats if s.sport in (None, sport)]
        wanted = normalize_stat_type(stat_type)
        recent_values = [s.value for s in stats if normalize_stat_type(s.stat_type) == wanted]

        odds = LiveOddsRepository(self.db).for_player(player_name, stat_type, limit=ODDS_LIMIT)
        analytics = PropAnalyticsRepository(self.db).find_for(player_name, stat_type)

        current_line = line if line is not None else (odds[0].line if odds else None)
        return {
            "playerName": player_name,
            "statType": stat_type,
            "sport": sport,
            "recentStats": recent_values,
            "recentAverage": heuristics.average(recent_values),
            "seasonAverage": analytics.season_average if analytics else None,
            "currentLine": current_line,
            "hitRate": analytics.hit_rate if analytics else None,
            "trend": analytics.trend_direction if analytics else None,
            "liveOdds": [
                {
                    "sportsbook": o.sportsbook,
                    "line": o.line,
                    "overOdds": o.over_odds,
                    "underOdds": o.under_odds,
                }
                for o in odds
            ],
        }

    async def explain(
        self,
        player_name: str,
        stat_type: str,
        sport: Optional[str] = None,
        line: Optional[float] = None
    ) -> Dict[str, Any]:
        context = self.build_context(player_name, stat_type, sport, line)
        lines = "\n".join(
            f"- {o['sportsbook']}: {o['line']} (Over: {o['overOdds']}, Under: {o['underOdds']})"
            for o in context["liveOdds"]
        ) or "No lines available"

        user_prompt = EXPLAIN_USER_PROMPT.format(
            player=player_name,
            sport=sport or "N/A",
            stat_type=stat_type,
            games=len(context["recentStats"]),
            recent_average=_fmt(context["recentAverage"]),
            season_average=_fmt(context["seasonAverage"]),
            hit_rate=_fmt(context["hitRate"], "%"),
            trend=context["trend"] or "N/A",
            line=_fmt(context["currentLine"]),
            lines=lines,
        )
        logger.info(f"Explaining edge for {player_name} {stat_type} ({sport})")
        explanation = await self.llm_client.complete(EXPLAIN_SYSTEM_PROMPT, user_prompt)
        return {
            "explanation": explanation,
            "context": context,
            "timestamp": self.clock().isoformat(),
        }

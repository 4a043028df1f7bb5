"""
Sports insights: one LLM completion over a dump of recent stats, current
props and analytics for a sport, optionally narrowed to one player.
"""
import json
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.models import model_to_dict
from app.repositories import LiveOddsRepository, PlayerStatsRepository, PropAnalyticsRepository
from app.services.ai.llm_client import LLMClient
from app.services.ai.prompts import (
    INSIGHT_REQUESTS,
    INSIGHT_SYSTEM_PROMPTS,
    INSIGHT_USER_PROMPT,
    SPORT_METRICS,
)

logger = get_logger(__name__)

STATS_WINDOW_DAYS = 30
STATS_LIMIT = 50
ODDS_LIMIT = 100
ANALYTICS_LIMIT = 50

# rows of each kind included in the prompt
SAMPLE_GAMES = 10
SAMPLE_PROPS = 20
SAMPLE_ANALYTICS = 10

GENERAL_ANALYSIS = "general"


def _matches_player(rows: List[Any], player_name: Optional[str]) -> List[Any]:
    if not player_name:
        return rows
    needle = player_name.lower()
    return [row for row in rows if needle in row.player_name.lower()]


class SportsInsightsService:
    """Generate free-text insights for a sport."""

    def __init__(
        self,
        db: Session,
        llm_client: LLMClient,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.db = db
        self.llm_client = llm_client
        self.clock = clock

    async def generate(
        self,
        sport: str,
        player_name: Optional[str] = None,
        analysis_type: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Raises:
            LLMError (and subclasses): the gateway call failed
        """
        games = _matches_player(
            PlayerStatsRepository(self.db).recent_window(days=STATS_WINDOW_DAYS, limit=STATS_LIMIT),
            player_name,
        )
        props = _matches_player(LiveOddsRepository(self.db).latest(limit=ODDS_LIMIT, sport=sport), player_name)
        analytics = _matches_player(
            PropAnalyticsRepository(self.db).latest(limit=ANALYTICS_LIMIT, sport=sport), player_name
        )

        kind = analysis_type if analysis_type in INSIGHT_SYSTEM_PROMPTS else GENERAL_ANALYSIS
        metrics = SPORT_METRICS.get(sport, [])
        system_prompt = INSIGHT_SYSTEM_PROMPTS[kind].format(sport=sport)
        user_prompt = INSIGHT_USER_PROMPT.format(
            sport=sport,
            recent_games=json.dumps([model_to_dict(g) for g in games[:SAMPLE_GAMES]], indent=2),
            props=json.dumps([model_to_dict(p) for p in props[:SAMPLE_PROPS]], indent=2),
            analytics=json.dumps([model_to_dict(a) for a in analytics[:SAMPLE_ANALYTICS]], indent=2),
            request=INSIGHT_REQUESTS[kind],
            metrics=", ".join(metrics),
        )

        insights = await self.llm_client.complete(system_prompt, user_prompt)
        logger.info(
            f"Generated AI insights for {sport} - {len(games)} games, {len(props)} props analyzed"
        )
        return {
            "sport": sport,
            "playerName": player_name or "All Players",
            "analysisType": analysis_type,
            "insights": insights,
            "dataPoints": {
                "recentGamesAnalyzed": len(games),
                "currentPropsAnalyzed": len(props),
                "analyticsPointsAnalyzed": len(analytics),
            },
            "timestamp": self.clock().isoformat(),
            "relevantMetrics": metrics,
        }

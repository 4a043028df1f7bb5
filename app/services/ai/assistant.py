"""
Tool-calling chat assistant.

Flow:
1. The conversation is sent to the LLM together with the six tool schemas.
2. Every tool call in the reply is dispatched to a repository query or to
   another service. Transient failures (transport errors, dropped DB
   connections, LLM gateway errors other than quota/configuration) are
   retried a bounded number of times; a call that still fails is handed back
   to the model as {"error": message}.
3. A second LLM call turns the tool results into the user-facing reply.
"""
import json
from datetime import date, datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from app.core.config import settings
from app.core.logging import get_logger
from app.core.metrics import record_tool_call
from app.models.models import model_to_dict
from app.repositories import PlayerStatsRepository, PropAnalyticsRepository, ScheduleRepository
from app.services.ai.explain_service import EdgeExplainer
from app.services.ai.llm_client import LLMClient, LLMError, LLMNotConfiguredError, LLMQuotaExceededError
from app.services.ai.prompts import ASSISTANT_SYSTEM_PROMPT, ASSISTANT_TOOLS
from app.services.ai.strategy_service import BettingStrategyService
from app.services.edge.analyzer import EdgeFilter, EdgeOpportunityAnalyzer

logger = get_logger(__name__)

TOOL_MIN_EDGE = 5.0
TOOL_MIN_CONFIDENCE = 70.0
SCHEDULE_DAYS_AHEAD = 7
SCHEDULE_LIMIT = 10
PLAYER_STATS_LIMIT = 10

UNKNOWN_FUNCTION = "Unknown function"


class UnknownToolError(Exception):
    """The model asked for a tool that is not registered."""


def is_transient_tool_error(exc: BaseException) -> bool:
    """Failures worth another attempt. Bad arguments and exhausted quotas are not."""
    if isinstance(exc, (LLMQuotaExceededError, LLMNotConfiguredError)):
        return False
    return isinstance(exc, (httpx.TransportError, OperationalError, LLMError))


def _parse_date(value: Optional[str], default: date) -> date:
    if not value:
        return default
    return datetime.strptime(value, "%Y-%m-%d").date()


def _to_json(result: Any) -> str:
    return json.dumps(result, default=str)


class EdgeAssistant:
    """
    Usage:
        assistant = EdgeAssistant(db, LLMClient.from_settings())
        reply = await assistant.respond([{"role": "user", "content": "Best NBA edges?"}])
    """

    def __init__(
        self,
        db: Session,
        llm_client: LLMClient,
        orchestrator_factory: Optional[Callable[[Session], Any]] = None,
        retry_wait=None,
        max_attempts: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.db = db
        self.llm_client = llm_client
        self.orchestrator_factory = orchestrator_factory
        self.retry_wait = retry_wait or wait_exponential(multiplier=0.5, max=4)
        self.max_attempts = max_attempts or settings.TOOL_MAX_ATTEMPTS
        self.clock = clock
        self.tools: Dict[str, Callable[[Dict[str, Any]], Awaitable[Any]]] = {
            "fetch_edge_opportunities": self.fetch_edge_opportunities,
            "explain_edge": self.explain_edge,
            "suggest_betting_strategy": self.suggest_betting_strategy,
            "load_live_data": self.load_live_data,
            "analyze_player": self.analyze_player,
            "search_schedule": self.search_schedule,
        }

    # ========================================================================
    # Tools
    # ========================================================================

    async def fetch_edge_opportunities(self, args: Dict[str, Any]) -> Dict[str, Any]:
        analyzer = EdgeOpportunityAnalyzer(self.db, llm_client=None, clock=self.clock)
        return await analyzer.analyze(EdgeFilter(
            category=args.get("category"),
            sport=args.get("sport") or "all",
            min_edge=float(args.get("minEdge", TOOL_MIN_EDGE)),
            min_confidence=float(args.get("minConfidence", TOOL_MIN_CONFIDENCE)),
        ))

    async def explain_edge(self, args: Dict[str, Any]) -> Dict[str, Any]:
        explainer = EdgeExplainer(self.db, self.llm_client, clock=self.clock)
        return await explainer.explain(
            args["playerName"], args["statType"], sport=args.get("sport"), line=args.get("line")
        )

    async def suggest_betting_strategy(self, args: Dict[str, Any]) -> Dict[str, Any]:
        service = BettingStrategyService(self.db, self.llm_client, clock=self.clock)
        return await service.suggest(
            sport=args.get("sport"),
            bankroll=args.get("bankroll"),
            risk_tolerance=args.get("riskTolerance") or "moderate",
        )

    async def load_live_data(self, args: Dict[str, Any]) -> Dict[str, Any]:
        if self.orchestrator_factory is None:
            # Imported here: the sync layer pulls in every adapter
            from app.services.sync.orchestrator import SyncOrchestrator
            orchestrator = SyncOrchestrator(self.db)
        else:
            orchestrator = self.orchestrator_factory(self.db)
        try:
            return await orchestrator.populate_all(args.get("sports"))
        finally:
            await orchestrator.close()

    async def analyze_player(self, args: Dict[str, Any]) -> Dict[str, Any]:
        player_name = args["playerName"]
        sport = args.get("sport")
        stats = PlayerStatsRepository(self.db).for_player(player_name, limit=PLAYER_STATS_LIMIT)
        analytics = PropAnalyticsRepository(self.db).for_player(player_name)
        if sport:
            stats = [s for s in stats if s.sport == sport]
            analytics = [a for a in analytics if a.sport == sport]
        if args.get("statType"):
            wanted = args["statType"].lower()
            analytics = [a for a in analytics if a.stat_type.lower() == wanted] or analytics
        return {
            "recentStats": [model_to_dict(s) for s in stats],
            "analytics": model_to_dict(analytics[0]) if analytics else None,
            "statType": args.get("statType"),
        }

    async def search_schedule(self, args: Dict[str, Any]) -> Dict[str, Any]:
        today = self.clock().date()
        games = ScheduleRepository(self.db).search(
            start_date=_parse_date(args.get("dateFrom"), today),
            end_date=_parse_date(args.get("dateTo"), today + timedelta(days=SCHEDULE_DAYS_AHEAD)),
            sport=args.get("sport"),
            team=args.get("team"),
            status=args.get("status"),
            limit=int(args.get("limit") or SCHEDULE_LIMIT),
        )
        return {"games": [model_to_dict(g) for g in games], "count": len(games)}

    # ========================================================================
    # Dispatch
    # ========================================================================

    async def _invoke(self, name: str, args: Dict[str, Any]) -> Any:
        tool = self.tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        try:
            return await tool(args)
        except SQLAlchemyError:
            self.db.rollback()
            raise

    async def dispatch(self, name: str, raw_arguments: Optional[str]) -> Dict[str, Any]:
        """Run one tool call; never raises."""
        try:
            args = json.loads(raw_arguments or "{}")
        except json.JSONDecodeError as e:
            record_tool_call(name, "error")
            return {"error": f"Invalid arguments: {e}"}
        if not isinstance(args, dict):
            record_tool_call(name, "error")
            return {"error": "Invalid arguments: expected a JSON object"}

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=self.retry_wait,
                retry=retry_if_exception(is_transient_tool_error),
                reraise=True,
            ):
                with attempt:
                    result = await self._invoke(name, args)
        except UnknownToolError:
            logger.warning(f"Assistant requested unknown tool: {name}")
            record_tool_call(name, "unknown")
            return {"error": UNKNOWN_FUNCTION}
        except Exception as e:
            logger.error(f"❌ Tool {name} failed: {e}", exc_info=True)
            record_tool_call(name, "error")
            return {"error": str(e)}

        record_tool_call(name, "ok")
        return result

    async def respond(
        self,
        messages: List[Dict[str, Any]],
        context: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Returns:
            {"message": reply text, "toolCalls": [names of tools the model called]}

        Raises:
            LLMError (and subclasses): either LLM call failed
        """
        system = {
            "role": "system",
            "content": ASSISTANT_SYSTEM_PROMPT.format(context=json.dumps(context or {})),
        }
        logger.info(f"Assistant request: {len(messages)} messages")
        reply = await self.llm_client.chat([system, *messages], tools=ASSISTANT_TOOLS)

        tool_calls = reply.get("tool_calls") or []
        if not tool_calls:
            return {"message": reply.get("content") or "", "toolCalls": []}

        tool_messages = []
        names = []
        for call in tool_calls:
            function = call.get("function") or {}
            name = function.get("name", "")
            names.append(name)
            result = await self.dispatch(name, function.get("arguments"))
            tool_messages.append({
                "role": "tool",
                "tool_call_id": call.get("id"),
                "name": name,
                "content": _to_json(result),
            })

        final = await self.llm_client.chat([system, *messages, reply, *tool_messages])
        return {"message": final.get("content") or "", "toolCalls": names}

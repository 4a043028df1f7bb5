"""Tests for the tool-calling assistant.

Test Strategy:
1. dispatch never raises: unknown tools and bad arguments become error payloads
2. Transient failures are retried up to the attempt limit; others are not
3. respond runs the tool calls and sends their results back to the model
"""
import json
import sys
from pathlib import Path

import httpx
import pytest
from sqlalchemy.orm import Session
from tenacity import wait_none

sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import FIXED_NOW, RecordingGateway, add_game, llm_reply, make_llm_client, tool_call

from app.services.ai.assistant import UNKNOWN_FUNCTION, EdgeAssistant, is_transient_tool_error
from app.services.ai.llm_client import LLMError, LLMQuotaExceededError


def _assistant(db: Session, gateway=None) -> EdgeAssistant:
    return EdgeAssistant(
        db,
        make_llm_client(gateway or RecordingGateway(llm_reply("ok"))),
        retry_wait=wait_none(),
        max_attempts=3,
        clock=lambda: FIXED_NOW,
    )


class FlakyTool:
    """Raises the queued errors in order, then returns a result."""

    def __init__(self, *errors: Exception):
        self.errors = list(errors)
        self.calls = 0

    async def __call__(self, args):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return {"games": [], "count": 0}


class TestDispatch:

    # Error payloads
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_unknown_tool(self, db_session: Session):
        result = await _assistant(db_session).dispatch("place_bet", "{}")
        assert result == {"error": UNKNOWN_FUNCTION}

    @pytest.mark.asyncio
    async def test_invalid_json_arguments(self, db_session: Session):
        result = await _assistant(db_session).dispatch("search_schedule", "{not json")
        assert result["error"].startswith("Invalid arguments")

    @pytest.mark.asyncio
    async def test_non_object_arguments(self, db_session: Session):
        result = await _assistant(db_session).dispatch("search_schedule", "[1, 2]")
        assert result == {"error": "Invalid arguments: expected a JSON object"}

    # Retries
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self, db_session: Session):
        assistant = _assistant(db_session)
        flaky = FlakyTool(httpx.ConnectError("reset"), LLMError("gateway hiccup"))
        assistant.tools["search_schedule"] = flaky

        result = await assistant.dispatch("search_schedule", "{}")

        assert result == {"games": [], "count": 0}
        assert flaky.calls == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, db_session: Session):
        assistant = _assistant(db_session)
        flaky = FlakyTool(*[httpx.ConnectError("down") for _ in range(5)])
        assistant.tools["search_schedule"] = flaky

        result = await assistant.dispatch("search_schedule", "{}")

        assert result == {"error": "down"}
        assert flaky.calls == 3

    @pytest.mark.asyncio
    async def test_bad_arguments_are_not_retried(self, db_session: Session):
        assistant = _assistant(db_session)
        flaky = FlakyTool(KeyError("playerName"))
        assistant.tools["analyze_player"] = flaky

        result = await assistant.dispatch("analyze_player", "{}")

        assert "playerName" in result["error"]
        assert flaky.calls == 1

    def test_transient_classification(self):
        assert is_transient_tool_error(httpx.ReadTimeout("slow"))
        assert is_transient_tool_error(LLMError())
        assert not is_transient_tool_error(LLMQuotaExceededError())
        assert not is_transient_tool_error(ValueError("bad date"))

    # Real tools
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_search_schedule_tool(self, db_session: Session):
        add_game(db_session, "nba_1", "Los Angeles Lakers", "Boston Celtics", game_date=FIXED_NOW.date())
        add_game(db_session, "nfl_1", "Dallas Cowboys", "New York Giants", sport="NFL", game_date=FIXED_NOW.date())

        result = await _assistant(db_session).dispatch("search_schedule", json.dumps({"sport": "NBA"}))

        assert result["count"] == 1
        assert result["games"][0]["game_id"] == "nba_1"

    @pytest.mark.asyncio
    async def test_bad_date_is_reported(self, db_session: Session):
        result = await _assistant(db_session).dispatch("search_schedule", json.dumps({"dateFrom": "tomorrow"}))
        assert "error" in result


class TestRespond:

    @pytest.mark.asyncio
    async def test_plain_reply_without_tools(self, db_session: Session):
        gateway = RecordingGateway(llm_reply("Hello!"))

        reply = await _assistant(db_session, gateway).respond([{"role": "user", "content": "hi"}])

        assert reply == {"message": "Hello!", "toolCalls": []}
        assert len(gateway.requests) == 1
        assert len(gateway.requests[0]["tools"]) == 6

    @pytest.mark.asyncio
    async def test_tool_results_are_sent_back(self, db_session: Session):
        add_game(db_session, "nba_1", "Los Angeles Lakers", "Boston Celtics", game_date=FIXED_NOW.date())
        gateway = RecordingGateway(
            llm_reply(tool_calls=[
                tool_call("search_schedule", {"team": "Lakers"}, call_id="call_a"),
                tool_call("lookup_weather", {}, call_id="call_b"),
            ]),
            llm_reply("The Lakers host Boston tonight."),
        )

        reply = await _assistant(db_session, gateway).respond(
            [{"role": "user", "content": "When do the Lakers play?"}],
            context={"sport": "NBA"},
        )

        assert reply == {
            "message": "The Lakers host Boston tonight.",
            "toolCalls": ["search_schedule", "lookup_weather"],
        }
        second = gateway.requests[1]["messages"]
        tool_messages = [m for m in second if m["role"] == "tool"]
        assert [m["tool_call_id"] for m in tool_messages] == ["call_a", "call_b"]
        assert json.loads(tool_messages[0]["content"])["count"] == 1
        assert json.loads(tool_messages[1]["content"]) == {"error": UNKNOWN_FUNCTION}
        assert '"sport": "NBA"' in second[0]["content"]

    @pytest.mark.asyncio
    async def test_gateway_error_propagates(self, db_session: Session):
        gateway = RecordingGateway(httpx.Response(429))
        with pytest.raises(LLMError):
            await _assistant(db_session, gateway).respond([{"role": "user", "content": "hi"}])

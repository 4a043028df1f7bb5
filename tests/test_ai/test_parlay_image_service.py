"""Tests for ParlayImageAnalyzer.

Test Strategy:
1. The slip goes to the gateway as an image_url content part (data URL)
2. JSON replies are normalized: unknown advice and risk levels are coerced
3. Prose replies come back as text_analysis with an unknown risk level
4. Gateway errors propagate
"""
import json
import sys
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import RecordingGateway, llm_reply, make_llm_client

from app.services.ai.llm_client import LLMNotConfiguredError, LLMRateLimitError
from app.services.ai.parlay_image_service import ParlayImageAnalyzer, image_data_url

SLIP_ANALYSIS = {
    "bets": [
        {"description": "LeBron James Over 25.5 Points", "probability": 62, "recommendation": "Keep", "reasoning": "Hot streak"},
        {"description": "Warriors ML", "probability": "48.5", "recommendation": "swap", "reasoning": "Road back-to-back"},
    ],
    "overall_probability": 30.07,
    "risk_level": "HIGH",
    "total_stake": "$10",
    "potential_payout": "$36",
    "recommendations": ["Drop the moneyline leg"],
    "key_factors": ["Draymond Green questionable"],
}


class TestImageDataUrl:

    def test_wraps_base64(self):
        assert image_data_url("aGVsbG8=", "image/png") == "data:image/png;base64,aGVsbG8="

    def test_urls_pass_through(self):
        assert image_data_url("https://cdn.test/slip.jpg") == "https://cdn.test/slip.jpg"
        assert image_data_url("data:image/webp;base64,xyz") == "data:image/webp;base64,xyz"


class TestParlayImageAnalyzer:

    # Request shape
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_sends_image_content_part(self):
        gateway = RecordingGateway(llm_reply(json.dumps(SLIP_ANALYSIS)))

        await ParlayImageAnalyzer(make_llm_client(gateway)).analyze("aGVsbG8=", "image/png")

        [request] = gateway.requests
        user_content = request["messages"][1]["content"]
        assert user_content[0]["type"] == "text"
        assert user_content[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,aGVsbG8="}}

    @pytest.mark.asyncio
    async def test_missing_image_makes_no_request(self):
        gateway = RecordingGateway(llm_reply("unused"))

        with pytest.raises(ValueError):
            await ParlayImageAnalyzer(make_llm_client(gateway)).analyze("")

        assert gateway.requests == []

    # Reply parsing
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_json_reply_is_normalized(self):
        reply = "```json\n" + json.dumps(SLIP_ANALYSIS) + "\n```"
        gateway = RecordingGateway(llm_reply(reply))

        result = await ParlayImageAnalyzer(make_llm_client(gateway)).analyze("aGVsbG8=")

        analysis = result["analysis"]
        assert [b["recommendation"] for b in analysis["bets"]] == ["keep", "modify"]
        assert analysis["bets"][1]["probability"] == 48.5
        assert analysis["overall_probability"] == 30.07
        assert analysis["risk_level"] == "high"
        assert analysis["potential_payout"] == "$36"
        assert analysis["key_factors"] == ["Draymond Green questionable"]

    @pytest.mark.asyncio
    async def test_prose_reply_becomes_text_analysis(self):
        gateway = RecordingGateway(llm_reply("Three legs, the second one looks shaky."))

        result = await ParlayImageAnalyzer(make_llm_client(gateway)).analyze("aGVsbG8=")

        analysis = result["analysis"]
        assert analysis["text_analysis"] == "Three legs, the second one looks shaky."
        assert analysis["risk_level"] == "unknown"
        assert analysis["overall_probability"] is None
        assert analysis["bets"] == []

    # Errors
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_rate_limit_propagates(self):
        gateway = RecordingGateway(httpx.Response(429))

        with pytest.raises(LLMRateLimitError):
            await ParlayImageAnalyzer(make_llm_client(gateway)).analyze("aGVsbG8=")

    @pytest.mark.asyncio
    async def test_without_key_is_not_configured(self):
        gateway = RecordingGateway(llm_reply("unused"))

        with pytest.raises(LLMNotConfiguredError):
            await ParlayImageAnalyzer(make_llm_client(gateway, api_key="")).analyze("aGVsbG8=")

        assert gateway.requests == []

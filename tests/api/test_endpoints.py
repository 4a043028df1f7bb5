"""
HTTP endpoint integration tests for prop-edge-api.

These tests verify that FastAPI endpoints:
- Return the {success, data} envelope on success
- Return {success: false, error, code} with the right status on failure
- Validate request bodies and query parameters (400 VALIDATION_ERROR)
- Map LLM gateway failures to their status codes

Uses FastAPI TestClient for in-memory HTTP testing; provider and LLM traffic
goes through httpx.MockTransport.
"""
import random
import sys
from pathlib import Path

import httpx
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from tenacity import wait_none

sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import FIXED_NOW, RecordingGateway, add_game, add_odds, add_stats, llm_reply, make_llm_client

from app.api.dependencies import get_llm_client, get_orchestrator, get_player_search
from app.core.database import get_db
from app.main import app
from app.models.models import AccessCode, LiveOdds
from app.services.ai.prompts import NO_OPPORTUNITIES_MESSAGE
from app.services.core.player_search import PlayerSearchService
from app.services.core.ttl_cache import TTLCache
from app.services.sync.orchestrator import SyncOrchestrator


# =============================================================================
# FIXTURES
# =============================================================================

def _offline(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("offline", request=request)


@pytest.fixture
def llm_gateway():
    """Route the LLM dependency to a RecordingGateway; returns a setter."""
    def install(*responses) -> RecordingGateway:
        gateway = RecordingGateway(*responses)

        async def override():
            yield make_llm_client(gateway)

        app.dependency_overrides[get_llm_client] = override
        return gateway

    return install


@pytest.fixture
def offline_orchestrator(client: TestClient):
    """Orchestrator whose providers are unreachable (fallback paths)."""
    async def override(db: Session = Depends(get_db)):
        orchestrator = SyncOrchestrator(
            db,
            client=httpx.AsyncClient(transport=httpx.MockTransport(_offline)),
            retry_wait=wait_none(),
            rng=random.Random(7),
            clock=lambda: FIXED_NOW,
        )
        try:
            yield orchestrator
        finally:
            await orchestrator.close()

    app.dependency_overrides[get_orchestrator] = override
    return client


# =============================================================================
# ROOT, HEALTH AND ERROR ENVELOPES
# =============================================================================

class TestHealthEndpoints:
    """Liveness and component health."""

    def test_root_lists_endpoints(self, client: TestClient):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "running"
        assert data["endpoints"]["edge"] == "/api/v1/edge"

    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_detailed_health(self, client: TestClient):
        response = client.get("/api/health")

        assert response.status_code == 200
        components = response.json()["components"]
        assert components["database"]["status"] == "connected"
        assert components["scheduler"]["status"] == "disabled"
        assert "sportsdata" in components["providers"]


class TestErrorEnvelopes:
    """Every failure uses {success: false, error, code}."""

    def test_validation_error_is_400(self, client: TestClient):
        response = client.post("/api/v1/edge/opportunities", json={"sport": "XFL"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"]

    def test_unknown_route_is_404(self, client: TestClient):
        response = client.get("/api/v1/nope")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_unhandled_error_is_500(self, db_session: Session):
        def broken_db():
            raise RuntimeError("connection pool exhausted")

        app.dependency_overrides[get_db] = broken_db
        try:
            with TestClient(app, raise_server_exceptions=False) as test_client:
                response = test_client.get("/api/v1/props")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "connection pool exhausted", "code": "SERVER_ERROR"}


# =============================================================================
# EDGE ENDPOINTS
# =============================================================================

class TestEdgeEndpoints:

    def test_categories(self, client: TestClient):
        response = client.get("/api/v1/edge/categories")

        assert response.status_code == 200
        ids = [c["id"] for c in response.json()["data"]]
        assert ids == ["player_props", "live_betting", "college_sports", "arbitrage", "derivative_markets"]

    def test_opportunities(self, client: TestClient, db_session: Session):
        add_odds(db_session, "LeBron James", "Points", 20.0, "DraftKings")
        add_odds(db_session, "LeBron James", "Points", 20.0, "FanDuel")
        add_stats(db_session, "LeBron James", "Points", [22.4, 22.4, 22.4])

        response = client.post("/api/v1/edge/opportunities", json={"category": "player_props"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["opportunities"][0]["title"] == "LeBron James Points Over 20"
        assert data["metadata"]["dataPoints"]["liveOdds"] == 2

    def test_opportunities_empty_database(self, client: TestClient):
        response = client.post("/api/v1/edge/opportunities", json={})

        assert response.status_code == 200
        assert response.json()["data"]["opportunities"] == []

    def test_risk_reward(self, client: TestClient):
        bets = [
            {"player": "A", "stat": "Points", "line": 20.5, "overOdds": "-110", "underOdds": "EVEN", "confidence": 85, "valueRating": "high"},
            {"player": "B", "stat": "Points", "line": 18.5, "overOdds": "-120", "underOdds": "+100", "confidence": 82, "valueRating": "high"},
        ]

        response = client.post("/api/v1/edge/risk-reward", json={"bets": bets})

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["bets"]) == 2
        assert data["scenarios"][0]["risk_level"] == "conservative"

    def test_risk_reward_rejects_bad_odds(self, client: TestClient):
        bets = [{"player": "A", "stat": "Points", "line": 20.5, "overOdds": "abc", "underOdds": "-110", "confidence": 60}]

        response = client.post("/api/v1/edge/risk-reward", json={"bets": bets})

        assert response.status_code == 400


# =============================================================================
# PROPS, SCHEDULE AND PLAYERS
# =============================================================================

class TestBoardEndpoints:

    def test_props_sorted_by_confidence(self, client: TestClient, db_session: Session):
        add_odds(db_session, "A", "Points", 20.5, "DraftKings", confidence_score=65)
        add_odds(db_session, "B", "Points", 20.5, "DraftKings", confidence_score=88)

        response = client.get("/api/v1/props", params={"sortBy": "confidence"})

        data = response.json()["data"]
        assert [p["player"] for p in data["props"]] == ["B", "A"]
        assert data["filters"]["sortBy"] == "confidence"

    def test_props_rejects_unknown_sort(self, client: TestClient):
        assert client.get("/api/v1/props", params={"sortBy": "vibes"}).status_code == 400

    def test_schedule_search(self, client: TestClient, db_session: Session):
        add_game(db_session, "nba_1", "Los Angeles Lakers", "Boston Celtics")
        add_game(db_session, "nba_2", "Miami Heat", "Chicago Bulls")

        response = client.get("/api/v1/schedule", params={"team": "lakers"})

        data = response.json()["data"]
        assert data["count"] == 1
        assert data["games"][0]["game_id"] == "nba_1"

    def test_player_search(self, client: TestClient):
        def roster(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"player": [{"idPlayer": "7", "strPlayer": "LeBron James", "strTeam": "Lakers"}]})

        service = PlayerSearchService(
            cache=TTLCache(ttl=60, capacity=8),
            client=httpx.AsyncClient(transport=httpx.MockTransport(roster)),
        )
        app.dependency_overrides[get_player_search] = lambda: service

        response = client.get("/api/v1/players/search", params={"q": "lebron", "sport": "NBA"})

        assert response.json()["data"]["players"][0]["position"] == "N/A"


# =============================================================================
# ACCESS AND PARLAYS
# =============================================================================

class TestAccessEndpoints:

    def test_redeem_and_check(self, client: TestClient, db_session: Session):
        db_session.add(AccessCode(code="EDGE2025"))
        db_session.commit()

        response = client.post("/api/v1/access/redeem", json={"user_id": "user-1", "code": "EDGE2025"})

        assert response.json() == {"success": True, "data": {"granted": True, "alreadyRedeemed": False}}
        assert client.get("/api/v1/access/user-1").json()["data"]["hasAccess"] is True

    def test_invalid_code_is_400_with_code(self, client: TestClient):
        response = client.post("/api/v1/access/redeem", json={"user_id": "user-1", "code": "NOPE"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ACCESS_CODE"


class TestParlayEndpoints:

    PICK = {"player_name": "LeBron James", "prop_type": "Points", "line": 24.5, "bet_type": "over", "odds": "-110", "confidence": 78}

    def test_create_list_delete(self, client: TestClient):
        created = client.post("/api/v1/parlays", json={"user_id": "user-1", "name": "Slip", "picks": [self.PICK]})

        assert created.status_code == 201
        parlay = created.json()["data"]
        assert parlay["totalPicks"] == 1
        assert parlay["averageConfidence"] == 78.0

        listed = client.get("/api/v1/parlays", params={"user_id": "user-1"}).json()["data"]
        assert listed["count"] == 1

        deleted = client.delete(f"/api/v1/parlays/{parlay['id']}", params={"user_id": "user-1"})
        assert deleted.json()["data"] == {"deleted": parlay["id"]}

    def test_delete_missing_is_404(self, client: TestClient):
        response = client.delete("/api/v1/parlays/missing")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_empty_picks_rejected(self, client: TestClient):
        response = client.post("/api/v1/parlays", json={"user_id": "user-1", "name": "Slip", "picks": []})
        assert response.status_code == 400


# =============================================================================
# AI ENDPOINTS
# =============================================================================

class TestAIEndpoints:

    def test_without_llm_key_is_503(self, client: TestClient):
        response = client.post("/api/v1/ai/insights", json={"sport": "NBA"})

        assert response.status_code == 503
        assert response.json()["code"] == "AI_NOT_CONFIGURED"

    def test_external_factors_without_key_is_empty(self, client: TestClient):
        response = client.post("/api/v1/ai/external-factors", json={"playerName": "LeBron James", "sport": "NBA"})

        assert response.status_code == 200
        assert response.json()["data"]["insights"] == []

    def test_strategy_without_opportunities(self, client: TestClient, llm_gateway):
        gateway = llm_gateway(llm_reply("unused"))

        response = client.post("/api/v1/ai/betting-strategy", json={"bankroll": 500})

        assert response.json()["data"]["strategy"] == NO_OPPORTUNITIES_MESSAGE
        assert gateway.requests == []

    @pytest.mark.parametrize("status,code", [
        (429, "RATE_LIMITED"),
        (402, "QUOTA_EXCEEDED"),
        (500, "AI_ERROR"),
    ])
    def test_gateway_errors_map_to_status(self, client: TestClient, llm_gateway, status, code):
        llm_gateway(httpx.Response(status))

        response = client.post("/api/v1/ai/insights", json={"sport": "NBA"})

        assert response.status_code == status
        assert response.json()["code"] == code

    def test_assistant(self, client: TestClient, llm_gateway):
        llm_gateway(llm_reply("Ask me about tonight's edges."))

        response = client.post("/api/v1/ai/assistant", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.json()["data"] == {"message": "Ask me about tonight's edges.", "toolCalls": []}

    def test_assistant_requires_messages(self, client: TestClient):
        assert client.post("/api/v1/ai/assistant", json={"messages": []}).status_code == 400

    def test_parlay_image(self, client: TestClient, llm_gateway):
        gateway = llm_gateway(llm_reply('{"bets": [], "overall_probability": 12.5, "risk_level": "medium"}'))

        response = client.post("/api/v1/ai/parlay-image", json={"image": "aGVsbG8=", "imageType": "image/png"})

        assert response.status_code == 200
        analysis = response.json()["data"]["analysis"]
        assert analysis["overall_probability"] == 12.5
        assert analysis["risk_level"] == "medium"
        assert gateway.requests[0]["messages"][1]["content"][1]["type"] == "image_url"

    def test_parlay_image_requires_image(self, client: TestClient, llm_gateway):
        gateway = llm_gateway(llm_reply("unused"))

        response = client.post("/api/v1/ai/parlay-image", json={"imageType": "image/png"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert gateway.requests == []


# =============================================================================
# DATA ENDPOINTS
# =============================================================================

class TestDataEndpoints:

    def test_mock_odds(self, offline_orchestrator: TestClient, db_session: Session):
        response = offline_orchestrator.post("/api/v1/data/mock-odds/NBA")

        data = response.json()["data"]
        assert data["success"] is True
        assert data["provenance"] == "synthetic"
        assert db_session.query(LiveOdds).count() == data["count"]

    def test_populate_all(self, offline_orchestrator: TestClient):
        response = offline_orchestrator.post("/api/v1/data/populate-all", json={"sports": ["NBA"]})

        summary = response.json()["data"]["summary"]
        assert summary["odds"] == "✓"
        assert summary["stats"] == "✗"

    def test_unknown_sport_rejected(self, offline_orchestrator: TestClient):
        assert offline_orchestrator.post("/api/v1/data/mock-odds/XFL").status_code == 400


# =============================================================================
# AUTH AND MIDDLEWARE
# =============================================================================

class TestApiKeyAuth:
    """Write endpoints require X-API-Key once API_KEY is configured."""

    @pytest.fixture
    def api_key(self, monkeypatch):
        from app.core.config import settings
        monkeypatch.setattr(settings, "API_KEY", "secret-key")
        return "secret-key"

    def test_missing_key_is_401(self, client: TestClient, api_key):
        response = client.get("/api/v1/parlays", params={"user_id": "user-1"})

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_wrong_key_is_403(self, client: TestClient, api_key):
        response = client.get("/api/v1/parlays", params={"user_id": "user-1"}, headers={"X-API-Key": "nope"})

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_valid_key(self, client: TestClient, api_key):
        response = client.get("/api/v1/parlays", params={"user_id": "user-1"}, headers={"X-API-Key": api_key})
        assert response.status_code == 200

    def test_read_endpoints_are_public(self, client: TestClient, api_key):
        assert client.get("/api/v1/edge/categories").status_code == 200


class TestCorrelationId:

    def test_echoes_incoming_id(self, client: TestClient):
        response = client.get("/health", headers={"X-Correlation-ID": "req-123"})
        assert response.headers["X-Correlation-ID"] == "req-123"

    def test_mints_id_when_missing(self, client: TestClient):
        assert client.get("/health").headers["X-Correlation-ID"]

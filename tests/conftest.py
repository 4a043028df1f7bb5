"""Shared pytest fixtures for prop-edge-api tests."""
import os
import sys
import json
from pathlib import Path
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Generator, List, Optional

# Must be set before any app module reads settings
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["API_KEY"] = ""
os.environ["LLM_API_KEY"] = ""
os.environ["SPORTSDATA_API_KEY"] = ""
os.environ["THE_ODDS_API_KEY"] = ""
os.environ["SPORTSBLAZE_API_KEY"] = ""
os.environ["LOG_JSON"] = "false"

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from app.models.models import Base, GameSchedule, LiveOdds, PlayerStat  # noqa: E402
from app.services.ai.llm_client import LLMClient  # noqa: E402
from app.services.core.circuit_breaker import reset_all_breakers  # noqa: E402

FIXED_NOW = datetime(2025, 1, 15, 18, 0, 0)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Fresh in-memory database per test; StaticPool so TestClient threads share it."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestSessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture(scope="function")
def client(db_session: Session):
    """TestClient with the database dependency pointed at the test session."""
    from fastapi.testclient import TestClient
    from app.main import app
    from app.core.database import get_db

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _reset_breakers():
    """Circuit breakers are module-level; keep failures from leaking between tests."""
    reset_all_breakers()
    yield
    reset_all_breakers()


# ============================================================================
# LLM gateway fakes
# ============================================================================

def llm_reply(content: Optional[str] = None, tool_calls: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """Chat-completions response body with one choice."""
    message: Dict[str, Any] = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = tool_calls
    return {"choices": [{"index": 0, "message": message}]}


def tool_call(name: str, arguments: Any, call_id: str = "call_1") -> Dict[str, Any]:
    raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
    return {"id": call_id, "type": "function", "function": {"name": name, "arguments": raw}}


class RecordingGateway:
    """
    MockTransport handler that replays queued responses and records requests.

    Each queued item is either a dict (200 JSON body) or an httpx.Response.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)


def make_llm_client(handler: Callable[[httpx.Request], httpx.Response], api_key: str = "test-key") -> LLMClient:
    return LLMClient(
        api_key=api_key,
        base_url="https://llm.test/v1",
        model="test-model",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


# ============================================================================
# Row factories
# ============================================================================

def add_odds(
    db: Session,
    player: str,
    stat_type: str,
    line: float,
    sportsbook: str,
    sport: str = "NBA",
    team: str = "Los Angeles Lakers",
    **extra
) -> LiveOdds:
    row = LiveOdds(
        player_name=player,
        team=team,
        sport=sport,
        stat_type=stat_type,
        line=line,
        over_odds=extra.pop("over_odds", "-110"),
        under_odds=extra.pop("under_odds", "-110"),
        sportsbook=sportsbook,
        **extra
    )
    db.add(row)
    db.commit()
    return row


def add_stats(
    db: Session,
    player: str,
    stat_type: str,
    values: List[float],
    sport: str = "NBA",
    team: str = "Los Angeles Lakers",
    latest: Optional[date] = None
) -> List[PlayerStat]:
    """One row per value, newest first: values[0] is the most recent game."""
    latest = latest or date.today()
    rows = []
    for offset, value in enumerate(values):
        game_date = latest - timedelta(days=offset)
        rows.append(PlayerStat(
            player_name=player,
            team=team,
            sport=sport,
            stat_type=stat_type,
            value=value,
            game_date=game_date,
            season_year=game_date.year,
            source="test",
        ))
    db.add_all(rows)
    db.commit()
    return rows


def add_game(
    db: Session,
    game_id: str,
    home_team: str,
    away_team: str,
    sport: str = "NBA",
    game_date: Optional[date] = None,
    **extra
) -> GameSchedule:
    game_date = game_date or date.today()
    row = GameSchedule(
        game_id=game_id,
        sport=sport,
        home_team=home_team,
        away_team=away_team,
        game_date=game_date,
        game_time=extra.pop("game_time", "7:30 PM ET"),
        season_year=game_date.year,
        **extra
    )
    db.add(row)
    db.commit()
    return row

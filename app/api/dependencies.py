"""
Shared FastAPI dependencies.

Tests override these through app.dependency_overrides to inject fake LLM
clients, orchestrators with MockTransport clients, and so on.
"""
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.services.ai.llm_client import LLMClient
from app.services.core.player_search import PlayerSearchService, get_player_search_service
from app.services.sync.orchestrator import SyncOrchestrator


async def get_llm_client() -> AsyncGenerator[LLMClient, None]:
    """LLM gateway client for one request."""
    client = LLMClient.from_settings()
    try:
        yield client
    finally:
        await client.close()


async def get_orchestrator(db: Session = Depends(get_db)) -> AsyncGenerator[SyncOrchestrator, None]:
    """Dependency to get sync orchestrator instance."""
    orchestrator = SyncOrchestrator(db)
    try:
        yield orchestrator
    finally:
        await orchestrator.close()


def get_player_search() -> PlayerSearchService:
    return get_player_search_service()

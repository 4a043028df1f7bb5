"""
Core services that work across all sports.

⚠️  IMPORTANT: Only add services here that work for ALL sports.

This module contains generic plumbing and business logic:
- base_api_adapter: Base class and sport configuration for provider fetchers
- circuit_breaker: One pybreaker circuit per provider
- ttl_cache: In-memory TTL cache with an injectable clock
- player_search: TheSportsDB player lookup with cache and static fallback
- access_service: Access-code redemption and profile updates
- parlay_service: Saved parlays
- prop_analytics_service: The props query (odds joined with analytics)
"""
from app.services.core.base_api_adapter import (
    BaseAPIAdapter,
    FetchResult,
    SPORT_CONFIG,
    SUPPORTED_SPORTS,
)

__all__ = [
    "BaseAPIAdapter",
    "FetchResult",
    "SPORT_CONFIG",
    "SUPPORTED_SPORTS",
]

"""
Circuit breakers for third-party providers.

Each external dependency gets its own pybreaker CircuitBreaker so that a
provider that keeps failing is short-circuited to its fallback path instead
of being hammered on every request.

Circuit Breaker States:
- CLOSED: Requests pass through normally
- OPEN: Requests fail immediately (after fail_max failures)
- HALF_OPEN: One request allowed to test if service has recovered

Usage (async code):
    with sportsdata_breaker.calling():
        response = await client.get(url)
        response.raise_for_status()

Client errors (4xx other than 429) are the caller's fault, not the
provider's, and do not count towards opening the circuit.
"""
from typing import Dict

import httpx
from pybreaker import CircuitBreaker, CircuitBreakerError

from app.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_FAIL_MAX = 5  # Number of failures before opening circuit
DEFAULT_RESET_TIMEOUT = 60  # Seconds before attempting to close circuit


def _is_client_error(exc: Exception) -> bool:
    """HTTP 4xx responses other than 429 are not provider outages."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return 400 <= status < 500 and status != 429
    return False


def _breaker(name: str) -> CircuitBreaker:
    return CircuitBreaker(
        fail_max=DEFAULT_FAIL_MAX,
        reset_timeout=DEFAULT_RESET_TIMEOUT,
        exclude=[_is_client_error],
        name=name,
    )


# ============================================================================
# CIRCUIT BREAKERS
# ============================================================================

sportsdata_breaker = _breaker("sportsdata")
odds_api_breaker = _breaker("odds_api")
sportsblaze_breaker = _breaker("sportsblaze")
fox_sports_breaker = _breaker("fox_sports")
thesportsdb_breaker = _breaker("thesportsdb")
llm_gateway_breaker = _breaker("llm_gateway")

ALL_BREAKERS = (
    sportsdata_breaker,
    odds_api_breaker,
    sportsblaze_breaker,
    fox_sports_breaker,
    thesportsdb_breaker,
    llm_gateway_breaker,
)


# ============================================================================
# CIRCUIT BREAKER STATE MONITORING
# ============================================================================

def get_all_breaker_states() -> Dict[str, str]:
    """Map of breaker name to 'closed', 'open' or 'half-open'."""
    return {breaker.name: breaker.current_state for breaker in ALL_BREAKERS}


def reset_breaker(breaker: CircuitBreaker) -> None:
    """
    Manually reset a circuit breaker to closed state.

    Use with caution - only reset if you know the service has recovered.
    """
    breaker.close()
    logger.warning(f"Circuit breaker '{breaker.name}' manually reset to CLOSED state")


def reset_all_breakers() -> None:
    for breaker in ALL_BREAKERS:
        breaker.close()


__all__ = [
    "CircuitBreakerError",
    "sportsdata_breaker",
    "odds_api_breaker",
    "sportsblaze_breaker",
    "fox_sports_breaker",
    "thesportsdb_breaker",
    "llm_gateway_breaker",
    "get_all_breaker_states",
    "reset_breaker",
    "reset_all_breakers",
]

"""
API key authentication.

Write endpoints (data refreshes, parlays, access redemption) require the
X-API-Key header when API_KEY is configured. In development with no key
configured, requests are allowed through with a debug log line.
"""
from typing import Optional

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader
from starlette.requests import Request

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

API_KEY_NAME = "X-API-Key"

api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=False)

# Public endpoint paths (no auth required)
PUBLIC_PATHS = {
    "/",
    "/health",
    "/api/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/metrics",
}


def get_api_key(request: Request, api_key: Optional[str] = Security(api_key_header)) -> str:
    """
    Validate API key from request header.

    Raises:
        HTTPException: 401 when missing, 403 when wrong
    """
    if request.url.path in PUBLIC_PATHS:
        return "_public_"

    if not settings.API_KEY:
        if settings.is_production():
            logger.warning("API_KEY not configured in production - rejecting request")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="API key required. Configure API_KEY environment variable."
            )
        logger.debug("API_KEY not configured - allowing request in development mode")
        return "_dev_skip_"

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key missing. Provide X-API-Key header."
        )

    if api_key != settings.API_KEY:
        logger.warning(f"Invalid API key attempt from {request.client.host if request.client else 'unknown'}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key."
        )

    return api_key

"""
Response envelopes and exception handlers.

Successful responses are {"success": true, "data": ...}; failures are
{"success": false, "error": message, "code": CODE}. Validation failures add
"details" with pydantic's error list.
"""
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.logging import get_logger
from app.services.ai.llm_client import (
    LLMError,
    LLMNotConfiguredError,
    LLMQuotaExceededError,
    LLMRateLimitError,
)
from app.services.core.access_service import AccessCodeError

logger = get_logger(__name__)

HTTP_ERROR_CODES = {
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def success(data: Any) -> Dict[str, Any]:
    return {"success": True, "data": data}


def error_response(
    status_code: int,
    error: str,
    code: str,
    details: Optional[Any] = None
) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "error": error, "code": code}
    if details is not None:
        content["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=content)


def llm_error_status(exc: LLMError) -> tuple:
    """(status code, error code) for an LLM failure."""
    if isinstance(exc, LLMRateLimitError):
        return 429, "RATE_LIMITED"
    if isinstance(exc, LLMQuotaExceededError):
        return 402, "QUOTA_EXCEEDED"
    if isinstance(exc, LLMNotConfiguredError):
        return 503, "AI_NOT_CONFIGURED"
    return 500, "AI_ERROR"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "Invalid request parameters", "VALIDATION_ERROR", details=exc.errors())


async def llm_exception_handler(request: Request, exc: LLMError):
    status_code, code = llm_error_status(exc)
    logger.error(f"❌ AI request failed on {request.url.path}: {exc}")
    return error_response(status_code, str(exc), code)


async def access_code_exception_handler(request: Request, exc: AccessCodeError):
    return error_response(400, exc.message, exc.code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return error_response(exc.status_code, str(exc.detail), code)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return error_response(500, str(exc) or "Internal server error", "SERVER_ERROR")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(LLMError, llm_exception_handler)
    app.add_exception_handler(AccessCodeError, access_code_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

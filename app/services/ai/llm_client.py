"""
Client for the OpenAI-compatible LLM gateway.

All AI features go through this one client so that gateway errors are
mapped the same way everywhere:

- 429 -> LLMRateLimitError
- 402 -> LLMQuotaExceededError
- any other failure -> LLMError
- no API key configured -> LLMNotConfiguredError
"""
import json
import re
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.logging import get_logger
from app.core.metrics import record_llm_request
from app.services.core.circuit_breaker import llm_gateway_breaker, CircuitBreakerError

logger = get_logger(__name__)

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


def strip_code_fence(text: str) -> str:
    """Drop a surrounding ```json fence from a model reply."""
    return _CODE_FENCE_RE.sub("", (text or "").strip())


class LLMError(Exception):
    """Base error for LLM gateway failures."""

    status_code = 500

    def __init__(self, message: str = "AI service error"):
        super().__init__(message)
        self.message = message


class LLMRateLimitError(LLMError):
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded. Please try again in a moment."):
        super().__init__(message)


class LLMQuotaExceededError(LLMError):
    status_code = 402

    def __init__(self, message: str = "AI credits exhausted. Please add credits to continue."):
        super().__init__(message)


class LLMNotConfiguredError(LLMError):
    status_code = 503

    def __init__(self, message: str = "AI features are not configured (LLM_API_KEY missing)"):
        super().__init__(message)


class LLMClient:
    """
    Thin async wrapper around POST {base_url}/chat/completions.

    The httpx client is created lazily; tests pass their own client built on
    httpx.MockTransport.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://ai.gateway.lovable.dev/v1",
        model: str = "google/gemini-2.5-flash",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, client: Optional[httpx.AsyncClient] = None) -> "LLMClient":
        return cls(
            api_key=settings.LLM_API_KEY,
            base_url=settings.LLM_BASE_URL,
            model=settings.LLM_MODEL,
            timeout=settings.LLM_TIMEOUT,
            client=client,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            )
        return self._client

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def chat(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[str] = None,
        response_format: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Send a chat-completion request and return the first choice's message.

        Raises:
            LLMNotConfiguredError: No API key
            LLMRateLimitError: Gateway answered 429
            LLMQuotaExceededError: Gateway answered 402
            LLMError: Transport failure, open circuit, or any other error status
        """
        if not self.enabled:
            raise LLMNotConfiguredError()

        payload: Dict[str, Any] = {"model": self.model, "messages": messages}
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = tool_choice or "auto"
        if response_format:
            payload["response_format"] = response_format

        client = await self._get_client()
        try:
            with llm_gateway_breaker.calling():
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=self._get_headers(),
                )
                if response.status_code >= 500:
                    response.raise_for_status()
        except CircuitBreakerError as e:
            record_llm_request("circuit_open")
            raise LLMError("AI gateway temporarily unavailable") from e
        except httpx.HTTPStatusError as e:
            record_llm_request("server_error")
            raise LLMError(f"AI gateway error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            record_llm_request("transport_error")
            raise LLMError(f"AI gateway request failed: {e}") from e

        if response.status_code == 429:
            record_llm_request("rate_limited")
            raise LLMRateLimitError()
        if response.status_code == 402:
            record_llm_request("quota_exceeded")
            raise LLMQuotaExceededError()
        if response.status_code >= 400:
            record_llm_request("client_error")
            logger.error(f"AI gateway error {response.status_code}: {response.text[:500]}")
            raise LLMError(f"AI gateway error: {response.status_code}")

        try:
            message = response.json()["choices"][0]["message"]
        except (ValueError, KeyError, IndexError) as e:
            record_llm_request("malformed")
            raise LLMError("AI gateway returned an unexpected response") from e

        record_llm_request("success")
        return message

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Single-turn completion returning the reply text."""
        message = await self.chat([
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ])
        return message.get("content") or ""

    async def complete_json(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        """Single-turn completion in JSON mode, parsed into a dict."""
        message = await self.chat(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
        )
        content = strip_code_fence(message.get("content") or "")
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise LLMError("AI gateway returned invalid JSON") from e

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

"""Vision analysis of a photographed or screenshotted parlay slip."""
import json
from typing import Any, Dict, List

from app.core.logging import get_logger
from app.services.ai.llm_client import LLMClient, strip_code_fence
from app.services.ai.prompts import PARLAY_IMAGE_SYSTEM_PROMPT, PARLAY_IMAGE_USER_PROMPT

logger = get_logger(__name__)

DEFAULT_IMAGE_TYPE = "image/jpeg"
RECOMMENDATIONS = ("keep", "remove", "modify")
RISK_LEVELS = ("low", "medium", "high")
TEXT_FALLBACK_NOTE = "Full analysis provided in text format"


def image_data_url(image: str, image_type: str = DEFAULT_IMAGE_TYPE) -> str:
    """Wrap raw base64 in a data URL; data and http(s) URLs pass through."""
    if image.startswith(("data:", "http://", "https://")):
        return image
    return f"data:{image_type or DEFAULT_IMAGE_TYPE};base64,{image}"


def _as_float(value: Any):
    try:
        return round(float(value), 2)
    except (TypeError, ValueError):
        return None


def _normalize_bet(bet: Dict[str, Any]) -> Dict[str, Any]:
    recommendation = str(bet.get("recommendation") or "").lower()
    return {
        "description": str(bet.get("description") or ""),
        "probability": _as_float(bet.get("probability")),
        "recommendation": recommendation if recommendation in RECOMMENDATIONS else "modify",
        "reasoning": str(bet.get("reasoning") or ""),
    }


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v]


def parse_analysis(content: str) -> Dict[str, Any]:
    """
    Turn the model reply into the slip analysis.

    A reply that is not a JSON object is kept as text_analysis with an
    unknown risk level.
    """
    try:
        data = json.loads(strip_code_fence(content))
    except json.JSONDecodeError:
        data = None

    if not isinstance(data, dict):
        logger.info("Parlay slip analysis was not JSON, returning it as text")
        return {
            "text_analysis": content,
            "bets": [],
            "overall_probability": None,
            "risk_level": "unknown",
            "recommendations": [TEXT_FALLBACK_NOTE],
            "key_factors": [],
        }

    risk_level = str(data.get("risk_level") or "").lower()
    bets = data.get("bets") if isinstance(data.get("bets"), list) else []
    return {
        "bets": [_normalize_bet(b) for b in bets if isinstance(b, dict)],
        "overall_probability": _as_float(data.get("overall_probability")),
        "risk_level": risk_level if risk_level in RISK_LEVELS else "unknown",
        "total_stake": data.get("total_stake"),
        "potential_payout": data.get("potential_payout"),
        "recommendations": _string_list(data.get("recommendations")),
        "key_factors": _string_list(data.get("key_factors")),
    }


class ParlayImageAnalyzer:
    """
    Sends the slip image to the LLM as an image_url content part.

    Gateway errors propagate; only the reply format is handled leniently.
    """

    def __init__(self, llm_client: LLMClient):
        self.llm_client = llm_client

    async def analyze(self, image: str, image_type: str = DEFAULT_IMAGE_TYPE) -> Dict[str, Any]:
        if not image:
            raise ValueError("No image provided")

        message = await self.llm_client.chat([
            {"role": "system", "content": PARLAY_IMAGE_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": PARLAY_IMAGE_USER_PROMPT},
                    {"type": "image_url", "image_url": {"url": image_data_url(image, image_type)}},
                ],
            },
        ])
        analysis = parse_analysis(message.get("content") or "")
        logger.info(
            f"Parlay slip analyzed: {len(analysis['bets'])} bets, risk {analysis['risk_level']}"
        )
        return {"analysis": analysis}

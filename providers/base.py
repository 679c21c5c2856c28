"""
Shared prompt, reply parsing and base class for bag identification providers.
"""
from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod

from errors import ParseError
from image_analyzer import CONFIDENCE_LEVELS, BagIdentification

logger = logging.getLogger(__name__)

# ── Prompt ────────────────────────────────────────────────────────────────────

IDENTIFY_PROMPT = """You are an expert fashion and luxury bag specialist. Analyze this image and provide:
1. The specific name/model of the bag (e.g., "Louis Vuitton Speedy", "Hermes Birkin")
2. The brand name
3. A brief description of the bag's style and characteristics
4. Your confidence level (High/Medium/Low)
5. Estimated price range if possible

Format your response as JSON with keys: bagName, brand, description, confidence, estimatedPrice

Only respond with valid JSON, no additional text."""

# Greedy: first "{" to last "}" — tolerates prose or ``` fences around the object
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


# ── Reply parsing ─────────────────────────────────────────────────────────────

def extract_json_object(raw: str, provider_name: str) -> dict:
    """
    Pull the JSON object out of a free-text model reply.
    Raises ParseError when there is no {...} or it does not decode to an object.
    """
    match = _JSON_OBJECT_RE.search(raw or "")
    if not match:
        logger.error("[%s] No JSON object in reply: %s", provider_name, (raw or "")[:300])
        raise ParseError("model did not return a JSON object")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        logger.error("[%s] Non-JSON reply: %s", provider_name, raw[:300])
        raise ParseError("model did not return a JSON object") from exc
    if not isinstance(data, dict):
        raise ParseError("model did not return a JSON object")
    return data


def normalize_confidence(value: object) -> str:
    """'high' / 'HIGH' / 'High' → 'High'; anything else → 'Medium'."""
    if isinstance(value, str):
        for level in CONFIDENCE_LEVELS:
            if value.strip().lower() == level.lower():
                return level
    return "Medium"


def to_identification(data: dict) -> BagIdentification:
    price = data.get("estimatedPrice")
    return BagIdentification(
        name=_text(data.get("bagName")) or "Unknown",
        brand=_text(data.get("brand")) or "Unknown",
        description=_text(data.get("description")),
        confidence=normalize_confidence(data.get("confidence")),
        estimated_price=_text(price) or None,
    )


def _text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


# ── Abstract base ──────────────────────────────────────────────────────────────

class IdentityProvider(ABC):
    """Base class for anything that can name a bag from a photo."""

    name: str           # e.g. "google"
    model_id: str       # e.g. "gemini-2.0-flash"

    @abstractmethod
    async def identify(self, image_base64: str) -> BagIdentification:
        """Identify the bag in the base64 image. Raises BagFinderError subclasses."""
        ...

    @property
    def full_name(self) -> str:
        return f"{self.name}/{self.model_id}"

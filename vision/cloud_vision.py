"""
Google Cloud Vision `images:annotate` client.

One POST per photo asks for all seven features at once:
  • LABEL_DETECTION       — concepts / scenes (10)
  • TEXT_DETECTION        — OCR (10)
  • SAFE_SEARCH_DETECTION — adult / violence / racy likelihoods
  • OBJECT_LOCALIZATION   — objects with boxes (10); "Handbag" gates brand info
  • IMAGE_PROPERTIES      — dominant colours
  • LOGO_DETECTION        — brand logos (5)
  • WEB_DETECTION         — best-guess labels + web entities (5)

The API key goes in the `key` query parameter. Failures raise:
  non-2xx            → TransportError (message from error.message when present)
  top-level `error`  → ApiError
  responses[0].error → ApiError (per-image failure inside a 200)
  body not JSON, or responses[0] not an object → ParseError
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

import aiohttp

import config
from errors import ApiError, ParseError, TransportError
from image_analyzer import AnalysisResult
from image_encoder import to_base64
from vision.normalizer import parse_vision_response

logger = logging.getLogger(__name__)

FEATURES: list[dict] = [
    {"type": "LABEL_DETECTION",       "maxResults": 10},
    {"type": "TEXT_DETECTION",        "maxResults": 10},
    {"type": "SAFE_SEARCH_DETECTION"},
    {"type": "OBJECT_LOCALIZATION",   "maxResults": 10},
    {"type": "IMAGE_PROPERTIES"},
    {"type": "LOGO_DETECTION",        "maxResults": 5},
    {"type": "WEB_DETECTION",         "maxResults": 5},
]


def build_payload(image_base64: str) -> dict:
    return {
        "requests": [
            {
                "image": {"content": image_base64},
                "features": FEATURES,
            }
        ]
    }


class CloudVisionClient:

    def __init__(
        self,
        api_key: str,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._key     = api_key
        self._url     = api_url or config.VISION_API_URL
        self._timeout = timeout if timeout is not None else config.VISION_TIMEOUT_SECONDS

    async def annotate(self, image_bytes: bytes) -> AnalysisResult:
        """Send the photo to Vision and return the normalized result."""
        body = await self._post(build_payload(to_base64(image_bytes)))

        if body.get("error"):
            raise ApiError(f"Vision API Error: {_error_message(body)}")

        responses = body.get("responses") or []
        if not isinstance(responses, list) or (responses and not isinstance(responses[0], dict)):
            logger.error("Vision returned unexpected responses: %r", responses)
            raise ParseError("Vision API returned a malformed response")
        if responses and responses[0].get("error"):
            raise ApiError(f"Vision API Error: {_error_message(responses[0])}")

        result = parse_vision_response(body)
        logger.info(
            "Vision: %d labels, %d objects, %d colours, brand info %s",
            len(result.labels), len(result.objects), len(result.colors),
            "present" if result.brand_info else "absent",
        )
        return result

    # ── HTTP helper ───────────────────────────────────────────────────────────

    async def _post(self, payload: dict) -> dict:
        """Single HTTP call to images:annotate. Returns the decoded JSON body."""
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self._url,
                    params={"key": self._key},
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self._timeout),
                ) as resp:
                    text = await resp.text()
                    if resp.status < 200 or resp.status >= 300:
                        message = _error_message(_loads_or_empty(text)) or resp.reason or ""
                        raise TransportError(resp.status, message)
        except aiohttp.ClientError as exc:
            raise TransportError(None, str(exc) or exc.__class__.__name__) from exc
        except asyncio.TimeoutError as exc:
            raise TransportError(None, f"timed out after {self._timeout:.0f}s") from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error("Vision returned non-JSON body: %s", text[:300])
            raise ParseError("Vision API returned a malformed response") from exc
        if not isinstance(body, dict):
            raise ParseError("Vision API returned a malformed response")
        return body


# ── Helpers ────────────────────────────────────────────────────────────────────

def _loads_or_empty(text: str) -> dict:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return {}
    return data if isinstance(data, dict) else {}


def _error_message(body: dict) -> str:
    error = body.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or "")
    if error:
        return str(error)
    return ""

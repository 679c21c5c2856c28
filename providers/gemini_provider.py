"""
Google Gemini bag identification — uses the google-genai SDK.

The model is asked for JSON output (response_mime_type) so a well-behaved
reply is a bare object. The reply text still goes through
extract_json_object(), which also copes with models or proxies that wrap
the object in prose or markdown fences.
"""
from __future__ import annotations

import logging
import time

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

import config
from errors import TransportError
from image_analyzer import BagIdentification
from image_encoder import decode_base64, detect_mime
from providers.base import (
    IDENTIFY_PROMPT,
    IdentityProvider,
    extract_json_object,
    to_identification,
)

logger = logging.getLogger(__name__)


class GeminiProvider(IdentityProvider):

    def __init__(self, api_key: str, model: str | None = None):
        self.name     = "google"
        self.model_id = model or config.GEMINI_MODEL
        self._client  = genai.Client(api_key=api_key)

    async def identify(self, image_base64: str) -> BagIdentification:
        image_bytes = decode_base64(image_base64)

        gen_config = genai_types.GenerateContentConfig(
            temperature=0,
            max_output_tokens=512,
            response_mime_type="application/json",
        )

        t0 = time.monotonic()
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model_id,
                contents=[
                    genai_types.Part.from_bytes(
                        data=image_bytes, mime_type=detect_mime(image_bytes)
                    ),
                    IDENTIFY_PROMPT,
                ],
                config=gen_config,
            )
        except genai_errors.APIError as exc:
            raise TransportError(exc.code, exc.message or str(exc)) from exc
        except httpx.HTTPError as exc:
            raise TransportError(None, str(exc) or exc.__class__.__name__) from exc

        latency_ms = int((time.monotonic() - t0) * 1000)
        logger.info("[%s] replied in %d ms", self.full_name, latency_ms)

        data = extract_json_object(response.text or "", self.full_name)
        return to_identification(data)

"""
bag_service.py — the two calls the front end makes.

  analyze(image_bytes, api_key)     → AnalysisResult      (Cloud Vision)
  identify(image_base64, api_key)   → BagIdentification   (Gemini)

Both raise BagFinderError subclasses and never retry. A missing key is a
ConfigurationError raised before any network traffic.
"""
from __future__ import annotations

import logging
from typing import Optional

from errors import BagFinderError, ConfigurationError
from image_analyzer import AnalysisResult, BagIdentification
from providers.gemini_provider import GeminiProvider
from vision.cloud_vision import CloudVisionClient

logger = logging.getLogger(__name__)


async def analyze(image_bytes: bytes, api_key: Optional[str]) -> AnalysisResult:
    if not api_key:
        raise ConfigurationError(
            "Google Cloud Vision API key is not configured (set GOOGLE_VISION_API_KEY)"
        )
    try:
        return await CloudVisionClient(api_key).annotate(image_bytes)
    except BagFinderError as exc:
        logger.error("Error analyzing image: %s", exc)
        raise


async def identify(image_base64: str, api_key: Optional[str]) -> BagIdentification:
    if not api_key:
        raise ConfigurationError(
            "Gemini API key is not configured (set GEMINI_API_KEY)"
        )
    provider = GeminiProvider(api_key)
    try:
        result = await provider.identify(image_base64)
    except BagFinderError as exc:
        logger.error("Error identifying bag with %s: %s", provider.full_name, exc)
        raise
    logger.info(
        "Identified %r by %r (%s confidence)", result.name, result.brand, result.confidence
    )
    return result

"""
Brand inference — only runs when the photo is confidently a handbag.

Rules:
  • Find the first localized object named "handbag" (case-insensitive).
  • Below HANDBAG_CONFIDENCE_THRESHOLD percent there is no brand section at all:
    logo and web guesses on a doubtful handbag are mostly noise.
  • Logos become brand candidates as-is.
  • Web detection contributes its best-guess labels first, then the first
    three web entities whose description is not already listed.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from image_analyzer import (
    BrandCandidate,
    BrandInfo,
    DetectedObject,
    WebResult,
    format_percent,
)

logger = logging.getLogger(__name__)

HANDBAG_CONFIDENCE_THRESHOLD = 50.0
MAX_WEB_ENTITIES = 3


def find_handbag(objects: Iterable[DetectedObject]) -> Optional[DetectedObject]:
    """First object named handbag in input order, or None."""
    for obj in objects:
        if (obj.name or "").lower() == "handbag":
            return obj
    return None


def extract_brand_info(
    response: dict, objects: Iterable[DetectedObject]
) -> Optional[BrandInfo]:
    handbag = find_handbag(objects)
    if handbag is None:
        return None

    try:
        handbag_confidence = float(handbag.confidence)
    except (TypeError, ValueError):
        return None
    if handbag_confidence < HANDBAG_CONFIDENCE_THRESHOLD:
        logger.debug("Handbag at %.1f%% — below threshold, no brand info", handbag_confidence)
        return None

    brands = tuple(
        BrandCandidate(
            description=logo.get("description", ""),
            confidence=format_percent(logo.get("score", 0)),
        )
        for logo in response.get("logoAnnotations") or []
    )

    return BrandInfo(
        handbag_confidence=handbag_confidence,
        brands=brands,
        web_results=tuple(_web_results(response.get("webDetection") or {})),
    )


def _web_results(web: dict) -> list[WebResult]:
    results: list[WebResult] = []
    for label in web.get("bestGuessLabels") or []:
        title = label.get("label", "") if isinstance(label, dict) else str(label)
        results.append(WebResult(title=title, url=""))

    # Only the first three entities are considered; duplicates among them are dropped
    for entity in (web.get("webEntities") or [])[:MAX_WEB_ENTITIES]:
        description = entity.get("description")
        if not description:
            continue
        if any(r.title == description for r in results):
            continue
        results.append(WebResult(title=description, url=entity.get("url") or ""))
    return results

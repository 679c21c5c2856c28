"""
Cloud Vision response → AnalysisResult.

Every annotation list is optional in the API response (a feature that found
nothing is simply left out), so each section defaults to empty and nothing
here raises for a well-formed payload. Transport and error-payload checks
happen in vision/cloud_vision.py before this runs.
"""
from __future__ import annotations

from typing import Any

from errors import ParseError
from image_analyzer import (
    LIKELIHOODS,
    AnalysisResult,
    ColorSwatch,
    DetectedObject,
    Label,
    SafeSearch,
    format_percent,
)
from vision.brand import extract_brand_info


def parse_vision_response(api_response: dict) -> AnalysisResult:
    """
    Unwrap `responses[0]` from a full images:annotate body and normalize it.
    Raises ParseError when the body or its first response is not an object.
    """
    if not isinstance(api_response, dict):
        raise ParseError("Vision API returned a malformed response")
    responses = api_response.get("responses") or []
    if not isinstance(responses, list):
        raise ParseError("Vision API returned a malformed response")
    if not responses:
        return normalize_response({})
    if not isinstance(responses[0], dict):
        raise ParseError("Vision API returned a malformed response")
    return normalize_response(responses[0])


def normalize_response(response: dict) -> AnalysisResult:
    labels = tuple(
        Label(
            description=label.get("description", ""),
            confidence=format_percent(label.get("score", 0)),
        )
        for label in response.get("labelAnnotations") or []
    )

    # textAnnotations[0] is the whole detected block; the rest are single words
    text_annotations = response.get("textAnnotations") or []
    text = text_annotations[0].get("description", "") if text_annotations else ""

    objects = tuple(
        DetectedObject(
            name=obj.get("name", ""),
            confidence=format_percent(obj.get("score", 0)),
        )
        for obj in response.get("localizedObjectAnnotations") or []
    )

    return AnalysisResult(
        labels=labels,
        text=text,
        safe_search=_safe_search(response.get("safeSearchAnnotation") or {}),
        colors=tuple(_dominant_colors(response)),
        objects=objects,
        brand_info=extract_brand_info(response, objects),
    )


def _safe_search(annotation: dict) -> SafeSearch:
    def likelihood(key: str) -> str:
        value = annotation.get(key) or "UNKNOWN"
        return value if value in LIKELIHOODS else "UNKNOWN"

    return SafeSearch(
        adult=likelihood("adult"),
        violence=likelihood("violence"),
        racy=likelihood("racy"),
    )


def _dominant_colors(response: dict) -> list[ColorSwatch]:
    properties = response.get("imagePropertiesAnnotation") or {}
    colors = (properties.get("dominantColors") or {}).get("colors") or []
    swatches: list[ColorSwatch] = []
    for info in colors:
        rgb = info.get("color") or {}
        swatches.append(ColorSwatch(
            color=rgb_to_hex(rgb.get("red", 0), rgb.get("green", 0), rgb.get("blue", 0)),
            percentage=format_percent(info.get("pixelFraction", 0)),
        ))
    return swatches


def rgb_to_hex(red: Any, green: Any, blue: Any) -> str:
    """(r, g, b) in 0–255 → '#RRGGBB'. Missing channels count as 0."""
    return "#" + "".join(f"{_channel(c):02X}" for c in (red, green, blue))


def _channel(value: Any) -> int:
    try:
        channel = int(value or 0)
    except (TypeError, ValueError):
        channel = 0
    return max(0, min(255, channel))

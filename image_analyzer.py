"""
image_analyzer.py — canonical home of the result types shown to the user.

vision/normalizer.py builds AnalysisResult, providers/ builds
BagIdentification. Both are frozen: a result is never edited after it is
returned, only replaced by the next analysis.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

# Safe-search likelihood scale, least to most likely (UNKNOWN first)
LIKELIHOODS: tuple[str, ...] = (
    "UNKNOWN",
    "VERY_UNLIKELY",
    "UNLIKELY",
    "POSSIBLE",
    "LIKELY",
    "VERY_LIKELY",
)

CONFIDENCE_LEVELS: tuple[str, ...] = ("High", "Medium", "Low")


def format_percent(fraction: Any) -> str:
    """0–1 probability → percentage string with one decimal, e.g. 0.9234 → '92.3'."""
    try:
        value = float(fraction)
    except (TypeError, ValueError):
        value = 0.0
    return f"{value * 100:.1f}"


@dataclass(frozen=True)
class Label:
    description: str
    confidence: str             # percent, one decimal


@dataclass(frozen=True)
class DetectedObject:
    name: str
    confidence: str             # percent, one decimal


@dataclass(frozen=True)
class ColorSwatch:
    color: str                  # "#RRGGBB"
    percentage: str             # share of pixels, one decimal


@dataclass(frozen=True)
class SafeSearch:
    adult: str = "UNKNOWN"
    violence: str = "UNKNOWN"
    racy: str = "UNKNOWN"


@dataclass(frozen=True)
class BrandCandidate:
    description: str            # logo text
    confidence: str


@dataclass(frozen=True)
class WebResult:
    title: str
    url: str = ""


@dataclass(frozen=True)
class BrandInfo:
    """Only ever built when a handbag was detected at or above the threshold."""
    handbag_confidence: float
    brands: tuple[BrandCandidate, ...] = ()
    web_results: tuple[WebResult, ...] = ()

    def to_dict(self) -> dict:
        return {
            "isHandbag": True,
            "handbagConfidence": self.handbag_confidence,
            "brands": [
                {"description": b.description, "confidence": b.confidence}
                for b in self.brands
            ],
            "webResults": [{"title": w.title, "url": w.url} for w in self.web_results],
        }


@dataclass(frozen=True)
class AnalysisResult:
    labels: tuple[Label, ...] = ()
    text: str = ""
    safe_search: SafeSearch = field(default_factory=SafeSearch)
    colors: tuple[ColorSwatch, ...] = ()
    objects: tuple[DetectedObject, ...] = ()
    brand_info: Optional[BrandInfo] = None

    def to_dict(self) -> dict:
        """JSON shape rendered by the front end. `bagBrandInfo` is omitted when absent."""
        data = {
            "labels": [
                {"description": l.description, "confidence": l.confidence}
                for l in self.labels
            ],
            "text": self.text,
            "safeSearch": {
                "adult": self.safe_search.adult,
                "violence": self.safe_search.violence,
                "racy": self.safe_search.racy,
            },
            "colors": [{"color": c.color, "percentage": c.percentage} for c in self.colors],
            "objects": [
                {"name": o.name, "confidence": o.confidence} for o in self.objects
            ],
        }
        if self.brand_info is not None:
            data["bagBrandInfo"] = self.brand_info.to_dict()
        return data


@dataclass(frozen=True)
class BagIdentification:
    """Best guess from the generative model about which bag this is."""
    name: str
    brand: str
    description: str
    confidence: str                         # High | Medium | Low
    estimated_price: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "bagName": self.name,
            "brand": self.brand,
            "description": self.description,
            "confidence": self.confidence,
        }
        if self.estimated_price is not None:
            data["estimatedPrice"] = self.estimated_price
        return data

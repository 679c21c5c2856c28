"""
Shared pytest fixtures.

Every test starts with known API keys in config so nothing depends on the
developer's real .env; tests that need a missing key clear it themselves.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ── Make the project root importable without installing the package ────────────
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Smallest byte prefixes detect_mime() recognises
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + b"\x00" * 32
PNG_BYTES  = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture(autouse=True)
def api_keys(monkeypatch):
    import config
    monkeypatch.setattr(config, "GOOGLE_VISION_API_KEY", "test-vision-key")
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-gemini-key")
    monkeypatch.setattr(config, "GEMINI_MODEL", "gemini-2.0-flash")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return JPEG_BYTES


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def handbag_response() -> dict:
    """A realistic responses[0] for a clear photo of a branded handbag."""
    return {
        "labelAnnotations": [
            {"description": "Bag", "score": 0.9712},
            {"description": "Leather", "score": 0.8821},
        ],
        "textAnnotations": [
            {"description": "PARIS\nMADE IN FRANCE"},
            {"description": "PARIS"},
        ],
        "safeSearchAnnotation": {
            "adult": "VERY_UNLIKELY",
            "violence": "UNLIKELY",
            "racy": "POSSIBLE",
        },
        "localizedObjectAnnotations": [
            {"name": "Handbag", "score": 0.8734},
            {"name": "Person", "score": 0.61},
        ],
        "imagePropertiesAnnotation": {
            "dominantColors": {
                "colors": [
                    {"color": {"red": 139, "green": 69, "blue": 19}, "pixelFraction": 0.4123},
                    {"color": {"red": 255, "green": 255}, "pixelFraction": 0.1},
                ]
            }
        },
        "logoAnnotations": [{"description": "Hermès", "score": 0.77}],
        "webDetection": {
            "bestGuessLabels": [{"label": "hermes birkin 30"}],
            "webEntities": [
                {"description": "Birkin bag", "url": "https://example.com/birkin"},
                {"description": "Hermès"},
            ],
        },
    }

"""
image_encoder.py — turn uploaded image bytes into the forms the APIs want.

Vision wants bare base64 in the request body, Gemini wants raw bytes plus a
MIME type, and the browser preview wants a data URI.
"""
from __future__ import annotations

import base64
import binascii
from typing import Optional

from errors import InvalidImageError

DEFAULT_MIME = "image/jpeg"


def detect_mime(image_bytes: bytes) -> str:
    """Sniff the image type from its magic bytes. Falls back to JPEG."""
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if image_bytes[:4] == b"GIF8":
        return "image/gif"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:2] == b"BM":
        return "image/bmp"
    return DEFAULT_MIME


def to_base64(image_bytes: bytes) -> str:
    return base64.b64encode(image_bytes).decode("ascii")


def to_data_uri(image_bytes: bytes, mime_type: Optional[str] = None) -> str:
    """Encode as `data:<mime>;base64,<payload>` for previews."""
    mime = mime_type or detect_mime(image_bytes)
    return f"data:{mime};base64,{to_base64(image_bytes)}"


def strip_data_uri(data: str) -> str:
    """Return the base64 payload, dropping a `data:...;base64,` prefix if present."""
    if data.startswith("data:") and "," in data:
        return data.split(",", 1)[1]
    return data


def decode_base64(data: str) -> bytes:
    """Decode base64 (with or without data-URI prefix). Raises InvalidImageError."""
    try:
        return base64.b64decode(strip_data_uri(data).strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidImageError("Image data is not valid base64") from exc


def validate_upload(image_bytes: bytes, content_type: Optional[str]) -> None:
    """
    Reject anything that is not an image before it reaches an API.
    Raises InvalidImageError with a message the UI can show directly.
    """
    if not content_type or not content_type.startswith("image/"):
        raise InvalidImageError("Please upload an image file")
    if not image_bytes:
        raise InvalidImageError("Uploaded image is empty")

"""
errors.py — every error the analysis and identification calls can raise.

The web layer catches BagFinderError at the call site and turns it into a
JSON error response; nothing here is retried automatically.
"""
from __future__ import annotations

from typing import Optional


class BagFinderError(Exception):
    """Base class — message is always safe to show to the user."""


class ConfigurationError(BagFinderError):
    """A required API key is not configured."""


class TransportError(BagFinderError):
    """Non-success HTTP status or network failure talking to an upstream API."""

    def __init__(self, status: Optional[int], message: str) -> None:
        self.status  = status
        self.message = message
        if status is None:
            super().__init__(f"Request failed: {message}")
        else:
            super().__init__(f"API request failed ({status}): {message}")


class ApiError(BagFinderError):
    """HTTP call succeeded but the service answered with an error payload."""


class ParseError(BagFinderError):
    """Response body does not have the expected JSON shape."""


class InvalidImageError(BagFinderError):
    """Upload is not an image."""


class RequestInProgressError(BagFinderError):
    """Another request of the same kind is already running for this session."""

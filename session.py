"""
session.py — per-user upload state.

A BagSession holds the most recent photo and the results computed for it.
Every upload bumps `generation`; a result that comes back for an older
generation is dropped, so a slow analysis of photo A can never overwrite
the result for photo B uploaded after it.

At most one analysis and one identification run at a time per session.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import bag_service
import config
from errors import InvalidImageError, RequestInProgressError
from image_analyzer import AnalysisResult, BagIdentification
from image_encoder import detect_mime, to_base64, to_data_uri, validate_upload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedImage:
    data: bytes
    filename: str
    content_type: str
    generation: int

    @property
    def base64(self) -> str:
        return to_base64(self.data)

    @property
    def preview(self) -> str:
        return to_data_uri(self.data, self.content_type)


class BagSession:

    def __init__(self, session_id: str = "") -> None:
        self.session_id = session_id
        self.generation = 0
        self.image: Optional[UploadedImage] = None
        self.analysis: Optional[AnalysisResult] = None
        self.identification: Optional[BagIdentification] = None
        self.is_analyzing = False
        self.is_identifying = False

    def upload(
        self, data: bytes, filename: str = "", content_type: Optional[str] = None
    ) -> UploadedImage:
        """Replace the current photo. Previous results and in-flight calls become stale."""
        validate_upload(data, content_type)
        # Trust the bytes over a generic browser type like image/*
        if not content_type or content_type == "image/*":
            content_type = detect_mime(data)

        self.generation += 1
        self.image = UploadedImage(
            data=data,
            filename=filename,
            content_type=content_type,
            generation=self.generation,
        )
        self.analysis = None
        self.identification = None
        logger.info(
            "Session %s: stored %s (%s, %d bytes) as generation %d",
            self.session_id or "-", filename or "<unnamed>", content_type,
            len(data), self.generation,
        )
        return self.image

    def _require_image(self) -> UploadedImage:
        if self.image is None:
            raise InvalidImageError("Upload a bag photo first")
        return self.image

    async def analyze(self) -> Optional[AnalysisResult]:
        """
        Run Cloud Vision on the current photo.
        Returns None if a newer photo was uploaded while the call was running.
        """
        image = self._require_image()
        if self.is_analyzing:
            raise RequestInProgressError("An analysis is already running")

        self.is_analyzing = True
        try:
            result = await bag_service.analyze(image.data, config.GOOGLE_VISION_API_KEY)
        finally:
            self.is_analyzing = False

        if image.generation != self.generation:
            logger.info(
                "Session %s: discarding analysis for stale generation %d (current %d)",
                self.session_id or "-", image.generation, self.generation,
            )
            return None
        self.analysis = result
        return result

    async def identify(self) -> Optional[BagIdentification]:
        """Ask Gemini which bag this is. Same staleness rule as analyze()."""
        image = self._require_image()
        if self.is_identifying:
            raise RequestInProgressError("An identification is already running")

        self.is_identifying = True
        try:
            result = await bag_service.identify(image.base64, config.GEMINI_API_KEY)
        finally:
            self.is_identifying = False

        if image.generation != self.generation:
            logger.info(
                "Session %s: discarding identification for stale generation %d (current %d)",
                self.session_id or "-", image.generation, self.generation,
            )
            return None
        self.identification = result
        return result

"""
Text extraction from images: local Tesseract first, Gemini vision second.
"""

import logging
from typing import Optional

import httpx

from darija_translator.config import Provider, TranslatorConfig
from darija_translator.errors import NoTextDetectedError
from darija_translator.ocr.engine import GeminiVisionOCR, TesseractOCR
from darija_translator.providers.base import BaseProvider, FallbackChain
from darija_translator.utils import normalize_image_base64, normalize_image_mime_type

logger = logging.getLogger(__name__)


class TextExtractor:
    """Runs the OCR fallback chain over a base64-encoded image."""

    def __init__(
        self,
        config: TranslatorConfig,
        local: Optional[BaseProvider] = None,
        cloud: Optional[BaseProvider] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.local = local or TesseractOCR(config.ocr)
        if cloud is None and config.is_configured(Provider.GEMINI_VISION):
            cloud = GeminiVisionOCR(config.ocr, http_client=http_client)
        self.cloud = cloud

        providers = [self.local] + ([self.cloud] if self.cloud is not None else [])
        self.chain = FallbackChain("extract", providers)

    def extract_text(
        self,
        image_base64: str,
        mime_type: Optional[str] = None,
        source_language: Optional[str] = None,
    ) -> str:
        """
        Extract text from an image.

        Args:
            image_base64: Base64 image, optionally a ``data:`` URI.
            mime_type: Optional ``image/*`` type; sniffed or defaulted if absent.
            source_language: Language hint for both engines.

        Returns:
            The extracted, stripped text.

        Raises:
            InvalidInputError: Image is missing or not valid base64.
            NoTextDetectedError: Neither engine produced text.
        """
        payload = normalize_image_base64(image_base64)
        mime = normalize_image_mime_type(mime_type, image_base64)

        outcome = self.chain.run(payload, mime, source_language)
        if outcome.succeeded:
            return outcome.result.output.strip()

        local_result = outcome.attempts[0]
        if self.cloud is None:
            if local_result.error:
                raise NoTextDetectedError(
                    f"Tesseract OCR failed and GEMINI_API_KEY is not set: {local_result.error}"
                ) from local_result.exception
            raise NoTextDetectedError("No text detected by Tesseract and GEMINI_API_KEY is not set")

        cloud_result = outcome.attempts[-1]
        local_reason = local_result.error or "no text found"
        cloud_reason = cloud_result.error or "no text found"
        raise NoTextDetectedError(
            f"No text detected in image (Tesseract: {local_reason}; Gemini Vision: {cloud_reason})"
        ) from cloud_result.exception

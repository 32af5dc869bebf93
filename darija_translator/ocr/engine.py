"""
OCR engines for text extraction from images.

Tesseract runs locally as an external process; Gemini vision is the cloud
fallback used only when Tesseract fails or finds nothing.
"""

import logging
from typing import Optional

import httpx
import pytesseract

from darija_translator.config import OCRConfig
from darija_translator.errors import (
    DarijaTranslatorError,
    ProviderCallFailedError,
    ProviderResponseMalformedError,
)
from darija_translator.languages import is_auto, tesseract_language
from darija_translator.providers.base import BaseProvider
from darija_translator.utils import build_http_client, decode_base64, image_extension, scoped_temp_file

logger = logging.getLogger(__name__)


class TesseractOCR(BaseProvider):
    """Tesseract wrapper; the image is staged in a scoped temporary file."""

    recoverable_errors = (
        DarijaTranslatorError,
        pytesseract.TesseractError,
        OSError,
        RuntimeError,  # pytesseract raises RuntimeError on timeout
    )

    def __init__(self, config: OCRConfig):
        self.config = config
        if config.tesseract_path:
            pytesseract.pytesseract.tesseract_cmd = config.tesseract_path

    @property
    def name(self) -> str:
        return "tesseract"

    def attempt(
        self,
        image_base64: str,
        mime_type: str,
        source_language: Optional[str] = None,
    ) -> str:
        lang = tesseract_language(source_language, self.config.tesseract_lang)
        image_bytes = decode_base64(image_base64, "imageBase64")

        with scoped_temp_file(image_bytes, prefix="ocr_image_", suffix=image_extension(mime_type)) as image_path:
            text = pytesseract.image_to_string(
                image_path,
                lang=lang,
                config=f"--psm {self.config.tesseract_psm}",
            )

        text = (text or "").strip()
        logger.info("Tesseract OCR (%s): extracted %d chars", lang, len(text))
        return text


class GeminiVisionOCR(BaseProvider):
    """Multimodal Gemini call with the image sent inline."""

    def __init__(self, config: OCRConfig, http_client: Optional[httpx.Client] = None):
        self.config = config
        self.timeout = config.timeout_seconds
        self.client = build_http_client(self.timeout, http_client)

    @property
    def name(self) -> str:
        return "gemini_vision"

    @property
    def url(self) -> str:
        return f"{self.config.gemini_base_url}/models/{self.config.gemini_vision_model}:generateContent"

    @staticmethod
    def build_prompt(source_language: Optional[str]) -> str:
        hint = ""
        if not is_auto(source_language):
            hint = f" The text language is {source_language.strip()}."
        return (
            "Extract all readable text from the image. Preserve line breaks."
            f"{hint} Return only the extracted text."
        )

    def attempt(
        self,
        image_base64: str,
        mime_type: str,
        source_language: Optional[str] = None,
    ) -> str:
        body = {
            "contents": [
                {
                    "parts": [
                        {"text": self.build_prompt(source_language)},
                        {"inline_data": {"mime_type": mime_type, "data": image_base64}},
                    ]
                }
            ]
        }
        logger.info("Gemini vision OCR: sending %s image", mime_type)

        response = self.client.post(
            self.url,
            params={"key": self.config.gemini_api_key},
            json=body,
            timeout=self.timeout,
        )
        if not response.is_success:
            raise ProviderCallFailedError(
                f"Gemini Vision error: {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError:
            raise ProviderResponseMalformedError("Gemini Vision returned a non-JSON body", provider=self.name)

        text = self._read_text(data)
        logger.info("Gemini vision OCR: extracted %d chars", len(text))
        return text

    def _read_text(self, data: dict) -> str:
        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not isinstance(candidates, list) or not candidates:
            raise ProviderResponseMalformedError("Gemini Vision returned no candidates", provider=self.name)

        content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
        if not isinstance(content, dict) or not content:
            raise ProviderResponseMalformedError("Gemini Vision returned no content", provider=self.name)

        parts = content.get("parts")
        if not isinstance(parts, list) or not parts:
            raise ProviderResponseMalformedError("Gemini Vision returned no text parts", provider=self.name)

        lines = []
        for part in parts:
            text = part.get("text") if isinstance(part, dict) else None
            if isinstance(text, str) and text.strip():
                lines.append(text.strip())
        return "\n".join(lines).strip()

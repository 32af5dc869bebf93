"""
Speech-to-text via the OpenAI Whisper API or a compatible local server.

Single provider, no fallback: either ``WHISPER_API_URL`` points at a local
Whisper-compatible endpoint, or the OpenAI cloud endpoint is used with
``OPENAI_API_KEY``.
"""

import base64
import logging
import os
from typing import Optional

import httpx

from darija_translator.config import Provider, TranslatorConfig
from darija_translator.errors import (
    ProviderCallFailedError,
    ProviderUnavailableError,
    TranscriptionFailedError,
)
from darija_translator.languages import whisper_language
from darija_translator.utils import (
    audio_extension,
    audio_media_type,
    build_http_client,
    normalize_base64,
    scoped_temp_file,
)

logger = logging.getLogger(__name__)


class SpeechRecognizer:
    """Transcribes base64 audio through a multipart upload."""

    def __init__(self, config: TranslatorConfig, http_client: Optional[httpx.Client] = None):
        self.config = config
        self.settings = config.speech
        self.timeout = httpx.Timeout(
            self.settings.read_timeout_seconds,
            connect=self.settings.connect_timeout_seconds,
        )
        self.client = build_http_client(self.timeout, http_client)

    @property
    def endpoint(self) -> str:
        return self.settings.endpoint

    def is_available(self) -> bool:
        """Local endpoint override configured, or a cloud credential present."""
        return self.config.is_configured(Provider.WHISPER)

    def transcribe(
        self,
        audio_base64: str,
        source_language: Optional[str] = None,
        audio_mime_type: Optional[str] = None,
    ) -> str:
        if not self.is_available():
            raise ProviderUnavailableError(
                "OPENAI_API_KEY is missing and no local WHISPER_API_URL is configured"
            )

        payload = normalize_base64(audio_base64, "audioBase64")
        audio_bytes = base64.b64decode(payload)

        with scoped_temp_file(audio_bytes, prefix="whisper_audio_", suffix=audio_extension(audio_mime_type)) as path:
            return self.transcribe_file(path, source_language)

    def transcribe_file(self, path: str, source_language: Optional[str] = None) -> str:
        if not os.path.exists(path):
            raise TranscriptionFailedError(f"Audio file not found: {path}")

        data = {
            "model": self.settings.whisper_model,
            "response_format": "json",
            "temperature": "0.0",
        }
        language = whisper_language(source_language)
        if language:
            data["language"] = language

        headers = {}
        if self.settings.openai_api_key:
            headers["Authorization"] = f"Bearer {self.settings.openai_api_key}"

        logger.info(
            "Whisper transcription: %s (%d bytes, language=%s) -> %s",
            os.path.basename(path),
            os.path.getsize(path),
            language or "auto",
            "local" if self.settings.is_local else "cloud",
        )

        with open(path, "rb") as audio_file:
            files = {"file": (os.path.basename(path), audio_file, audio_media_type(path))}
            try:
                response = self.client.post(
                    self.endpoint,
                    data=data,
                    files=files,
                    headers=headers,
                    timeout=self.timeout,
                )
            except httpx.HTTPError as e:
                raise ProviderCallFailedError(
                    f"Whisper call failed: {e}", provider="whisper"
                ) from e

        if not response.is_success:
            raise TranscriptionFailedError(
                f"Whisper API error: {response.status_code} - {response.reason_phrase}\n"
                f"Body: {response.text or 'No body'}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            body = response.json()
        except ValueError:
            raise TranscriptionFailedError(
                "Whisper returned a non-JSON body",
                status_code=response.status_code,
                body=response.text,
            )

        text = body.get("text") if isinstance(body, dict) else None
        if not isinstance(text, str):
            raise TranscriptionFailedError(
                "Whisper response has no 'text' field",
                status_code=response.status_code,
                body=response.text,
            )

        transcript = text.strip()
        logger.info("Whisper transcription: %d chars", len(transcript))
        return transcript

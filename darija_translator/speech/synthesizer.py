"""
Text-to-speech with a four-tier fallback chain.

Tiers, in order:
1. Custom endpoint (``TTS_API_URL``), OpenAI-style ``{model, input, voice}``
2. Edge TTS public proxy (free)
3. Google Cloud Text-to-Speech (metered, ``GOOGLE_TTS_API_KEY``)
4. Local stub: placeholder bytes, always succeeds

Every tier returns base64-encoded audio. ``synthesize`` never raises for
provider failures because tier 4 cannot fail.
"""

import base64
import logging
from typing import Optional

import httpx

from darija_translator.config import Provider, TranslatorConfig, TTSConfig
from darija_translator.errors import ProviderCallFailedError, ProviderResponseMalformedError
from darija_translator.languages import (
    edge_voice,
    google_tts_gender,
    google_tts_language,
    google_tts_voice,
    is_auto,
)
from darija_translator.providers.base import BaseProvider, FallbackChain
from darija_translator.utils import build_http_client

logger = logging.getLogger(__name__)

JSON_AUDIO_FIELDS = ("audio", "audioContent", "audio_base64", "audioBase64")


def encode_audio(audio_bytes: bytes) -> str:
    return base64.b64encode(audio_bytes).decode("ascii")


class TTSTier(BaseProvider):
    """A synthesis tier; any exception moves the chain to the next tier."""

    recoverable_errors = (Exception,)

    def _check(self, response: httpx.Response) -> None:
        if not response.is_success:
            raise ProviderCallFailedError(
                f"{self.name} error: {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            )


class CustomEndpointTTS(TTSTier):
    """Operator-controlled endpoint, typically an OpenAI-compatible server."""

    def __init__(self, config: TTSConfig, http_client: Optional[httpx.Client] = None):
        self.config = config
        self.timeout = config.timeout_seconds
        self.client = build_http_client(self.timeout, http_client)

    @property
    def name(self) -> str:
        return "custom_tts"

    def attempt(self, text: str, language: Optional[str] = None, voice_type: Optional[str] = None) -> str:
        payload = {
            "model": self.config.custom_model,
            "input": text,
            "voice": self.config.custom_voice,
        }
        response = self.client.post(self.config.custom_url, json=payload, timeout=self.timeout)
        self._check(response)

        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            data = response.json()
            if isinstance(data, dict):
                for key in JSON_AUDIO_FIELDS:
                    if isinstance(data.get(key), str) and data[key]:
                        return data[key]
            raise ProviderResponseMalformedError(
                "Custom TTS JSON response has no audio field", provider=self.name
            )

        if not response.content:
            raise ProviderResponseMalformedError("Custom TTS returned an empty body", provider=self.name)
        return encode_audio(response.content)


class EdgeProxyTTS(TTSTier):
    """Microsoft Edge neural voices through a public proxy; returns raw audio."""

    def __init__(self, config: TTSConfig, http_client: Optional[httpx.Client] = None):
        self.config = config
        self.timeout = config.timeout_seconds
        self.client = build_http_client(self.timeout, http_client)

    @property
    def name(self) -> str:
        return "edge_tts"

    def attempt(self, text: str, language: Optional[str] = None, voice_type: Optional[str] = None) -> str:
        params = {"text": text, "voice": edge_voice(language)}
        if not is_auto(language):
            params["language"] = language
        response = self.client.get(self.config.edge_url, params=params, timeout=self.timeout)
        self._check(response)

        if not response.content:
            raise ProviderResponseMalformedError("Edge TTS returned an empty body", provider=self.name)
        return encode_audio(response.content)


class GoogleCloudTTS(TTSTier):
    """Google Cloud Text-to-Speech; the response is already base64."""

    def __init__(self, config: TTSConfig, http_client: Optional[httpx.Client] = None):
        self.config = config
        self.timeout = config.timeout_seconds
        self.client = build_http_client(self.timeout, http_client)

    @property
    def name(self) -> str:
        return "google_tts"

    def attempt(self, text: str, language: Optional[str] = None, voice_type: Optional[str] = None) -> str:
        payload = {
            "input": {"text": text},
            "voice": {
                "languageCode": google_tts_language(language),
                "name": google_tts_voice(language, voice_type),
                "ssmlGender": google_tts_gender(voice_type),
            },
            "audioConfig": {
                "audioEncoding": "MP3",
                "speakingRate": 1.0,
                "pitch": 0.0,
            },
        }
        response = self.client.post(
            self.config.google_url,
            params={"key": self.config.google_api_key},
            json=payload,
            timeout=self.timeout,
        )
        self._check(response)

        audio = response.json().get("audioContent")
        if not isinstance(audio, str) or not audio:
            raise ProviderResponseMalformedError(
                "Google TTS response has no audioContent", provider=self.name
            )
        return audio


class LocalStubTTS(TTSTier):
    """Degraded terminal tier: deterministic placeholder, no real synthesis."""

    @property
    def name(self) -> str:
        return "local_stub"

    def attempt(self, text: str, language: Optional[str] = None, voice_type: Optional[str] = None) -> str:
        return encode_audio(f"Simulated audio for: {text}".encode("utf-8"))


class SpeechSynthesizer:
    """Runs the TTS tiers in order and returns the first audio produced."""

    def __init__(
        self,
        config: TranslatorConfig,
        tiers: Optional[list[BaseProvider]] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.config = config
        if tiers is None:
            tiers = self._default_tiers(http_client)
        self.fallback = LocalStubTTS()
        if not tiers or not isinstance(tiers[-1], LocalStubTTS):
            tiers = list(tiers) + [self.fallback]
        self.chain = FallbackChain("synthesize", tiers)
        logger.info("Speech synthesizer tiers: %s", self.chain.provider_names)

    def _default_tiers(self, http_client: Optional[httpx.Client]) -> list[BaseProvider]:
        tts = self.config.tts
        tiers: list[BaseProvider] = []
        if self.config.is_configured(Provider.CUSTOM_TTS):
            tiers.append(CustomEndpointTTS(tts, http_client=http_client))
        if self.config.is_configured(Provider.EDGE_TTS):
            tiers.append(EdgeProxyTTS(tts, http_client=http_client))
        if self.config.is_configured(Provider.GOOGLE_TTS):
            tiers.append(GoogleCloudTTS(tts, http_client=http_client))
        return tiers

    def synthesize(
        self,
        text: str,
        language: Optional[str] = None,
        voice_type: Optional[str] = None,
    ) -> str:
        """Return base64 audio for ``text``; falls back to the local stub."""
        logger.info("Synthesizing %d chars (language=%s, voice=%s)", len(text), language, voice_type)
        outcome = self.chain.run(text, language, voice_type)
        if outcome.succeeded:
            return outcome.result.output
        return self.fallback.attempt(text, language, voice_type)

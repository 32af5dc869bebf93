"""
Configuration management for the Darija translation pipelines.

All provider credentials, endpoints and models are read once from the
environment (optionally seeded from a ``.env`` file) into an immutable
``TranslatorConfig`` that every component receives at construction.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_WHISPER_API_URL = "https://api.openai.com/v1/audio/transcriptions"
DEFAULT_EDGE_TTS_URL = "https://edge-tts-proxy.vercel.app/api/tts"
DOTENV_CANDIDATES = (".env",)

_TRUTHY = {"1", "true", "yes", "on"}


class Provider(Enum):
    MISTRAL = "mistral"
    LOCAL_LLM = "local_llm"
    TESSERACT = "tesseract"
    GEMINI_VISION = "gemini_vision"
    WHISPER = "whisper"
    CUSTOM_TTS = "custom_tts"
    EDGE_TTS = "edge_tts"
    GOOGLE_TTS = "google_tts"
    LOCAL_TTS = "local_tts"


@dataclass(frozen=True)
class ProviderSettings:
    """Resolved view of a single provider's configuration."""
    enabled: bool
    endpoint: Optional[str] = None
    credential: Optional[str] = None
    model: Optional[str] = None


@dataclass(frozen=True)
class LLMConfig:
    """Cloud (Mistral) and local LLM settings."""
    mistral_api_key: Optional[str] = None
    mistral_model: str = "mistral-large-latest"
    mistral_base_url: str = "https://api.mistral.ai/v1"
    local_url: Optional[str] = None
    local_model: str = "llama3"
    prefer_local: bool = False
    temperature: float = 0.2
    timeout_seconds: float = 60.0


@dataclass(frozen=True)
class OCRConfig:
    """Tesseract and Gemini vision settings."""
    tesseract_path: Optional[str] = None
    tesseract_lang: Optional[str] = None
    tesseract_psm: int = 3
    gemini_api_key: Optional[str] = None
    gemini_vision_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_seconds: float = 60.0


@dataclass(frozen=True)
class SpeechConfig:
    """Whisper-compatible speech-to-text settings."""
    openai_api_key: Optional[str] = None
    whisper_api_url: Optional[str] = None
    whisper_model: str = "whisper-1"
    connect_timeout_seconds: float = 60.0
    read_timeout_seconds: float = 120.0

    @property
    def endpoint(self) -> str:
        return _clean(self.whisper_api_url) or DEFAULT_WHISPER_API_URL

    @property
    def has_url_override(self) -> bool:
        """A URL other than the OpenAI default points at a self-hosted server."""
        url = _clean(self.whisper_api_url)
        return url is not None and url != DEFAULT_WHISPER_API_URL

    @property
    def is_local(self) -> bool:
        return self.has_url_override


@dataclass(frozen=True)
class TTSConfig:
    """Settings for the four text-to-speech tiers."""
    custom_url: Optional[str] = None
    custom_model: str = "tts-1"
    custom_voice: str = "alloy"
    edge_url: Optional[str] = DEFAULT_EDGE_TTS_URL
    google_api_key: Optional[str] = None
    google_url: str = "https://texttospeech.googleapis.com/v1/text:synthesize"
    timeout_seconds: float = 30.0


def _clean(value: Optional[str]) -> Optional[str]:
    """Blank values count as absent."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def _is_set(value: Optional[str]) -> bool:
    return _clean(value) is not None


@dataclass(frozen=True)
class TranslatorConfig:
    """Process-wide, read-only provider configuration."""
    llm: LLMConfig = field(default_factory=LLMConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    speech: SpeechConfig = field(default_factory=SpeechConfig)
    tts: TTSConfig = field(default_factory=TTSConfig)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        load_dotenv_files: bool = True,
    ) -> "TranslatorConfig":
        """Build the configuration from environment variables.

        ``.env`` files never override variables already set in the process
        environment. Pass ``environ`` explicitly to bypass both.
        """
        if environ is None:
            if load_dotenv_files:
                for candidate in DOTENV_CANDIDATES:
                    if os.path.exists(candidate):
                        load_dotenv(candidate, override=False)
            environ = os.environ

        def get(key: str, default: Optional[str] = None) -> Optional[str]:
            value = _clean(environ.get(key))
            return value if value is not None else default

        llm = LLMConfig(
            mistral_api_key=get("MISTRAL_API_KEY"),
            mistral_model=get("MISTRAL_MODEL", LLMConfig.mistral_model),
            mistral_base_url=get("MISTRAL_BASE_URL", LLMConfig.mistral_base_url),
            local_url=get("LOCAL_LLM_URL"),
            local_model=get("LOCAL_LLM_MODEL", LLMConfig.local_model),
            prefer_local=(get("LLM_PREFER_LOCAL", "") or "").lower() in _TRUTHY,
        )
        ocr = OCRConfig(
            tesseract_path=get("TESSERACT_PATH"),
            tesseract_lang=get("TESSERACT_LANG"),
            gemini_api_key=get("GEMINI_API_KEY"),
            gemini_vision_model=get("GEMINI_VISION_MODEL", OCRConfig.gemini_vision_model),
        )
        speech = SpeechConfig(
            openai_api_key=get("OPENAI_API_KEY"),
            whisper_api_url=get("WHISPER_API_URL"),
            whisper_model=get("WHISPER_MODEL", SpeechConfig.whisper_model),
        )
        tts = TTSConfig(
            custom_url=get("TTS_API_URL"),
            edge_url=get("EDGE_TTS_URL", DEFAULT_EDGE_TTS_URL),
            google_api_key=get("GOOGLE_TTS_API_KEY"),
        )
        return cls(llm=llm, ocr=ocr, speech=speech, tts=tts)

    @property
    def providers(self) -> Mapping[Provider, ProviderSettings]:
        """Read-only mapping of every provider to its resolved settings."""
        settings = {
            Provider.MISTRAL: ProviderSettings(
                enabled=self.is_configured(Provider.MISTRAL),
                endpoint=self.llm.mistral_base_url,
                credential=self.llm.mistral_api_key,
                model=self.llm.mistral_model,
            ),
            Provider.LOCAL_LLM: ProviderSettings(
                enabled=self.is_configured(Provider.LOCAL_LLM),
                endpoint=self.llm.local_url,
                model=self.llm.local_model,
            ),
            Provider.TESSERACT: ProviderSettings(
                enabled=True,
                endpoint=self.ocr.tesseract_path or "tesseract",
                model=self.ocr.tesseract_lang,
            ),
            Provider.GEMINI_VISION: ProviderSettings(
                enabled=self.is_configured(Provider.GEMINI_VISION),
                endpoint=self.ocr.gemini_base_url,
                credential=self.ocr.gemini_api_key,
                model=self.ocr.gemini_vision_model,
            ),
            Provider.WHISPER: ProviderSettings(
                enabled=self.is_configured(Provider.WHISPER),
                endpoint=self.speech.endpoint,
                credential=self.speech.openai_api_key,
                model=self.speech.whisper_model,
            ),
            Provider.CUSTOM_TTS: ProviderSettings(
                enabled=self.is_configured(Provider.CUSTOM_TTS),
                endpoint=self.tts.custom_url,
                model=self.tts.custom_model,
            ),
            Provider.EDGE_TTS: ProviderSettings(
                enabled=self.is_configured(Provider.EDGE_TTS),
                endpoint=self.tts.edge_url,
            ),
            Provider.GOOGLE_TTS: ProviderSettings(
                enabled=self.is_configured(Provider.GOOGLE_TTS),
                endpoint=self.tts.google_url,
                credential=self.tts.google_api_key,
            ),
            Provider.LOCAL_TTS: ProviderSettings(enabled=True),
        }
        return MappingProxyType(settings)

    def is_configured(self, provider: Provider) -> bool:
        """Whether the provider has every non-blank setting it requires.

        Pure function of configuration: no I/O, no network.
        """
        required = {
            Provider.MISTRAL: (self.llm.mistral_api_key,),
            Provider.LOCAL_LLM: (self.llm.local_url,),
            Provider.TESSERACT: (),
            Provider.GEMINI_VISION: (self.ocr.gemini_api_key,),
            Provider.CUSTOM_TTS: (self.tts.custom_url,),
            Provider.EDGE_TTS: (self.tts.edge_url,),
            Provider.GOOGLE_TTS: (self.tts.google_api_key,),
            Provider.LOCAL_TTS: (),
        }
        if provider is Provider.WHISPER:
            return self.speech.has_url_override or _is_set(self.speech.openai_api_key)
        return all(_is_set(value) for value in required[provider])

    def get_available_providers(self) -> list[Provider]:
        """Return only providers that are usable with the current configuration."""
        return [provider for provider in Provider if self.is_configured(provider)]

"""
Request and result value objects for the public pipeline operations.

Wire payloads use camelCase keys (``imageBase64``, ``translatedAudioBase64``);
the dataclasses use snake_case and convert at the boundary.
"""

from dataclasses import dataclass
from typing import Any, Optional

DEFAULT_SOURCE_LANGUAGE = "en"
DEFAULT_TARGET_LANGUAGE = "ary"
DEFAULT_VOICE = "standard"


def _get(data: dict, camel: str, snake: str, default: Any = None) -> Any:
    if camel in data and data[camel] is not None:
        return data[camel]
    if snake in data and data[snake] is not None:
        return data[snake]
    return default


@dataclass(frozen=True)
class TranslationRequest:
    text: str
    source_language: str = DEFAULT_SOURCE_LANGUAGE
    target_language: str = DEFAULT_TARGET_LANGUAGE

    @classmethod
    def from_dict(cls, data: dict) -> "TranslationRequest":
        return cls(
            text=_get(data, "text", "text"),
            source_language=_get(data, "sourceLanguage", "source_language", DEFAULT_SOURCE_LANGUAGE),
            target_language=_get(data, "targetLanguage", "target_language", DEFAULT_TARGET_LANGUAGE),
        )


@dataclass(frozen=True)
class ImageTranslationRequest:
    image_base64: str
    image_mime_type: Optional[str] = None
    source_language: str = DEFAULT_SOURCE_LANGUAGE
    target_language: str = DEFAULT_TARGET_LANGUAGE

    @classmethod
    def from_dict(cls, data: dict) -> "ImageTranslationRequest":
        return cls(
            image_base64=_get(data, "imageBase64", "image_base64"),
            image_mime_type=_get(data, "imageMimeType", "image_mime_type"),
            source_language=_get(data, "sourceLanguage", "source_language", DEFAULT_SOURCE_LANGUAGE),
            target_language=_get(data, "targetLanguage", "target_language", DEFAULT_TARGET_LANGUAGE),
        )


@dataclass(frozen=True)
class SpeechTranslationRequest:
    audio_base64: str
    audio_mime_type: Optional[str] = None
    source_language: str = DEFAULT_SOURCE_LANGUAGE
    target_language: str = DEFAULT_TARGET_LANGUAGE
    voice: str = DEFAULT_VOICE

    @classmethod
    def from_dict(cls, data: dict) -> "SpeechTranslationRequest":
        return cls(
            audio_base64=_get(data, "audioBase64", "audio_base64"),
            audio_mime_type=_get(data, "audioMimeType", "audio_mime_type"),
            source_language=_get(data, "sourceLanguage", "source_language", DEFAULT_SOURCE_LANGUAGE),
            target_language=_get(data, "targetLanguage", "target_language", DEFAULT_TARGET_LANGUAGE),
            voice=_get(data, "voice", "voice", DEFAULT_VOICE),
        )


@dataclass(frozen=True)
class ReadAloudRequest:
    text: str
    voice: str = DEFAULT_VOICE

    @classmethod
    def from_dict(cls, data: dict) -> "ReadAloudRequest":
        return cls(
            text=_get(data, "text", "text"),
            voice=_get(data, "voice", "voice", DEFAULT_VOICE),
        )


@dataclass(frozen=True)
class TranslationResult:
    translation: str

    def to_dict(self) -> dict:
        return {"translation": self.translation}


@dataclass(frozen=True)
class ImageTranslationResult:
    extracted_text: str
    translation: str

    def to_dict(self) -> dict:
        return {"extractedText": self.extracted_text, "translation": self.translation}


@dataclass(frozen=True)
class SpeechTranslationResult:
    transcript: str
    translated_text: str
    translated_audio: str

    def to_dict(self) -> dict:
        return {
            "transcript": self.transcript,
            "translatedText": self.translated_text,
            "translatedAudioBase64": self.translated_audio,
        }


@dataclass(frozen=True)
class ReadAloudResult:
    audio: str

    def to_dict(self) -> dict:
        return {"audioBase64": self.audio}

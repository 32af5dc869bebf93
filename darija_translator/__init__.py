"""
English -> Darija Translator
============================

Turns English text, images or speech into Moroccan Arabic (Darija) text and
audio by chaining external AI services, each stage with its own provider
fallback.

Architecture:
    Image → Tesseract OCR (→ Gemini vision) → Mistral (→ local LLM)
    Speech → Whisper → Mistral (→ local LLM) → TTS tiers
    Text → Mistral (→ local LLM) [→ TTS tiers for read-aloud]

Speech synthesis tiers:
    1. Custom endpoint (TTS_API_URL)
    2. Edge TTS public proxy
    3. Google Cloud Text-to-Speech
    4. Local placeholder audio (never fails)
"""

__version__ = "1.0.0"

from darija_translator.config import Provider, TranslatorConfig


def __getattr__(name: str):
    """Lazy import for modules that pull in HTTP and OCR dependencies."""
    if name == "DarijaTranslationService":
        from darija_translator.pipeline import DarijaTranslationService
        return DarijaTranslationService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["DarijaTranslationService", "Provider", "TranslatorConfig"]

"""
Language normalisation and provider-specific language/voice tables.
"""

from typing import Optional

DARIJA_ALIASES = {"ary", "darija", "moroccan"}

TESSERACT_PREFIXES = (
    ("en", "eng"),
    ("fr", "fra"),
    ("ar", "ara"),  # also covers "ary"
    ("es", "spa"),
)

WHISPER_LANG_MAP = {
    "fr": "fr", "fra": "fr", "fre": "fr",
    "en": "en", "eng": "en",
    "es": "es", "spa": "es",
    "de": "de", "deu": "de", "ger": "de",
    "it": "it", "ita": "it",
    "pt": "pt", "por": "pt",
    "nl": "nl", "nld": "nl", "dut": "nl",
    "ru": "ru", "rus": "ru",
    "ja": "ja", "jpn": "ja",
    "ko": "ko", "kor": "ko",
    "zh": "zh", "chi": "zh", "zho": "zh",
    "ar": "ar", "ara": "ar",
    "ary": "ar", "ar-ma": "ar",
}

GOOGLE_TTS_LANG_MAP = {
    "fr": "fr-FR", "fra": "fr-FR",
    "en": "en-US", "eng": "en-US",
    "es": "es-ES", "spa": "es-ES",
    "ar": "ar-SA", "ara": "ar-SA", "ary": "ar-SA",
}

EDGE_VOICE_MAP = {
    "fr": "fr-FR-DeniseNeural",
    "en": "en-US-JennyNeural",
    "es": "es-ES-ElviraNeural",
    "ar": "ar-SA-ZariyahNeural",
    "ara": "ar-SA-ZariyahNeural",
    "ary": "ar-SA-ZariyahNeural",
}

DEFAULT_TTS_LANGUAGE = "en-US"
DEFAULT_EDGE_VOICE = "en-US-JennyNeural"


def _norm(lang: Optional[str]) -> str:
    return (lang or "").strip().lower()


def is_english(lang: Optional[str]) -> bool:
    """Blank counts as English (request default)."""
    value = _norm(lang)
    if not value:
        return True
    return value.startswith("en") or value == "english"


def is_darija(lang: Optional[str]) -> bool:
    """Blank counts as Darija (request default)."""
    value = _norm(lang)
    if not value:
        return True
    return value in DARIJA_ALIASES


def is_auto(lang: Optional[str]) -> bool:
    value = _norm(lang)
    return not value or value == "auto"


def tesseract_language(source_language: Optional[str], override: Optional[str] = None) -> str:
    """Map a request language to a 3-letter Tesseract language code."""
    if override and override.strip():
        return override.strip()
    if is_auto(source_language):
        return "eng"
    value = _norm(source_language)
    for prefix, code in TESSERACT_PREFIXES:
        if value.startswith(prefix):
            return code
    return "eng"


def whisper_language(source_language: Optional[str]) -> Optional[str]:
    """Map a request language to a 2-letter Whisper hint, or None for auto-detect."""
    if is_auto(source_language):
        return None
    value = _norm(source_language)
    if value in WHISPER_LANG_MAP:
        return WHISPER_LANG_MAP[value]
    return value[:2]


def google_tts_language(language: Optional[str]) -> str:
    return GOOGLE_TTS_LANG_MAP.get(_norm(language), DEFAULT_TTS_LANGUAGE)


def google_tts_voice(language: Optional[str], voice_type: Optional[str]) -> str:
    """Standard voice name, e.g. ``ar-SA-Standard-A`` (B for male)."""
    variant = "B" if _norm(voice_type) == "male" else "A"
    return f"{google_tts_language(language)}-Standard-{variant}"


def google_tts_gender(voice_type: Optional[str]) -> str:
    return "MALE" if _norm(voice_type) == "male" else "FEMALE"


def edge_voice(language: Optional[str]) -> str:
    return EDGE_VOICE_MAP.get(_norm(language), DEFAULT_EDGE_VOICE)

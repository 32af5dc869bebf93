"""
Error kinds raised by the translation pipelines.

Client errors (bad input, unsupported language pair, missing mandatory
provider) are raised before any provider is contacted. Provider errors are
raised only once every fallback tier of a stage has been exhausted.
"""

from typing import Optional

STAGE_DESCRIPTIONS = {
    "validate": "Request validation failed",
    "extract": "Text extraction failed",
    "transcribe": "Speech transcription failed",
    "translate": "Translation failed",
    "synthesize": "Speech synthesis failed",
}


class DarijaTranslatorError(Exception):
    """Base class for every error surfaced by the pipelines."""

    is_client_error = False

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            prefix = STAGE_DESCRIPTIONS.get(self.stage, f"Stage '{self.stage}' failed")
            return f"{prefix}: {self.message}"
        return self.message


class InvalidInputError(DarijaTranslatorError, ValueError):
    """Missing or blank required field, or undecodable base64 payload."""

    is_client_error = True


class UnsupportedLanguagePairError(DarijaTranslatorError, ValueError):
    """Source is not English or target is not Darija."""

    is_client_error = True


class ProviderUnavailableError(DarijaTranslatorError):
    """No configured provider for a mandatory stage."""

    is_client_error = True


class ProviderCallFailedError(DarijaTranslatorError):
    """Network error or non-2xx response from a specific provider."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        stage: Optional[str] = None,
    ):
        super().__init__(message, stage=stage)
        self.provider = provider
        self.status_code = status_code
        self.body = body


class ProviderResponseMalformedError(DarijaTranslatorError):
    """Provider answered 2xx but the payload lacks the expected field."""

    def __init__(self, message: str, provider: Optional[str] = None, stage: Optional[str] = None):
        super().__init__(message, stage=stage)
        self.provider = provider


class NoTextDetectedError(DarijaTranslatorError):
    """Neither local nor cloud OCR produced usable text."""


class TranscriptionFailedError(DarijaTranslatorError):
    """Speech-to-text provider rejected the audio or returned no transcript."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        stage: Optional[str] = None,
    ):
        super().__init__(message, stage=stage)
        self.status_code = status_code
        self.body = body

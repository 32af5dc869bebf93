"""
Pipeline orchestrators for the English -> Darija flows.

This is the primary entry point that ties together:
1. Image flow:  validate -> extract (Tesseract, Gemini) -> translate
2. Voice flow:  validate -> transcribe (Whisper) -> translate -> synthesize
3. Read aloud:  validate -> synthesize
4. Text flow:   validate -> translate

Client errors are raised during validation, before any provider is
contacted. Provider errors are tagged with the stage that produced them and
re-raised with their original kind and cause.
"""

import logging
import time
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

import httpx

from darija_translator.config import TranslatorConfig
from darija_translator.errors import (
    DarijaTranslatorError,
    InvalidInputError,
    ProviderCallFailedError,
    ProviderUnavailableError,
    TranscriptionFailedError,
)
from darija_translator.models import (
    ImageTranslationRequest,
    ImageTranslationResult,
    ReadAloudRequest,
    ReadAloudResult,
    SpeechTranslationRequest,
    SpeechTranslationResult,
    TranslationRequest,
    TranslationResult,
)
from darija_translator.ocr.extractor import TextExtractor
from darija_translator.speech.recognizer import SpeechRecognizer
from darija_translator.speech.synthesizer import SpeechSynthesizer
from darija_translator.translator.darija import DarijaTranslator, validate_language_pair
from darija_translator.utils import is_blank, normalize_base64, normalize_image_base64

logger = logging.getLogger(__name__)


class PipelineStage(Enum):
    VALIDATE = "validate"
    EXTRACT = "extract"
    TRANSCRIBE = "transcribe"
    TRANSLATE = "translate"
    SYNTHESIZE = "synthesize"
    DONE = "done"


@contextmanager
def pipeline_stage(stage: PipelineStage) -> Iterator[None]:
    """Tag pipeline errors raised inside the block with ``stage``."""
    start = time.time()
    try:
        yield
    except DarijaTranslatorError as e:
        if e.stage is None:
            e.stage = stage.value
        if e.is_client_error:
            logger.info("Rejected at %s: %s", stage.value, e.message)
        else:
            logger.error("Stage %s failed: %s", stage.value, e.message)
        raise
    except Exception as e:
        logger.exception("Unexpected error in stage %s", stage.value)
        raise ProviderCallFailedError(f"Unexpected error: {e}", stage=stage.value) from e
    logger.debug("Stage %s completed in %.2fs", stage.value, time.time() - start)


class ImagePipeline:
    """Validate -> Extract -> Translate."""

    def __init__(self, extractor: TextExtractor, translator: DarijaTranslator):
        self.extractor = extractor
        self.translator = translator

    def translate_image(self, request: ImageTranslationRequest) -> ImageTranslationResult:
        with pipeline_stage(PipelineStage.VALIDATE):
            if request is None or is_blank(request.image_base64):
                raise InvalidInputError("imageBase64 is required")
            normalize_image_base64(request.image_base64)
            validate_language_pair(request.source_language, request.target_language)

        with pipeline_stage(PipelineStage.EXTRACT):
            extracted = self.extractor.extract_text(
                request.image_base64,
                request.image_mime_type,
                request.source_language,
            )

        with pipeline_stage(PipelineStage.TRANSLATE):
            translation = self.translator.translate(
                extracted,
                request.source_language,
                request.target_language,
            )

        logger.info("Image translation done: %d chars extracted", len(extracted))
        return ImageTranslationResult(extracted_text=extracted, translation=translation)


class VoicePipeline:
    """Validate -> Transcribe -> Translate -> Synthesize, plus read-aloud."""

    def __init__(
        self,
        recognizer: SpeechRecognizer,
        translator: DarijaTranslator,
        synthesizer: SpeechSynthesizer,
    ):
        self.recognizer = recognizer
        self.translator = translator
        self.synthesizer = synthesizer

    def voice_to_voice(self, request: SpeechTranslationRequest) -> SpeechTranslationResult:
        with pipeline_stage(PipelineStage.VALIDATE):
            if request is None or is_blank(request.audio_base64):
                raise InvalidInputError("audioBase64 is required")
            normalize_base64(request.audio_base64, "audioBase64")
            validate_language_pair(request.source_language, request.target_language)
            if not self.recognizer.is_available():
                raise ProviderUnavailableError(
                    "Whisper API not available. Set OPENAI_API_KEY or WHISPER_API_URL."
                )

        with pipeline_stage(PipelineStage.TRANSCRIBE):
            transcript = self.recognizer.transcribe(
                request.audio_base64,
                request.source_language,
                request.audio_mime_type,
            )
            if is_blank(transcript):
                raise TranscriptionFailedError("Transcription returned no text")

        with pipeline_stage(PipelineStage.TRANSLATE):
            translated_text = self.translator.translate(
                transcript,
                request.source_language,
                request.target_language,
            )

        with pipeline_stage(PipelineStage.SYNTHESIZE):
            audio = self.synthesizer.synthesize(
                translated_text,
                request.target_language,
                request.voice,
            )

        logger.info("Voice translation done: %d chars transcribed", len(transcript))
        return SpeechTranslationResult(
            transcript=transcript,
            translated_text=translated_text,
            translated_audio=audio,
        )

    def read_aloud(self, request: ReadAloudRequest) -> ReadAloudResult:
        with pipeline_stage(PipelineStage.VALIDATE):
            if request is None or is_blank(request.text):
                raise InvalidInputError("text is required")

        with pipeline_stage(PipelineStage.SYNTHESIZE):
            audio = self.synthesizer.synthesize(request.text, None, request.voice)

        return ReadAloudResult(audio=audio)


class DarijaTranslationService:
    """
    Public operations of the translator, wired from one configuration.

    Usage:
        with DarijaTranslationService(TranslatorConfig.from_env()) as service:
            result = service.translate_text(TranslationRequest("Hello world"))
            print(result.translation)
    """

    def __init__(
        self,
        config: Optional[TranslatorConfig] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.config = config or TranslatorConfig.from_env()
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.Client()

        # Fails fast when no LLM is configured.
        try:
            self.translator = DarijaTranslator(self.config, http_client=self.http_client)
        except ProviderUnavailableError:
            self.close()
            raise
        self.extractor = TextExtractor(self.config, http_client=self.http_client)
        self.recognizer = SpeechRecognizer(self.config, http_client=self.http_client)
        self.synthesizer = SpeechSynthesizer(self.config, http_client=self.http_client)

        self.image_pipeline = ImagePipeline(self.extractor, self.translator)
        self.voice_pipeline = VoicePipeline(self.recognizer, self.translator, self.synthesizer)

        logger.info("DarijaTranslationService initialized")
        logger.info("Available providers: %s", [p.value for p in self.config.get_available_providers()])

    def translate_text(self, request: TranslationRequest) -> TranslationResult:
        with pipeline_stage(PipelineStage.VALIDATE):
            if request is None or is_blank(request.text):
                raise InvalidInputError("text is required")
            validate_language_pair(request.source_language, request.target_language)

        with pipeline_stage(PipelineStage.TRANSLATE):
            translation = self.translator.translate(
                request.text,
                request.source_language,
                request.target_language,
            )
        return TranslationResult(translation=translation)

    def translate_image(self, request: ImageTranslationRequest) -> ImageTranslationResult:
        return self.image_pipeline.translate_image(request)

    def voice_to_voice(self, request: SpeechTranslationRequest) -> SpeechTranslationResult:
        return self.voice_pipeline.voice_to_voice(request)

    def read_aloud(self, request: ReadAloudRequest) -> ReadAloudResult:
        return self.voice_pipeline.read_aloud(request)

    def close(self) -> None:
        if self._owns_client:
            self.http_client.close()

    def __enter__(self) -> "DarijaTranslationService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

"""Tests for OCR engines and the Tesseract -> Gemini extractor."""

import base64
import json
import os
from unittest.mock import MagicMock

import httpx
import pytest
import pytesseract
from darija_translator.config import OCRConfig, TranslatorConfig
from darija_translator.errors import (
    InvalidInputError,
    NoTextDetectedError,
    ProviderCallFailedError,
    ProviderResponseMalformedError,
)
from darija_translator.ocr.engine import GeminiVisionOCR, TesseractOCR
from darija_translator.ocr.extractor import TextExtractor
from darija_translator.providers.base import FallbackChain, ProviderResult

IMAGE_B64 = base64.b64encode(b"\x89PNG\r\n\x1a\nfake-image").decode()


def gemini_reply(*texts):
    return {"candidates": [{"content": {"parts": [{"text": t} for t in texts]}}]}


def gemini_client(handler, calls):
    def recording_handler(request):
        calls.append(request)
        return handler(request)
    return httpx.Client(transport=httpx.MockTransport(recording_handler))


class TestTesseractOCR:
    def setup_method(self):
        self.ocr = TesseractOCR(OCRConfig())

    def test_temp_file_exists_during_call_and_removed_after(self, monkeypatch):
        seen = {}

        def fake_image_to_string(path, lang=None, config=None):
            seen["path"] = path
            seen["exists"] = os.path.exists(path)
            seen["lang"] = lang
            seen["config"] = config
            return "  Hello world \n"

        monkeypatch.setattr(pytesseract, "image_to_string", fake_image_to_string)

        text = self.ocr.attempt(IMAGE_B64, "image/jpeg", "en")

        assert text == "Hello world"
        assert seen["exists"] is True
        assert seen["path"].endswith(".jpg")
        assert os.path.basename(seen["path"]).startswith("ocr_image_")
        assert seen["lang"] == "eng"
        assert seen["config"] == "--psm 3"
        assert not os.path.exists(seen["path"])

    def test_temp_file_removed_when_tesseract_fails(self, monkeypatch):
        seen = {}

        def failing(path, lang=None, config=None):
            seen["path"] = path
            raise pytesseract.TesseractError(1, "bad image")

        monkeypatch.setattr(pytesseract, "image_to_string", failing)

        result = self.ocr.run(IMAGE_B64, "image/png", None)
        assert result.is_successful is False
        assert isinstance(result.exception, ProviderCallFailedError)
        assert not os.path.exists(seen["path"])

    def test_configured_language_overrides_hint(self, monkeypatch):
        seen = {}

        def fake(path, lang=None, config=None):
            seen["lang"] = lang
            return "x"

        monkeypatch.setattr(pytesseract, "image_to_string", fake)
        TesseractOCR(OCRConfig(tesseract_lang="eng+ara")).attempt(IMAGE_B64, "image/png", "fr")
        assert seen["lang"] == "eng+ara"

    def test_missing_binary_is_recoverable(self, monkeypatch):
        def missing(path, lang=None, config=None):
            raise pytesseract.TesseractNotFoundError()

        monkeypatch.setattr(pytesseract, "image_to_string", missing)
        result = self.ocr.run(IMAGE_B64, "image/png", None)
        assert result.is_successful is False


class TestGeminiVisionOCR:
    def setup_method(self):
        self.config = OCRConfig(gemini_api_key="gk")
        self.calls = []

    def test_request_shape_and_text_join(self):
        client = gemini_client(
            lambda request: httpx.Response(200, json=gemini_reply("Line one", "  ", "Line two")),
            self.calls,
        )
        ocr = GeminiVisionOCR(self.config, http_client=client)

        assert ocr.attempt(IMAGE_B64, "image/png", "en") == "Line one\nLine two"

        request = self.calls[0]
        assert request.url.path == "/v1beta/models/gemini-1.5-flash:generateContent"
        assert request.url.params["key"] == "gk"
        parts = json.loads(request.content)["contents"][0]["parts"]
        assert "The text language is en." in parts[0]["text"]
        assert parts[1]["inline_data"] == {"mime_type": "image/png", "data": IMAGE_B64}

    def test_auto_language_has_no_hint(self):
        assert "language" not in GeminiVisionOCR.build_prompt("auto")
        assert "language" not in GeminiVisionOCR.build_prompt(None)

    @pytest.mark.parametrize("payload", [
        {},
        {"candidates": []},
        {"candidates": [{}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": [{"text": "Hello"}]}]},
        {"candidates": [{"content": {"parts": {"text": "Hello"}}}]},
        {"candidates": {"content": {}}},
    ])
    def test_malformed_responses(self, payload):
        client = gemini_client(lambda request: httpx.Response(200, json=payload), self.calls)
        ocr = GeminiVisionOCR(self.config, http_client=client)
        with pytest.raises(ProviderResponseMalformedError):
            ocr.attempt(IMAGE_B64, "image/png")

    def test_list_content_becomes_failed_result_in_chain(self):
        payload = {"candidates": [{"content": [{"text": "Hello"}]}]}
        client = gemini_client(lambda request: httpx.Response(200, json=payload), self.calls)
        chain = FallbackChain("extract", [GeminiVisionOCR(self.config, http_client=client)])

        outcome = chain.run(IMAGE_B64, "image/png", None)

        assert outcome.succeeded is False
        assert isinstance(outcome.last_exception, ProviderResponseMalformedError)

    def test_error_status(self):
        client = gemini_client(lambda request: httpx.Response(403, text="forbidden"), self.calls)
        ocr = GeminiVisionOCR(self.config, http_client=client)
        with pytest.raises(ProviderCallFailedError) as exc_info:
            ocr.attempt(IMAGE_B64, "image/png")
        assert exc_info.value.status_code == 403


class TestTextExtractor:
    def setup_method(self):
        self.local = MagicMock()
        self.local.name = "tesseract"
        self.cloud = MagicMock()
        self.cloud.name = "gemini_vision"

    def _result(self, provider, output="", error=None):
        exception = ProviderCallFailedError(error) if error else None
        return ProviderResult(provider=provider, output=output, error=error, exception=exception)

    def test_tesseract_text_skips_gemini(self):
        self.local.run.return_value = self._result("tesseract", "Hello world")
        extractor = TextExtractor(TranslatorConfig(), local=self.local, cloud=self.cloud)

        assert extractor.extract_text(IMAGE_B64, "image/png") == "Hello world"
        self.cloud.run.assert_not_called()

    def test_empty_tesseract_falls_back_to_gemini(self):
        self.local.run.return_value = self._result("tesseract", "   ")
        self.cloud.run.return_value = self._result("gemini_vision", "Hello")
        extractor = TextExtractor(TranslatorConfig(), local=self.local, cloud=self.cloud)

        assert extractor.extract_text("data:image/jpeg;base64," + IMAGE_B64) == "Hello"
        self.cloud.run.assert_called_once_with(IMAGE_B64, "image/jpeg", None)

    def test_empty_tesseract_without_gemini(self):
        self.local.run.return_value = self._result("tesseract", "")
        extractor = TextExtractor(TranslatorConfig(), local=self.local)

        with pytest.raises(NoTextDetectedError, match="GEMINI_API_KEY is not set"):
            extractor.extract_text(IMAGE_B64)

    def test_failed_tesseract_without_gemini(self):
        self.local.run.return_value = self._result("tesseract", error="tesseract not installed")
        extractor = TextExtractor(TranslatorConfig(), local=self.local)

        with pytest.raises(NoTextDetectedError, match="Tesseract OCR failed.*tesseract not installed"):
            extractor.extract_text(IMAGE_B64)

    def test_both_engines_fail(self):
        self.local.run.return_value = self._result("tesseract", "")
        self.cloud.run.return_value = self._result("gemini_vision", error="quota exceeded")
        extractor = TextExtractor(TranslatorConfig(), local=self.local, cloud=self.cloud)

        with pytest.raises(NoTextDetectedError) as exc_info:
            extractor.extract_text(IMAGE_B64)
        message = str(exc_info.value)
        assert "Tesseract: no text found" in message
        assert "Gemini Vision: quota exceeded" in message

    def test_invalid_base64_rejected_before_ocr(self):
        extractor = TextExtractor(TranslatorConfig(), local=self.local, cloud=self.cloud)
        with pytest.raises(InvalidInputError):
            extractor.extract_text("***not-base64***")
        self.local.run.assert_not_called()
        self.cloud.run.assert_not_called()

    def test_gemini_built_only_with_key(self):
        assert TextExtractor(TranslatorConfig()).cloud is None
        config = TranslatorConfig(ocr=OCRConfig(gemini_api_key="gk"))
        assert isinstance(TextExtractor(config).cloud, GeminiVisionOCR)

    def test_real_engines_fall_back_over_http(self, monkeypatch):
        monkeypatch.setattr(pytesseract, "image_to_string", lambda path, lang=None, config=None: "")
        calls = []
        client = gemini_client(lambda request: httpx.Response(200, json=gemini_reply("Salam")), calls)
        config = TranslatorConfig(ocr=OCRConfig(gemini_api_key="gk"))
        extractor = TextExtractor(config, http_client=client)

        assert extractor.extract_text(IMAGE_B64, "image/png") == "Salam"
        assert len(calls) == 1

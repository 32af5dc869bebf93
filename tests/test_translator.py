"""Tests for the Darija translator and its LLM backends."""

import json

import httpx
import pytest
from darija_translator.config import LLMConfig, TranslatorConfig
from darija_translator.errors import (
    InvalidInputError,
    ProviderCallFailedError,
    ProviderResponseMalformedError,
    ProviderUnavailableError,
    UnsupportedLanguagePairError,
)
from darija_translator.providers.base import BaseProvider
from darija_translator.translator.darija import DarijaTranslator, build_darija_prompt
from darija_translator.translator.local_llm import LocalLLM
from darija_translator.translator.mistral import MistralLLM

LOCAL_URL = "http://localhost:11434/api/generate"


class FakeLLM(BaseProvider):
    """Records prompts; returns a fixed output or raises."""

    def __init__(self, name, output="", error=None):
        self._name = name
        self.output = output
        self.error = error
        self.calls = []

    @property
    def name(self):
        return self._name

    def attempt(self, prompt):
        self.calls.append(prompt)
        if self.error is not None:
            raise self.error
        return self.output


def mock_client(handler, calls=None):
    def recording_handler(request):
        if calls is not None:
            calls.append(request)
        return handler(request)
    return httpx.Client(transport=httpx.MockTransport(recording_handler))


def chat_completion(content):
    return {
        "id": "cmpl-1",
        "object": "chat.completion",
        "created": 0,
        "model": "mistral-large-latest",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }


def both_configured(prefer_local=False):
    return TranslatorConfig(
        llm=LLMConfig(mistral_api_key="mk", local_url=LOCAL_URL, prefer_local=prefer_local)
    )


class TestPrompt:
    def test_prompt_embeds_text_and_persona(self):
        prompt = build_darija_prompt("Good morning")
        assert prompt.startswith("You are a native Moroccan speaker.")
        assert "Return ONLY the translation" in prompt
        assert prompt.endswith("Good morning")


class TestSelectionPolicy:
    def test_no_provider_fails_at_construction(self):
        with pytest.raises(ProviderUnavailableError):
            DarijaTranslator(TranslatorConfig())

    def test_cloud_success_never_calls_local(self):
        cloud = FakeLLM("mistral", output="Salam")
        local = FakeLLM("local_llm", output="unused")
        translator = DarijaTranslator(both_configured(), cloud=cloud, local=local)

        assert translator.translate("Hello") == "Salam"
        assert len(cloud.calls) == 1
        assert local.calls == []

    def test_cloud_failure_falls_back_to_local_once(self):
        cloud = FakeLLM("mistral", error=ProviderCallFailedError("503", provider="mistral"))
        local = FakeLLM("local_llm", output="Salam")
        translator = DarijaTranslator(both_configured(), cloud=cloud, local=local)

        assert translator.translate("Hello") == "Salam"
        assert len(cloud.calls) == 1
        assert len(local.calls) == 1

    def test_cloud_failure_without_local_propagates(self):
        error = ProviderCallFailedError("Mistral API error: 500", provider="mistral", status_code=500)
        cloud = FakeLLM("mistral", error=error)
        config = TranslatorConfig(llm=LLMConfig(mistral_api_key="mk"))
        translator = DarijaTranslator(config, cloud=cloud)

        with pytest.raises(ProviderCallFailedError) as exc_info:
            translator.translate("Hello")
        assert exc_info.value is error

    def test_both_fail_raises_local_error(self):
        cloud = FakeLLM("mistral", error=ProviderCallFailedError("down", provider="mistral"))
        local = FakeLLM("local_llm", error=ProviderResponseMalformedError("bad", provider="local_llm"))
        translator = DarijaTranslator(both_configured(), cloud=cloud, local=local)

        with pytest.raises(ProviderResponseMalformedError):
            translator.translate("Hello")
        assert len(local.calls) == 1

    def test_prefer_local_uses_local_only(self):
        cloud = FakeLLM("mistral", output="cloud")
        local = FakeLLM("local_llm", error=ProviderCallFailedError("down"))
        translator = DarijaTranslator(both_configured(prefer_local=True), cloud=cloud, local=local)

        with pytest.raises(ProviderCallFailedError):
            translator.translate("Hello")
        assert cloud.calls == []
        assert len(local.calls) == 1

    def test_prefer_local_without_local_uses_cloud(self):
        config = TranslatorConfig(llm=LLMConfig(mistral_api_key="mk", prefer_local=True))
        cloud = FakeLLM("mistral", output="Salam")
        translator = DarijaTranslator(config, cloud=cloud)
        assert translator.translate("Hello") == "Salam"
        assert translator.chain.provider_names == ["mistral"]

    def test_only_local_configured(self):
        config = TranslatorConfig(llm=LLMConfig(local_url=LOCAL_URL))
        translator = DarijaTranslator(config)
        assert translator.cloud is None
        assert translator.chain.provider_names == ["local_llm"]


class TestValidation:
    def setup_method(self):
        self.cloud = FakeLLM("mistral", output="Salam")
        self.local = FakeLLM("local_llm", output="Salam")
        self.translator = DarijaTranslator(both_configured(), cloud=self.cloud, local=self.local)

    @pytest.mark.parametrize("source,target", [
        ("fr", "ary"),
        ("auto", "ary"),
        ("en", "ar"),
        ("en", "fr"),
        ("ary", "en"),
    ])
    def test_unsupported_pair_makes_no_calls(self, source, target):
        with pytest.raises(UnsupportedLanguagePairError):
            self.translator.translate("Hello", source, target)
        assert self.cloud.calls == []
        assert self.local.calls == []

    def test_blank_languages_default(self):
        assert self.translator.translate("Hello", "", None) == "Salam"

    def test_blank_text_rejected(self):
        with pytest.raises(InvalidInputError):
            self.translator.translate("   ")
        assert self.cloud.calls == []


class TestLocalLLM:
    def test_local_only_end_to_end(self):
        calls = []
        client = mock_client(
            lambda request: httpx.Response(200, json={"response": "Salam l3alam"}), calls
        )
        config = TranslatorConfig(llm=LLMConfig(local_url=LOCAL_URL, local_model="llama3"))
        translator = DarijaTranslator(config, http_client=client)

        assert translator.translate("Hello world", "en", "ary") == "Salam l3alam"
        assert len(calls) == 1
        assert str(calls[0].url) == LOCAL_URL
        body = json.loads(calls[0].content)
        assert body["model"] == "llama3"
        assert body["stream"] is False
        assert body["prompt"].endswith("Hello world")

    def test_text_field_accepted(self):
        client = mock_client(lambda request: httpx.Response(200, json={"text": " Salam "}))
        llm = LocalLLM(LLMConfig(local_url=LOCAL_URL), http_client=client)
        assert llm.attempt("prompt") == "Salam"

    def test_missing_field_is_malformed(self):
        client = mock_client(lambda request: httpx.Response(200, json={"output": "Salam"}))
        llm = LocalLLM(LLMConfig(local_url=LOCAL_URL), http_client=client)
        with pytest.raises(ProviderResponseMalformedError):
            llm.attempt("prompt")

    def test_non_json_is_malformed(self):
        client = mock_client(lambda request: httpx.Response(200, text="<html>"))
        llm = LocalLLM(LLMConfig(local_url=LOCAL_URL), http_client=client)
        with pytest.raises(ProviderResponseMalformedError):
            llm.attempt("prompt")

    def test_non_2xx_is_call_failure(self):
        client = mock_client(lambda request: httpx.Response(502, text="bad gateway"))
        llm = LocalLLM(LLMConfig(local_url=LOCAL_URL), http_client=client)
        with pytest.raises(ProviderCallFailedError) as exc_info:
            llm.attempt("prompt")
        assert exc_info.value.status_code == 502
        assert exc_info.value.body == "bad gateway"

    def test_network_error_recorded_as_result(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        llm = LocalLLM(LLMConfig(local_url=LOCAL_URL), http_client=mock_client(handler))
        result = llm.run("prompt")
        assert result.is_successful is False
        assert isinstance(result.exception, ProviderCallFailedError)
        assert isinstance(result.exception.__cause__, httpx.ConnectError)


class TestMistralLLM:
    def test_chat_completion_request(self):
        calls = []
        client = mock_client(lambda request: httpx.Response(200, json=chat_completion(" Salam ")), calls)
        llm = MistralLLM(LLMConfig(mistral_api_key="mk"), http_client=client)

        assert llm.attempt("prompt text") == "Salam"
        assert len(calls) == 1
        request = calls[0]
        assert str(request.url) == "https://api.mistral.ai/v1/chat/completions"
        assert request.headers["authorization"] == "Bearer mk"
        body = json.loads(request.content)
        assert body["model"] == "mistral-large-latest"
        assert body["temperature"] == 0.2
        assert body["messages"] == [{"role": "user", "content": "prompt text"}]

    def test_error_status_is_call_failure(self):
        calls = []
        client = mock_client(
            lambda request: httpx.Response(500, json={"message": "overloaded"}), calls
        )
        llm = MistralLLM(LLMConfig(mistral_api_key="mk"), http_client=client)
        with pytest.raises(ProviderCallFailedError) as exc_info:
            llm.attempt("prompt")
        assert exc_info.value.status_code == 500
        # SDK retries are disabled
        assert len(calls) == 1

    def test_empty_choices_is_malformed(self):
        payload = chat_completion("x")
        payload["choices"] = []
        client = mock_client(lambda request: httpx.Response(200, json=payload))
        llm = MistralLLM(LLMConfig(mistral_api_key="mk"), http_client=client)
        with pytest.raises(ProviderResponseMalformedError):
            llm.attempt("prompt")

    def test_cloud_http_failure_falls_back_to_local_http(self):
        calls = []

        def handler(request):
            if request.url.host == "api.mistral.ai":
                return httpx.Response(401, json={"message": "Unauthorized"})
            return httpx.Response(200, json={"response": "Salam"})

        config = both_configured()
        translator = DarijaTranslator(config, http_client=mock_client(handler, calls))
        assert translator.translate("Hello") == "Salam"
        assert [c.url.host for c in calls] == ["api.mistral.ai", "localhost"]

"""
Secondary translation backend: a locally hosted LLM.

Speaks the Ollama-style ``generate`` protocol: ``{model, prompt, stream}``
in, ``response`` (or ``text``) out.
"""

import logging
from typing import Optional

import httpx

from darija_translator.config import LLMConfig
from darija_translator.errors import ProviderCallFailedError, ProviderResponseMalformedError
from darija_translator.providers.base import BaseProvider
from darija_translator.utils import build_http_client

logger = logging.getLogger(__name__)


class LocalLLM(BaseProvider):
    """Non-streaming completion against a local LLM endpoint."""

    def __init__(self, config: LLMConfig, http_client: Optional[httpx.Client] = None):
        self.url = config.local_url
        self.model = config.local_model
        self.timeout = config.timeout_seconds
        self.client = build_http_client(self.timeout, http_client)

    @property
    def name(self) -> str:
        return "local_llm"

    def attempt(self, prompt: str) -> str:
        logger.info("Local LLM translation: sending %d chars to %s", len(prompt), self.url)

        response = self.client.post(
            self.url,
            json={"model": self.model, "prompt": prompt, "stream": False},
            timeout=self.timeout,
        )
        if not response.is_success:
            raise ProviderCallFailedError(
                f"Local LLM error: {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError:
            raise ProviderResponseMalformedError(
                "Local LLM returned a non-JSON body", provider=self.name
            )

        content = None
        if isinstance(data, dict):
            for key in ("response", "text"):
                if isinstance(data.get(key), str) and data[key].strip():
                    content = data[key]
                    break

        if content is None:
            raise ProviderResponseMalformedError(
                "Local LLM response has no 'response' or 'text' field", provider=self.name
            )

        translated = content.strip()
        logger.info("Local LLM translation: received %d chars", len(translated))
        return translated

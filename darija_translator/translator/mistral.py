"""
Primary translation backend: Mistral cloud LLM.

Mistral exposes an OpenAI-compatible chat completions API, so the OpenAI
client is used with Mistral's base URL. SDK-level retries are disabled:
the only retry in the translation stage is the cloud -> local fallback.
"""

import logging
from typing import Optional

import httpx
import openai
from openai import OpenAI

from darija_translator.config import LLMConfig
from darija_translator.errors import ProviderCallFailedError, ProviderResponseMalformedError
from darija_translator.providers.base import BaseProvider

logger = logging.getLogger(__name__)


class MistralLLM(BaseProvider):
    """Chat-completions call against the Mistral API."""

    def __init__(
        self,
        config: LLMConfig,
        http_client: Optional[httpx.Client] = None,
        client: Optional[OpenAI] = None,
    ):
        self.config = config
        self.model = config.mistral_model
        self.client = client or OpenAI(
            api_key=config.mistral_api_key,
            base_url=config.mistral_base_url,
            timeout=config.timeout_seconds,
            max_retries=0,
            http_client=http_client,
        )

    @property
    def name(self) -> str:
        return "mistral"

    def attempt(self, prompt: str) -> str:
        logger.info("Mistral translation: sending %d chars to %s", len(prompt), self.model)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=self.config.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.APIStatusError as e:
            raise ProviderCallFailedError(
                f"Mistral API error: {e.status_code}",
                provider=self.name,
                status_code=e.status_code,
                body=e.response.text,
            ) from e
        except openai.APIError as e:
            raise ProviderCallFailedError(
                f"Mistral call failed: {e}", provider=self.name
            ) from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            content = None

        if not isinstance(content, str) or not content.strip():
            raise ProviderResponseMalformedError(
                "Mistral response has no choices[0].message.content", provider=self.name
            )

        translated = content.strip()
        logger.info("Mistral translation: received %d chars", len(translated))
        return translated

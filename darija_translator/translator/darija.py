"""
English -> Darija translator with cloud/local provider selection.

Selection policy:
1. "prefer local" set and local configured  -> local only
2. cloud not configured                     -> local only
3. otherwise                                -> cloud, then local once if
                                               configured and cloud failed
"""

import logging
from typing import Optional

import httpx

from darija_translator.config import Provider, TranslatorConfig
from darija_translator.errors import (
    InvalidInputError,
    ProviderCallFailedError,
    ProviderUnavailableError,
    UnsupportedLanguagePairError,
)
from darija_translator.languages import is_darija, is_english
from darija_translator.providers.base import BaseProvider, FallbackChain
from darija_translator.translator.local_llm import LocalLLM
from darija_translator.translator.mistral import MistralLLM
from darija_translator.utils import is_blank

logger = logging.getLogger(__name__)

DARIJA_PROMPT = (
    "You are a native Moroccan speaker.\n\n"
    "Translate the following English text into Moroccan Arabic (Darija). "
    "Return ONLY the translation, no explanations.\n\n"
    "{text}"
)


def build_darija_prompt(text: str) -> str:
    return DARIJA_PROMPT.format(text=text)


def validate_language_pair(source_language: Optional[str], target_language: Optional[str]) -> None:
    """Raise UnsupportedLanguagePairError unless the pair is English -> Darija."""
    if not is_english(source_language):
        raise UnsupportedLanguagePairError(
            f"Only English source is supported (got {source_language!r})"
        )
    if not is_darija(target_language):
        raise UnsupportedLanguagePairError(
            f"Only Darija target is supported (got {target_language!r})"
        )


class DarijaTranslator:
    """
    Translates English text to Moroccan Arabic.

    Usage:
        translator = DarijaTranslator(TranslatorConfig.from_env())
        translator.translate("Hello world", "en", "ary")
    """

    def __init__(
        self,
        config: TranslatorConfig,
        cloud: Optional[BaseProvider] = None,
        local: Optional[BaseProvider] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.config = config
        if cloud is None and config.is_configured(Provider.MISTRAL):
            cloud = MistralLLM(config.llm, http_client=http_client)
        if local is None and config.is_configured(Provider.LOCAL_LLM):
            local = LocalLLM(config.llm, http_client=http_client)

        if cloud is None and local is None:
            raise ProviderUnavailableError(
                "No translation provider available. "
                "Set MISTRAL_API_KEY or LOCAL_LLM_URL."
            )

        self.cloud = cloud
        self.local = local
        self.chain = FallbackChain("translate", self._select_providers())
        logger.info("Darija translator ready: %s", self.chain.provider_names)

    def _select_providers(self) -> list[BaseProvider]:
        if self.config.llm.prefer_local and self.local is not None:
            return [self.local]
        if self.cloud is None:
            return [self.local]
        if self.local is not None:
            return [self.cloud, self.local]
        return [self.cloud]

    def translate(
        self,
        text: str,
        source_language: Optional[str] = "en",
        target_language: Optional[str] = "ary",
    ) -> str:
        """Translate ``text``; client errors are raised before any provider call."""
        if is_blank(text):
            raise InvalidInputError("text is required")
        validate_language_pair(source_language, target_language)

        logger.info("Translating %d chars to Darija", len(text))
        outcome = self.chain.run(build_darija_prompt(text))
        if outcome.succeeded:
            return outcome.result.output.strip()

        error = outcome.last_exception
        if error is None:
            error = ProviderCallFailedError("Translation providers returned no text")
        raise error

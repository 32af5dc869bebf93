"""
Base provider interface, per-attempt results and the fallback chain.

Every external service (LLM, OCR engine, speech synthesiser) is wrapped in
a ``BaseProvider`` strategy. ``run`` never raises for expected provider
failures: it records them in a ``ProviderResult`` that the ``FallbackChain``
inspects before moving on to the next tier.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import httpx

from darija_translator.errors import DarijaTranslatorError, ProviderCallFailedError

logger = logging.getLogger(__name__)


@dataclass
class ProviderResult:
    """Outcome of a single provider attempt."""
    provider: str
    output: str
    latency_seconds: float = 0.0
    metadata: dict = field(default_factory=dict)
    error: Optional[str] = None
    exception: Optional[Exception] = None

    @property
    def is_successful(self) -> bool:
        return self.error is None and bool(self.output.strip())


class BaseProvider(ABC):
    """Abstract base for all provider strategies."""

    # Failures that make the chain move to the next tier. Anything else is
    # a programming fault and propagates.
    recoverable_errors: tuple = (DarijaTranslatorError, httpx.HTTPError, OSError)

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name used in logs and error messages."""
        ...

    @abstractmethod
    def attempt(self, *args: Any, **kwargs: Any) -> str:
        """Call the provider once and return its textual output.

        Raises on any failure; no retries.
        """
        ...

    def run(self, *args: Any, **kwargs: Any) -> ProviderResult:
        """Attempt the provider and record latency; failures become results."""
        start = time.time()
        try:
            output = self.attempt(*args, **kwargs)
            result = ProviderResult(provider=self.name, output=output or "")
        except self.recoverable_errors as e:
            if not isinstance(e, DarijaTranslatorError):
                wrapped = ProviderCallFailedError(
                    f"{self.name} call failed: {e}", provider=self.name
                )
                wrapped.__cause__ = e
                e = wrapped
            result = ProviderResult(
                provider=self.name,
                output="",
                error=str(e),
                exception=e,
            )
        result.latency_seconds = time.time() - start
        return result


@dataclass
class FallbackOutcome:
    """Every attempt made by a chain, and the winning one if any."""
    result: Optional[ProviderResult]
    attempts: list[ProviderResult] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.result is not None

    @property
    def last_exception(self) -> Optional[Exception]:
        for attempt in reversed(self.attempts):
            if attempt.exception is not None:
                return attempt.exception
        return None


class FallbackChain:
    """
    Ordered list of provider strategies tried until one succeeds.

    Each provider is attempted at most once per call; the chain stops at
    the first successful result.
    """

    def __init__(self, stage: str, providers: Sequence[BaseProvider]):
        if not providers:
            raise ValueError(f"Fallback chain for '{stage}' needs at least one provider")
        self.stage = stage
        self.providers = list(providers)

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self.providers]

    def run(self, *args: Any, **kwargs: Any) -> FallbackOutcome:
        attempts: list[ProviderResult] = []

        for index, provider in enumerate(self.providers):
            result = provider.run(*args, **kwargs)
            attempts.append(result)

            if result.is_successful:
                logger.info(
                    "%s: provider %s succeeded in %.2fs",
                    self.stage,
                    provider.name,
                    result.latency_seconds,
                )
                return FallbackOutcome(result=result, attempts=attempts)

            remaining = self.providers[index + 1:]
            logger.warning(
                "%s: provider %s failed (%s)%s",
                self.stage,
                provider.name,
                result.error or "empty output",
                f", falling back to {remaining[0].name}" if remaining else "",
            )

        logger.error("%s: all providers failed: %s", self.stage, self.provider_names)
        return FallbackOutcome(result=None, attempts=attempts)

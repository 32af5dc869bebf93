"""
Provider strategies and the ordered fallback chain that drives them.
"""

from darija_translator.providers.base import (
    BaseProvider,
    FallbackChain,
    FallbackOutcome,
    ProviderResult,
)

__all__ = ["BaseProvider", "FallbackChain", "FallbackOutcome", "ProviderResult"]

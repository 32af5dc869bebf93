"""
Translation subsystem: Mistral cloud LLM with local LLM fallback.
"""

__all__ = [
    "DarijaTranslator",
    "LocalLLM",
    "MistralLLM",
    "build_darija_prompt",
    "validate_language_pair",
]


def __getattr__(name: str):
    if name in ("DarijaTranslator", "build_darija_prompt", "validate_language_pair"):
        from darija_translator.translator import darija
        return getattr(darija, name)
    if name == "LocalLLM":
        from darija_translator.translator.local_llm import LocalLLM
        return LocalLLM
    if name == "MistralLLM":
        from darija_translator.translator.mistral import MistralLLM
        return MistralLLM
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

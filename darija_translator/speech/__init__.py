"""
Speech subsystem: Whisper transcription and tiered speech synthesis.
"""


def __getattr__(name: str):
    if name == "SpeechRecognizer":
        from darija_translator.speech.recognizer import SpeechRecognizer
        return SpeechRecognizer
    if name in (
        "SpeechSynthesizer",
        "CustomEndpointTTS",
        "EdgeProxyTTS",
        "GoogleCloudTTS",
        "LocalStubTTS",
    ):
        from darija_translator.speech import synthesizer
        return getattr(synthesizer, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "SpeechRecognizer",
    "SpeechSynthesizer",
    "CustomEndpointTTS",
    "EdgeProxyTTS",
    "GoogleCloudTTS",
    "LocalStubTTS",
]

"""
OCR subsystem: Tesseract with a Gemini vision fallback.
"""


def __getattr__(name: str):
    if name == "TextExtractor":
        from darija_translator.ocr.extractor import TextExtractor
        return TextExtractor
    if name in ("TesseractOCR", "GeminiVisionOCR"):
        from darija_translator.ocr import engine
        return getattr(engine, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["TextExtractor", "TesseractOCR", "GeminiVisionOCR"]

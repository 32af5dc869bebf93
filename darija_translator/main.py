"""
CLI entry point for English -> Darija translation.

Usage:
    # Translate text
    python -m darija_translator.main translate "Hello world"

    # Extract text from an image and translate it
    python -m darija_translator.main image sign.jpg

    # Voice to voice, saving the Darija audio
    python -m darija_translator.main voice question.webm -o answer.mp3

    # Read text aloud
    python -m darija_translator.main read-aloud "Salam" -o salam.mp3
"""

import argparse
import base64
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Optional

from darija_translator.config import TranslatorConfig
from darija_translator.errors import DarijaTranslatorError
from darija_translator.models import (
    ImageTranslationRequest,
    ReadAloudRequest,
    SpeechTranslationRequest,
    TranslationRequest,
)
from darija_translator.pipeline import DarijaTranslationService
from darija_translator.utils import setup_logging

logger = logging.getLogger(__name__)

EXIT_PROVIDER_ERROR = 1
EXIT_CLIENT_ERROR = 2


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="darija-translator",
        description="Translate English text, images or speech into Moroccan Arabic (Darija).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s translate "Where is the train station?"
  %(prog)s image menu.png --source-lang en
  %(prog)s voice recording.webm -o darija.mp3 --voice male

Environment variables:
  MISTRAL_API_KEY      - Mistral cloud LLM key
  LOCAL_LLM_URL        - Local LLM generate endpoint (fallback or preferred)
  LLM_PREFER_LOCAL     - Use the local LLM first when set to true
  GEMINI_API_KEY       - Gemini vision OCR fallback
  OPENAI_API_KEY       - Whisper speech-to-text
  WHISPER_API_URL      - Local Whisper-compatible endpoint
  TTS_API_URL          - Custom text-to-speech endpoint
  GOOGLE_TTS_API_KEY   - Google Cloud Text-to-Speech key
        """,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    translate = subparsers.add_parser("translate", help="Translate English text")
    translate.add_argument("text", type=str, help="English text to translate")

    image = subparsers.add_parser("image", help="Extract text from an image and translate it")
    image.add_argument("path", type=str, help="Image file")

    voice = subparsers.add_parser("voice", help="Translate spoken English into spoken Darija")
    voice.add_argument("path", type=str, help="Audio file (wav, mp3, webm, ogg, m4a)")

    read_aloud = subparsers.add_parser("read-aloud", help="Synthesize speech for text")
    read_aloud.add_argument("text", type=str, help="Text to read aloud")

    for sub in (translate, image, voice):
        sub.add_argument("--source-lang", type=str, default="en", help="Source language (default: en)")
        sub.add_argument("--target-lang", type=str, default="ary", help="Target language (default: ary)")
    for sub in (voice, read_aloud):
        sub.add_argument("--voice", type=str, default="standard", help="Voice style: standard or male")
        sub.add_argument(
            "-o", "--output",
            type=str,
            default=None,
            help="Write the decoded audio to this file",
        )

    return parser.parse_args(argv)


def _read_base64(path: str) -> tuple[str, Optional[str]]:
    data = Path(path).read_bytes()
    mime_type, _ = mimetypes.guess_type(path)
    return base64.b64encode(data).decode("ascii"), mime_type


def _write_audio(audio_base64: str, output: Optional[str]) -> None:
    if not output:
        return
    Path(output).write_bytes(base64.b64decode(audio_base64))
    logger.info("Audio saved to: %s", output)


def run(args: argparse.Namespace, service: DarijaTranslationService) -> dict:
    if args.command == "translate":
        result = service.translate_text(
            TranslationRequest(args.text, args.source_lang, args.target_lang)
        )
        return result.to_dict()

    if args.command == "image":
        image_base64, mime_type = _read_base64(args.path)
        result = service.translate_image(
            ImageTranslationRequest(image_base64, mime_type, args.source_lang, args.target_lang)
        )
        return result.to_dict()

    if args.command == "voice":
        audio_base64, mime_type = _read_base64(args.path)
        result = service.voice_to_voice(
            SpeechTranslationRequest(
                audio_base64, mime_type, args.source_lang, args.target_lang, args.voice
            )
        )
        _write_audio(result.translated_audio, args.output)
        return result.to_dict()

    result = service.read_aloud(ReadAloudRequest(args.text, args.voice))
    _write_audio(result.audio, args.output)
    return result.to_dict()


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        with DarijaTranslationService(TranslatorConfig.from_env()) as service:
            output = run(args, service)
    except DarijaTranslatorError as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CLIENT_ERROR if e.is_client_error else EXIT_PROVIDER_ERROR

    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

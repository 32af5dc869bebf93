"""
Utility functions for the Darija translation pipelines.
"""

import base64
import binascii
import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Iterator, Optional, Union

import httpx

from darija_translator.errors import InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME_TYPE = "image/png"

IMAGE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
}

AUDIO_EXTENSIONS = {
    "audio/webm": ".webm",
    "audio/ogg": ".ogg",
    "audio/opus": ".ogg",
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/mp4": ".m4a",
    "audio/m4a": ".m4a",
    "audio/x-m4a": ".m4a",
    "audio/wav": ".wav",
    "audio/wave": ".wav",
    "audio/x-wav": ".wav",
}

AUDIO_MEDIA_TYPES = {
    ".wav": "audio/wav",
    ".mp3": "audio/mpeg",
    ".webm": "audio/webm",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
}


def setup_logging(level: int = logging.INFO) -> None:
    """Configure logging for the pipelines."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def build_http_client(
    timeout: Union[float, httpx.Timeout],
    client: Optional[httpx.Client] = None,
) -> httpx.Client:
    """Return the injected client, or a new blocking client with a fixed timeout."""
    if client is not None:
        return client
    return httpx.Client(timeout=timeout)


def strip_mime_parameters(mime_type: Optional[str]) -> Optional[str]:
    """``"image/jpeg; q=1"`` -> ``"image/jpeg"``; blank -> None."""
    if is_blank(mime_type):
        return None
    return mime_type.split(";", 1)[0].strip().lower()


def strip_data_uri(payload: str) -> str:
    """Drop a leading ``data:...,`` header, keeping only the base64 body."""
    trimmed = payload.strip()
    if trimmed.startswith("data:"):
        comma = trimmed.find(",")
        if -1 < comma < len(trimmed) - 1:
            return trimmed[comma + 1:].strip()
    return trimmed


def decode_base64(payload: str, field_name: str) -> bytes:
    """Strictly decode base64, raising InvalidInputError on bad input."""
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInputError(f"{field_name} must be valid base64")


def normalize_base64(payload: Optional[str], field_name: str) -> str:
    """Strip any data-URI prefix and validate that the rest decodes."""
    if is_blank(payload):
        raise InvalidInputError(f"{field_name} is required")
    body = strip_data_uri(payload)
    decode_base64(body, field_name)
    return body


def normalize_image_base64(image_base64: Optional[str]) -> str:
    return normalize_base64(image_base64, "imageBase64")


def normalize_image_mime_type(mime_type: Optional[str], image_base64: Optional[str] = None) -> str:
    """
    Resolve the image MIME type.

    Explicit ``image/*`` types win; otherwise the type is sniffed from a
    ``data:image/...;`` prefix, and finally defaults to ``image/png``.
    """
    candidate = strip_mime_parameters(mime_type)
    if candidate and candidate.startswith("image/"):
        return candidate

    if image_base64 and image_base64.strip().startswith("data:"):
        header = image_base64.strip()
        colon = header.find(":")
        semicolon = header.find(";")
        if colon > -1 and semicolon > colon:
            sniffed = header[colon + 1:semicolon].strip().lower()
            if sniffed.startswith("image/"):
                return sniffed

    return DEFAULT_IMAGE_MIME_TYPE


def image_extension(mime_type: Optional[str]) -> str:
    return IMAGE_EXTENSIONS.get(strip_mime_parameters(mime_type) or "", ".png")


def audio_extension(mime_type: Optional[str]) -> str:
    return AUDIO_EXTENSIONS.get(strip_mime_parameters(mime_type) or "", ".wav")


def audio_media_type(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    return AUDIO_MEDIA_TYPES.get(ext, "application/octet-stream")


@contextmanager
def scoped_temp_file(data: bytes, prefix: str, suffix: str) -> Iterator[str]:
    """
    Write ``data`` to a fresh temporary file and yield its path.

    The file is removed when the block exits, whether normally or through
    an exception.
    """
    fd, path = tempfile.mkstemp(prefix=prefix, suffix=suffix)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        yield path
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove temporary file %s: %s", path, e)

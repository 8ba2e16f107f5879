from __future__ import annotations

import io
import mimetypes
from pathlib import PurePosixPath

from PIL import Image, UnidentifiedImageError

from clouddedup.core.errors import DecodeError, UnsupportedFormat

IMAGE_EXTENSIONS = {
    ".jpg",
    ".jpeg",
    ".png",
    ".bmp",
    ".gif",
    ".tif",
    ".tiff",
    ".webp",
}


def is_image(path: str, content_type: str | None = None) -> bool:
    if content_type and content_type.lower().startswith("image/"):
        return True
    extension = PurePosixPath(path).suffix.lower()
    if extension in IMAGE_EXTENSIONS:
        return True
    guessed, _encoding = mimetypes.guess_type(path)
    return bool(guessed and guessed.startswith("image/"))


def decode_dimensions(data: bytes) -> tuple[int, int]:
    """Return ``(width, height)`` read from the image header."""
    if not data:
        raise DecodeError("Image content is empty")
    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
    except UnidentifiedImageError as exc:
        raise UnsupportedFormat("Unsupported image format") from exc
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Failed to decode image: {exc}") from exc
    return int(width), int(height)


__all__ = ["IMAGE_EXTENSIONS", "decode_dimensions", "is_image"]

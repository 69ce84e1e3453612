"""Image upload validation and decoding."""

import asyncio
import io
import logging

from PIL import Image, UnidentifiedImageError

from menu_extractor_service.errors import ColorDerivationError, InputError
from menu_extractor_service.models.pipeline_models import (
    MAX_IMAGE_BYTES,
    SUPPORTED_MIME_TYPES,
    ImageUpload,
)

logger = logging.getLogger(__name__)

_MAGIC_NUMBERS: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def sniff_mime_type(data: bytes) -> str | None:
    """Detect the image type from its leading bytes.

    Args:
        data: Raw image bytes

    Returns:
        One of the supported MIME types, or None if unrecognized
    """
    for magic, mime_type in _MAGIC_NUMBERS:
        if data.startswith(magic):
            return mime_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def validate_upload(upload: ImageUpload, max_bytes: int = MAX_IMAGE_BYTES) -> ImageUpload:
    """Check an upload's size and type before it enters the pipeline.

    When the declared type is missing or generic, the sniffed type is used.

    Args:
        upload: The uploaded image
        max_bytes: Maximum accepted size in bytes

    Returns:
        The upload, with its MIME type resolved

    Raises:
        InputError: If the image is empty, too large, or not PNG/JPEG/GIF/WEBP
    """
    if upload.size == 0:
        raise InputError("The image file is empty.")
    if upload.size > max_bytes:
        raise InputError(
            f"The image is too large ({upload.size} bytes). "
            f"Maximum size is {max_bytes // (1024 * 1024)} MB."
        )

    mime_type = upload.mime_type.lower().strip()
    if mime_type not in SUPPORTED_MIME_TYPES:
        sniffed = sniff_mime_type(upload.data)
        if sniffed is None or mime_type not in ("", "application/octet-stream"):
            raise InputError(
                f"Unsupported image type '{upload.mime_type}'. Use PNG, JPEG, GIF or WEBP."
            )
        mime_type = sniffed

    if mime_type != upload.mime_type:
        return upload.model_copy(update={"mime_type": mime_type})
    return upload


def decode_image(data: bytes) -> Image.Image:
    """Fully decode image bytes into an RGB bitmap.

    Args:
        data: Raw image bytes

    Returns:
        Decoded RGB image

    Raises:
        ColorDerivationError: If the bytes cannot be decoded
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return image.convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ColorDerivationError(f"image could not be decoded: {e}") from e


async def load_image(data: bytes) -> Image.Image:
    """Decode image bytes without blocking the event loop."""
    image = await asyncio.to_thread(decode_image, data)
    logger.debug(f"Decoded image of size {image.size}")
    return image

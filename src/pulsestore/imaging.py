"""Derived image assets: thumbnails and the inline-image compression policy."""

from __future__ import annotations

import io
import logging
import struct

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

DEFAULT_THUMBNAIL_DIMENSION = 200
DEFAULT_PROFILE_IMAGE_DIMENSION = 300
DEFAULT_QUALITY = 70

# Pillow plugins signal malformed streams with SyntaxError, EOFError or struct.error.
_DECODE_ERRORS = (
    UnidentifiedImageError,
    OSError,
    ValueError,
    SyntaxError,
    EOFError,
    struct.error,
    Image.DecompressionBombError,
)


def _decode(data: bytes) -> Image.Image | None:
    """Decode bytes into a fully loaded, orientation-corrected image."""
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as opened:
            opened.load()
            image = ImageOps.exif_transpose(opened)
    except _DECODE_ERRORS as exc:
        logger.debug("Payload is not a decodable image: %s", exc)
        return None
    return image


def _to_rgb(image: Image.Image) -> Image.Image:
    """Flatten transparency onto white and convert to RGB for JPEG output."""
    if image.mode == "RGB":
        return image
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return image.convert("RGB")


def _encode_jpeg(image: Image.Image, quality: int) -> bytes:
    buf = io.BytesIO()
    _to_rgb(image).save(buf, format="JPEG", quality=quality, optimize=True)
    return buf.getvalue()


def scaled_size(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Return ``(width, height)`` uniformly scaled to fit ``max_dimension``.

    The scale factor is ``min(max/width, max/height)`` clamped to 1, so images
    already within bounds keep their size. Each side is at least one pixel.
    """
    if max_dimension <= 0:
        msg = "max_dimension must be > 0."
        raise ValueError(msg)
    scale = min(max_dimension / width, max_dimension / height, 1.0)
    return max(1, round(width * scale)), max(1, round(height * scale))


def image_dimensions(data: bytes) -> tuple[int, int] | None:
    """Return ``(width, height)`` of an encoded image, or ``None`` if undecodable."""
    image = _decode(data)
    if image is None:
        return None
    return image.size


def _render(image: Image.Image, target: tuple[int, int], quality: int) -> bytes | None:
    """Resize to ``target`` when needed and encode; ``None`` when pixel data turns out unusable."""
    try:
        if target != image.size:
            image = image.resize(target, Image.Resampling.LANCZOS)
        return _encode_jpeg(image, quality)
    except _DECODE_ERRORS as exc:
        logger.debug("Could not re-encode image: %s", exc)
        return None


def generate_thumbnail(
    data: bytes,
    max_dimension: int = DEFAULT_THUMBNAIL_DIMENSION,
    quality: int = DEFAULT_QUALITY,
) -> bytes | None:
    """Derive a bounded-size JPEG preview from image bytes.

    Return ``None`` when ``data`` is not a decodable image. The output depends
    only on the input bytes and parameters.
    """
    image = _decode(data)
    if image is None:
        return None
    return _render(image, scaled_size(image.width, image.height, max_dimension), quality)


def compress_image(
    data: bytes,
    max_dimension: int = DEFAULT_PROFILE_IMAGE_DIMENSION,
    quality: int = DEFAULT_QUALITY,
) -> bytes:
    """Resize oversized images and always re-encode at ``quality``.

    Undecodable payloads are returned unchanged.
    """
    image = _decode(data)
    if image is None:
        return data
    compressed = _render(image, scaled_size(image.width, image.height, max_dimension), quality)
    if compressed is None:
        return data
    logger.debug("Compressed image from %d to %d bytes", len(data), len(compressed))
    return compressed

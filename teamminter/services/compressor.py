"""Photo resize and size-targeted JPEG compression using Pillow.

A photo is first scaled down (aspect ratio preserved) so neither side
exceeds the configured maximum, then re-encoded at decreasing JPEG quality:

    0.9, 0.8, 0.7, 0.6, 0.5, 0.4, 0.3

The first encoding at or under the byte ceiling wins.  If none fits, the
0.3 encoding is accepted as is, so at most seven encodes ever run.  The
walk is linear on purpose: it keeps the highest quality that fits rather
than the smallest file.
"""
from __future__ import annotations

import asyncio
import io
import logging
from typing import Iterator, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from teamminter.config import get_settings
from teamminter.models import CompressionResult, ImageAsset

logger = logging.getLogger(__name__)
settings = get_settings()

# Qualities are kept as integer percentages so the walk cannot drift.
QUALITY_START = 90
QUALITY_STEP = 10
QUALITY_FLOOR = 30
MAX_ATTEMPTS = (QUALITY_START - QUALITY_FLOOR) // QUALITY_STEP + 1

_OUTPUT_MIME = "image/jpeg"


class InvalidImageError(ValueError):
    """Raised when the supplied bytes cannot be decoded as an image."""


def quality_steps() -> Iterator[int]:
    quality = QUALITY_START
    while quality >= QUALITY_FLOOR:
        yield quality
        quality -= QUALITY_STEP


def scale_to_fit(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Return (width, height) shrunk by the binding dimension, never enlarged."""

    if width <= max_width and height <= max_height:
        return width, height
    scale = min(max_width / width, max_height / height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def open_image(data: bytes) -> Image.Image:
    """Decode bytes into an RGB image with EXIF orientation applied."""

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImageError(f"Could not decode image: {exc}") from exc
    img = ImageOps.exif_transpose(img)
    return img.convert("RGB")  # JPEG has no alpha channel


def probe(data: bytes, mime_type: str, *, filename: str = "photo.jpg") -> ImageAsset:
    """Build an ImageAsset from raw bytes, reading the pixel dimensions."""

    img = open_image(data)
    width, height = img.size
    return ImageAsset(data=data, mime_type=mime_type, width=width, height=height, filename=filename)


def _limits(
    target_bytes: int | None, max_width: int | None, max_height: int | None
) -> Tuple[int, int, int]:
    """Fill in configured defaults for omitted limits; an explicit 0 is kept."""

    if target_bytes is None:
        target_bytes = settings.image_target_bytes
    if max_width is None:
        max_width = settings.image_max_dim
    if max_height is None:
        max_height = settings.image_max_dim
    return target_bytes, max_width, max_height


def _prepare(asset: ImageAsset, max_width: int, max_height: int) -> Image.Image:
    img = open_image(asset.data)
    new_size = scale_to_fit(img.width, img.height, max_width, max_height)
    if new_size != img.size:
        logger.debug("Resizing %s -> %dx%d", asset.resolution, *new_size)
        img = img.resize(new_size, Image.Resampling.LANCZOS)
    return img


def _encode(img: Image.Image, quality: int) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def _accept(size: int, quality: int, target_bytes: int) -> bool:
    return size <= target_bytes or quality <= QUALITY_FLOOR


def _result(asset: ImageAsset, img: Image.Image, data: bytes, quality: int, attempts: int) -> CompressionResult:
    logger.info(
        "Compressed %s to %dx%d at quality %.1f: %.2fKB (%d attempt(s))",
        asset.filename,
        img.width,
        img.height,
        quality / 100,
        len(data) / 1024,
        attempts,
    )
    return CompressionResult(
        data=data,
        mime_type=_OUTPUT_MIME,
        width=img.width,
        height=img.height,
        filename=asset.filename,
        quality=quality / 100,
        attempts=attempts,
    )


def compress_image(
    asset: ImageAsset,
    *,
    target_bytes: int | None = None,
    max_width: int | None = None,
    max_height: int | None = None,
) -> CompressionResult:
    """Resize and compress *asset* synchronously.

    Parameters
    ----------
    asset : ImageAsset
        Source photo, any format Pillow can decode.
    target_bytes : int, optional
        Byte ceiling; defaults to ``settings.image_target_bytes``.
    max_width, max_height : int, optional
        Pixel bounds; both default to ``settings.image_max_dim``.
    """

    target_bytes, max_width, max_height = _limits(target_bytes, max_width, max_height)
    img = _prepare(asset, max_width, max_height)

    for attempt, quality in enumerate(quality_steps(), start=1):
        data = _encode(img, quality)
        logger.debug("Compressed with quality %.1f: %.2fKB", quality / 100, len(data) / 1024)
        if _accept(len(data), quality, target_bytes):
            return _result(asset, img, data, quality, attempt)
    raise AssertionError("quality walk ended without reaching the floor")  # pragma: no cover


async def compress_image_async(
    asset: ImageAsset,
    *,
    target_bytes: int | None = None,
    max_width: int | None = None,
    max_height: int | None = None,
) -> CompressionResult:
    """Same walk as :func:`compress_image`, each encode in a worker thread.

    Every attempt is awaited separately so the event loop keeps serving
    other work (resolution, UI callbacks) between encodes.
    """

    target_bytes, max_width, max_height = _limits(target_bytes, max_width, max_height)
    img = await asyncio.to_thread(_prepare, asset, max_width, max_height)

    for attempt, quality in enumerate(quality_steps(), start=1):
        data = await asyncio.to_thread(_encode, img, quality)
        logger.debug("Compressed with quality %.1f: %.2fKB", quality / 100, len(data) / 1024)
        if _accept(len(data), quality, target_bytes):
            return _result(asset, img, data, quality, attempt)
    raise AssertionError("quality walk ended without reaching the floor")  # pragma: no cover

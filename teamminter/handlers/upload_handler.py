"""Upload endpoint for the minting form."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from teamminter.services.upload_relay import (
    UploadRelay,
    get_upload_relay,
    no_file_error,
    too_large_error,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


async def read_capped(upload: UploadFile, max_bytes: int) -> bytes:
    """Read the uploaded file, failing as soon as it grows past *max_bytes*."""

    if upload.size is not None and upload.size > max_bytes:
        raise too_large_error(max_bytes)

    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            logger.warning("Rejected upload %s: more than %d bytes", upload.filename, max_bytes)
            raise too_large_error(max_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/api/upload")
async def upload_image(
    image: UploadFile | None = File(None),
    relay: UploadRelay = Depends(get_upload_relay),
):
    if image is None:
        raise no_file_error()

    # MIME filter first, so a non-image is never buffered.
    relay.check_content_type(image.content_type)
    data = await read_capped(image, relay.max_upload_bytes)
    response = await relay.relay(data, image.filename, image.content_type)
    return response.model_dump(by_alias=True)



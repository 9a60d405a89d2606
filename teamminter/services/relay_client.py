"""Client for the upload relay, used by the minting session and scripts."""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from teamminter.models import UploadRecord

logger = logging.getLogger(__name__)


class UploadError(Exception):
    """Raised when the relay rejects an upload or cannot be reached."""

    def __init__(self, status: int | None, message: str, detail: Optional[str] = None):
        super().__init__(f"Upload failed: {message}")
        self.status = status
        self.message = message
        self.detail = detail


class RelayClient:  # pylint: disable=too-few-public-methods
    def __init__(self, base_url: str, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._client = httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=60.0, transport=transport)

    async def health(self) -> dict[str, Any]:
        resp = await self._client.get("/health")
        resp.raise_for_status()
        return resp.json()

    async def upload(self, data: bytes, filename: str = "photo.jpg", content_type: str = "image/jpeg") -> UploadRecord:
        logger.debug("Uploading %s (%d bytes) to relay", filename, len(data))
        try:
            resp = await self._client.post("/api/upload", files={"image": (filename, data, content_type)})
        except httpx.HTTPError as exc:
            raise UploadError(None, str(exc) or exc.__class__.__name__) from exc

        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            raise UploadError(resp.status_code, body.get("error") or "Upload failed", body.get("message"))

        record = UploadRecord.model_validate(resp.json())
        logger.info("Uploaded to IPFS: %s", record.ipfs_url)
        return record

    async def close(self) -> None:
        await self._client.aclose()

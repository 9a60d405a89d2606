"""Upload relay: validates a single photo and pins it with server-held keys.

Callers only ever see the normalised descriptor::

    ipfs://<hash>
    https://<gateway-host>/ipfs/<hash>

Upstream failures are reduced to a :class:`RelayError` whose message is safe
to hand back to the browser.
"""
from __future__ import annotations

import logging
from typing import Any, Tuple

from teamminter.config import get_settings
from teamminter.models import UploadResponse
from teamminter.services.pinata import PinataAPIError, PinataClient, build_pinata_client

logger = logging.getLogger(__name__)
settings = get_settings()


class RelayError(Exception):
    """An upload failure with the HTTP status and body the relay should return."""

    def __init__(self, status_code: int, error: str, message: str | None = None):
        super().__init__(error if message is None else f"{error}: {message}")
        self.status_code = status_code
        self.error = error
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.message is not None:
            body["message"] = self.message
        return body


def no_file_error() -> RelayError:
    return RelayError(400, "No image file provided")


def too_large_error(max_bytes: int) -> RelayError:
    return RelayError(400, f"File too large. Max size is {max_bytes / (1024 * 1024):g}MB.")


def ipfs_urls(ipfs_hash: str, gateway_host: str) -> Tuple[str, str]:
    """Return (protocol URL, HTTP gateway URL) for a content hash."""
    return f"ipfs://{ipfs_hash}", f"https://{gateway_host}/ipfs/{ipfs_hash}"


class UploadRelay:
    """Stateless per request; one instance is shared by all uploads."""

    _VALID_IMAGE_PREFIX = "image/"

    def __init__(
        self,
        pinata: PinataClient,
        *,
        max_upload_bytes: int = 10 * 1024 * 1024,
        gateway_host: str = "gateway.pinata.cloud",
    ) -> None:
        self._pinata = pinata
        self.max_upload_bytes = max_upload_bytes
        self._gateway_host = gateway_host

    def check_content_type(self, content_type: str | None) -> None:
        if not (content_type or "").lower().startswith(self._VALID_IMAGE_PREFIX):
            raise RelayError(400, "Only image files are allowed")

    def validate(self, data: bytes | None, content_type: str | None) -> None:
        """Reject input errors before anything leaves the process."""

        if not data:
            raise no_file_error()
        self.check_content_type(content_type)
        if len(data) > self.max_upload_bytes:
            raise too_large_error(self.max_upload_bytes)

    async def relay(self, data: bytes | None, filename: str | None, content_type: str | None) -> UploadResponse:
        self.validate(data, content_type)
        filename = filename or "photo.jpg"
        logger.info("Received file: name=%s mimetype=%s size=%d", filename, content_type, len(data))

        try:
            pinned = await self._pinata.pin_file(data, filename, content_type)
        except PinataAPIError as exc:
            logger.error("Upload error: status=%s body=%s", exc.status, exc.response_json or exc.message)
            raise _classify(exc) from exc

        ipfs_hash = pinned.get("IpfsHash")
        if not ipfs_hash:
            raise RelayError(500, "Upload failed", "Pinata response did not include IpfsHash")

        ipfs_url, gateway_url = ipfs_urls(ipfs_hash, self._gateway_host)
        logger.info("Upload successful: %s", ipfs_hash)
        return UploadResponse(
            ipfs_hash=ipfs_hash,
            ipfs_url=ipfs_url,
            gateway_url=gateway_url,
            size=pinned.get("PinSize"),
            timestamp=pinned.get("Timestamp"),
        )


def _classify(exc: PinataAPIError) -> RelayError:
    if exc.status == 401:
        return RelayError(500, "Pinata authentication failed. Check API keys.")
    if exc.status == 400:
        return RelayError(400, "Invalid file or Pinata request")
    return RelayError(500, "Upload failed", exc.message)


# Singleton instance
upload_relay = UploadRelay(
    build_pinata_client(),
    max_upload_bytes=settings.max_upload_bytes,
    gateway_host=settings.ipfs_gateway_host,
)


def get_upload_relay() -> UploadRelay:
    """FastAPI dependency; overridden in tests."""
    return upload_relay

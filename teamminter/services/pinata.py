"""Pinata pinning API wrapper.

Only ``pinFileToIPFS`` is used.  Credentials are read from settings and sent
as request headers; they never appear in exceptions or log lines.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from teamminter.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class PinataAPIError(Exception):
    """Raised when the Pinata API returns an error status or cannot be reached."""

    def __init__(self, status: int | None, message: str, response_json: Optional[dict[str, Any]] = None):
        super().__init__(f"Pinata API error {status}: {message}" if status else message)
        self.status = status
        self.message = message
        self.response_json = response_json or {}


class PinataClient:  # pylint: disable=too-few-public-methods
    """Minimal async client for the Pinata pinning service."""

    def __init__(
        self,
        *,
        api_key: str | None,
        secret_key: str | None,
        api_url: str = "https://api.pinata.cloud/pinning/pinFileToIPFS",
        classification: str = "superfantastic-nft",
        cid_version: int = 0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url
        self._classification = classification
        self._cid_version = cid_version
        self._headers = {
            "pinata_api_key": api_key or "",
            "pinata_secret_api_key": secret_key or "",
        }
        # Uploads can be slow; the relay's inbound leg already caps the size.
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(60.0, connect=10.0), headers=self._headers, transport=transport
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def pin_file(self, data: bytes, filename: str, content_type: str) -> dict[str, Any]:
        """Pin *data* and return Pinata's JSON (``IpfsHash``, ``PinSize``, ``Timestamp``)."""

        metadata = {
            "name": filename,
            "keyvalues": {
                "uploadedAt": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
                "type": self._classification,
            },
        }
        options = {"cidVersion": self._cid_version}

        files = {"file": (filename, data, content_type)}
        form = {
            "pinataMetadata": json.dumps(metadata),
            "pinataOptions": json.dumps(options),
        }

        logger.debug("POST %s (%d bytes)", self._api_url, len(data))
        try:
            resp = await self._client.post(self._api_url, files=files, data=form)
        except httpx.HTTPError as exc:
            raise PinataAPIError(None, str(exc) or exc.__class__.__name__) from exc

        if resp.status_code >= 400:
            try:
                err_json = resp.json()
            except ValueError:
                err_json = None
            raise PinataAPIError(resp.status_code, resp.text, err_json)
        return resp.json()

    async def close(self) -> None:
        await self._client.aclose()


def build_pinata_client(transport: httpx.AsyncBaseTransport | None = None) -> PinataClient:
    return PinataClient(
        api_key=settings.pinata_api_key,
        secret_key=settings.pinata_secret_key,
        api_url=settings.pinata_api_url,
        classification=settings.pin_classification,
        cid_version=settings.pin_cid_version,
        transport=transport,
    )

"""Minting session orchestrator.

``TeamMinter`` holds the one ``MintSession`` and drives each stage against
it: photo (capture or file, then compression), upload, recipient
resolution and the mint itself.

Photos are versioned.  Picking a new photo, or switching back to the default
image, bumps ``session.image_version`` and drops the previous photo and
upload straight away; a compression or upload that finishes for an older
version is discarded.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from teamminter.config import Settings, get_settings
from teamminter.models import CompressionResult, ImageAsset, MintRequest, MintSession, UploadRecord
from teamminter.services.camera import Camera, open_camera
from teamminter.services.chain import ChainError, MintContract
from teamminter.services.compressor import compress_image_async, probe
from teamminter.services.mint_submitter import MintPreconditionError, MintSubmitter
from teamminter.services.name_resolver import NameLookup, NameResolver
from teamminter.services.relay_client import RelayClient

logger = logging.getLogger(__name__)


class TeamMinter:
    def __init__(
        self,
        *,
        contract: MintContract,
        relay: RelayClient,
        lookup: NameLookup,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._contract = contract
        self._relay = relay
        self.session = MintSession(
            custom_text=self._settings.default_custom_text,
            event_name=self._settings.default_event_name,
        )
        self.resolver = NameResolver(lookup, self.session, debounce_seconds=self._settings.resolve_debounce_seconds)
        self.submitter = MintSubmitter(
            contract, self.session, self.resolver, default_custom_text=self._settings.default_custom_text
        )
        self._uploads_in_flight = 0

    @property
    def uploading(self) -> bool:
        return self._uploads_in_flight > 0

    # ------------------------------------------------------------------
    # Wallet
    # ------------------------------------------------------------------

    async def connect(self, caller_address: str | None = None) -> MintSession:
        """Check the contract and read the caller's team-minter flag and the mint price."""

        address = caller_address or self._contract.account_address
        if not address:
            raise MintPreconditionError("No wallet address; set MINTER_PRIVATE_KEY or pass an address")
        if not await self._contract.has_code():
            raise ChainError(f"No contract found at {self._contract.address}")

        self.session.caller_address = address
        self.session.is_team_minter = await self._contract.is_team_minter(address)
        self.session.mint_price = str(await self._contract.mint_price())

        if self.session.is_team_minter:
            logger.info("Connected as team minter %s", address)
        else:
            logger.warning("Wallet %s is not authorized as a team minter", address)
        return self.session

    # ------------------------------------------------------------------
    # Photo
    # ------------------------------------------------------------------

    async def load_file(self, data: bytes, content_type: str, *, filename: str = "photo.jpg") -> CompressionResult | None:
        version = self.session.begin_photo()
        asset = await asyncio.to_thread(probe, data, content_type, filename=filename)
        return await self._compress(asset, version)

    async def capture_photo(self, camera: Camera) -> CompressionResult | None:
        version = self.session.begin_photo()
        asset = await asyncio.to_thread(camera.read_frame)
        return await self._compress(asset, version)

    async def capture_from_device(self, index: int = 0) -> CompressionResult | None:
        """Open the camera, take one frame and release the device before compressing."""

        version = self.session.begin_photo()
        with open_camera(index) as camera:
            asset = await asyncio.to_thread(camera.read_frame)
        return await self._compress(asset, version)

    def use_default_image(self) -> None:
        self.session.clear_photo()

    async def _compress(self, asset: ImageAsset, version: int) -> CompressionResult | None:
        result = await compress_image_async(
            asset,
            target_bytes=self._settings.image_target_bytes,
            max_width=self._settings.image_max_dim,
            max_height=self._settings.image_max_dim,
        )
        if version != self.session.image_version:
            logger.info("Discarding stale photo v%d (current v%d)", version, self.session.image_version)
            return None
        self.session.photo = result
        self.session.upload = None
        self.session.use_default_image = False
        logger.info("Photo loaded: %.2fKB", result.size / 1024)
        return result

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def upload_photo(self) -> UploadRecord | None:
        photo = self.session.photo
        if photo is None:
            raise MintPreconditionError("Please capture or select a photo first")

        version = self.session.image_version
        self._uploads_in_flight += 1
        try:
            record = await self._relay.upload(photo.data, photo.filename, photo.mime_type)
        finally:
            self._uploads_in_flight -= 1

        if version != self.session.image_version:
            logger.info("Discarding upload of stale photo v%d", version)
            return None
        self.session.upload = record
        return record

    # ------------------------------------------------------------------
    # Recipient and mint
    # ------------------------------------------------------------------

    def set_recipient(self, text: str) -> None:
        self.resolver.update(text)

    async def mint(self) -> MintRequest:
        if self.uploading:
            raise MintPreconditionError("Photo upload still in progress")
        return await self.submitter.submit()

    async def close(self) -> None:
        self.resolver.cancel()
        await self._relay.close()

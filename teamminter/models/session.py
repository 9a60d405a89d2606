from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .image_asset import CompressionResult
from .mint import MintRequest
from .recipient import RecipientResolution
from .upload import UploadRecord


class MintSession(BaseModel):
    """All mutable state of one operator's minting session.

    Stages read and write this object instead of module globals; the
    ``TeamMinter`` orchestrator owns the only instance.
    """

    # Wallet
    caller_address: str | None = None
    is_team_minter: bool = False
    mint_price: str = "0"

    # Photo
    photo: CompressionResult | None = None
    upload: UploadRecord | None = None
    use_default_image: bool = True
    image_version: int = 0

    # Form
    recipient_input: str = ""
    resolution: RecipientResolution = Field(default_factory=RecipientResolution)
    custom_text: str = ""
    event_name: str = ""
    event_date: datetime = Field(default_factory=lambda: datetime.now().replace(second=0, microsecond=0))

    last_request: MintRequest | None = None

    @property
    def content_url(self) -> str:
        return self.upload.ipfs_url if self.upload else ""

    def next_image_version(self) -> int:
        self.image_version += 1
        return self.image_version

    def begin_photo(self) -> int:
        """Start a new custom photo; the previous photo and upload are dropped at once."""
        version = self.next_image_version()
        self.photo = None
        self.upload = None
        self.use_default_image = False
        return version

    def clear_photo(self) -> None:
        self.next_image_version()
        self.photo = None
        self.upload = None
        self.use_default_image = True

    def reset_after_mint(self, *, default_custom_text: str) -> None:
        """Clear the photo and restore the template text; event details are kept.

        The recipient fields belong to ``NameResolver.reset()``.
        """
        self.custom_text = default_custom_text
        self.clear_photo()

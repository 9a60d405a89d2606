from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class MintStatus(str, Enum):
    BUILDING = "building"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class MintRequest(BaseModel):
    """A single teamMint call and its lifecycle."""

    recipient: str
    content_url: str = ""  # empty string makes the contract use its default image
    custom_text: str
    event_name: str = Field(..., min_length=1)
    event_date: datetime
    status: MintStatus = MintStatus.BUILDING
    tx_hash: str | None = None
    block_number: int | None = None
    error: str | None = None

    @property
    def event_timestamp(self) -> int:
        """Unix seconds, as the contract expects for ``eventDate``."""
        return int(self.event_date.timestamp())

    @property
    def is_terminal(self) -> bool:
        return self.status in (MintStatus.CONFIRMED, MintStatus.FAILED)

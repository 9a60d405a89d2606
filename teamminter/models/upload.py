from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UploadRecord(BaseModel):
    """Content-addressed descriptor returned by the upload relay.

    Field aliases follow the relay's JSON response so the same model is used
    on both sides of the wire.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ipfs_hash: str = Field(..., alias="ipfsHash")
    ipfs_url: str = Field(..., alias="ipfsUrl")
    gateway_url: str = Field(..., alias="gatewayUrl")
    size: int | None = None
    timestamp: str | None = None


class UploadResponse(UploadRecord):
    success: bool = True

from __future__ import annotations

from pydantic import BaseModel, Field


class ImageAsset(BaseModel):
    """Raw image bytes as captured or selected, before any upload."""

    data: bytes = Field(repr=False)
    mime_type: str
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    filename: str = "photo.jpg"

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"


class CompressionResult(ImageAsset):
    quality: float = Field(..., ge=0, le=1)
    attempts: int = Field(1, ge=1)

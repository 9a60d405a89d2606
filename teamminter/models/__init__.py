from .image_asset import CompressionResult, ImageAsset
from .mint import MintRequest, MintStatus
from .recipient import RecipientResolution, ResolutionStatus
from .session import MintSession
from .upload import UploadRecord, UploadResponse

__all__ = [
    "CompressionResult",
    "ImageAsset",
    "MintRequest",
    "MintStatus",
    "MintSession",
    "RecipientResolution",
    "ResolutionStatus",
    "UploadRecord",
    "UploadResponse",
]

"""Expose constructed client wrappers."""

from .agent import AgentClient
from .asset_upload import AssetUploadClient, UploadReply

__all__ = [
    "AgentClient",
    "AssetUploadClient",
    "UploadReply",
]

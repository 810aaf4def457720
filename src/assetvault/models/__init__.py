"""Models for the AssetVault sync agent."""

from .models import (
    AssetContent,
    RemoteAssetVersion,
    StorageType,
    UploadResult,
    ensure_utc,
)

__all__ = [
    "AssetContent",
    "RemoteAssetVersion",
    "StorageType",
    "UploadResult",
    "ensure_utc",
]

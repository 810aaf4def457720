"""Wire models for data exchanged with the AssetVault server."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as a timezone-aware UTC datetime.

    Naive datetimes are assumed to already be in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class StorageType(str, Enum):
    """How the server stores an asset's content."""

    INLINE = "INLINE"
    BUNDLE = "BUNDLE"


class RemoteAssetVersion(BaseModel):
    """One entry of the server's sync manifest."""

    id: str
    slug: Optional[str] = None
    version_id: str = Field(alias="currentVersion")
    updated_at: datetime = Field(alias="updatedAt")
    storage_type: StorageType = Field(default=StorageType.INLINE, alias="storageType")

    @property
    def is_transferable(self) -> bool:
        """Whether content can be pushed/pulled inline."""
        return self.storage_type == StorageType.INLINE

    @field_validator("version_id", mode="before")
    @classmethod
    def validate_version_id(cls, v: object) -> str:
        """Versions may be sent as numbers."""
        return str(v)

    @field_validator("updated_at", mode="after")
    @classmethod
    def validate_updated_at(cls, v: datetime) -> datetime:
        """Normalize to UTC."""
        return ensure_utc(v)

    model_config = ConfigDict(populate_by_name=True)


class UploadResult(BaseModel):
    """Server response to an upload."""

    version_id: str = Field(alias="version")
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="updatedAt"
    )

    @field_validator("version_id", mode="before")
    @classmethod
    def validate_version_id(cls, v: object) -> str:
        """Versions may be sent as numbers."""
        return str(v)

    @field_validator("updated_at", mode="after")
    @classmethod
    def validate_updated_at(cls, v: datetime) -> datetime:
        """Normalize to UTC."""
        return ensure_utc(v)

    model_config = ConfigDict(populate_by_name=True)


class AssetContent(BaseModel):
    """Server response when downloading an asset."""

    type: StorageType = StorageType.INLINE
    content: Optional[str] = None
    bundle_url: Optional[str] = Field(default=None, alias="bundleUrl")
    version: Optional[str] = None
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("version", mode="before")
    @classmethod
    def validate_version(cls, v: object) -> Optional[str]:
        """Versions may be sent as numbers."""
        return None if v is None else str(v)

    model_config = ConfigDict(populate_by_name=True)

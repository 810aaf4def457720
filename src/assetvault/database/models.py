"""SQLAlchemy database models for tracked assets and sync history."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncDirection(str, Enum):
    """Direction of the last successful transfer for an asset."""

    PUSH = "push"
    PULL = "pull"


class PassStatus(str, Enum):
    """Outcome of a recorded sync pass."""

    COMPLETED = "completed"
    PARTIAL = "partial"  # at least one asset failed
    FAILED = "failed"  # the pass was aborted


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class TrackedAsset(Base):
    """An asset linked to a local file, with its last known sync state."""

    __tablename__ = "tracked_assets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Server identifiers
    asset_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    slug: Mapped[str] = mapped_column(String(255), nullable=False)

    # Absolute path of the local replica
    local_path: Mapped[str] = mapped_column(String(1000), nullable=False)

    # Sync state, advanced only after a successful transfer
    last_fingerprint: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True
    )  # SHA256 hex
    last_remote_version: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True
    )
    last_direction: Mapped[Optional[str]] = mapped_column(
        String(10), nullable=True
    )  # Enum: push, pull
    last_synced_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    @property
    def has_synced(self) -> bool:
        """Whether a transfer has ever completed for this asset."""
        return self.last_remote_version is not None

    def __repr__(self) -> str:
        """String representation of TrackedAsset."""
        return (
            f"<TrackedAsset(asset_id='{self.asset_id}', slug='{self.slug}', "
            f"version='{self.last_remote_version}')>"
        )


class SyncPass(Base):
    """Summary of one sync pass."""

    __tablename__ = "sync_passes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True
    )  # Enum: completed, partial, failed

    # Counts
    assets_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pushed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pulled: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    conflicted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    details: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True
    )  # JSON list of per-asset outcomes
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (Index("idx_pass_status_started", "status", "started_at"),)

    def __repr__(self) -> str:
        """String representation of SyncPass."""
        return (
            f"<SyncPass(id={self.id}, status='{self.status}', "
            f"started_at='{self.started_at}')>"
        )

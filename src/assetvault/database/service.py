"""Database service for tracked assets and their persisted sync state."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, inspect, select
from sqlalchemy.orm import Session, sessionmaker

from .models import Base, SyncDirection, SyncPass, TrackedAsset

logger = logging.getLogger(__name__)


class DatabaseService:
    """Service for database operations and transaction management."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """Initialize database service.

        Args:
            db_path: Path to SQLite database file.
                    If None, uses default ~/.assetvault/sync.db
        """
        if db_path is None:
            db_path = Path.home() / ".assetvault" / "sync.db"

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # Check if database exists before creating engine
        db_exists = self.db_path.exists()

        db_url = f"sqlite:///{self.db_path}"
        # The poller thread and CLI thread share this engine
        self.engine = create_engine(
            db_url, echo=False, connect_args={"check_same_thread": False}
        )

        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

        logger.info("Database initialized at: %s", self.db_path)

        if not db_exists:
            logger.info("New database detected, initializing schema...")
            self.init_db()

    def init_db(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema created successfully")

    def get_session(self) -> Session:
        """Get a new database session.

        Returns:
            SQLAlchemy Session object

        Note:
            Caller is responsible for closing the session
        """
        return self.SessionLocal()

    def is_initialized(self) -> bool:
        """Check that the required tables exist and a session can be opened."""
        try:
            inspector = inspect(self.engine)
            if not (
                inspector.has_table("tracked_assets")
                and inspector.has_table("sync_passes")
            ):
                logger.debug("Required tables missing")
                return False

            with self.SessionLocal() as session:
                session.execute(select(1))

            return True
        except Exception as e:
            logger.debug("Database initialization check failed: %s", e)
            return False

    # =========================================================================
    # Tracked Asset Operations
    # =========================================================================

    def track_asset(
        self,
        asset_id: str,
        slug: str,
        local_path: Path,
        baseline_fingerprint: Optional[str] = None,
    ) -> TrackedAsset:
        """Start tracking an asset, or update where it lives locally.

        Existing sync state is left untouched so re-linking an asset does not
        make it look unsynced.

        Args:
            asset_id: Server identifier of the asset
            slug: Human readable asset name
            local_path: Local file holding the replica
            baseline_fingerprint: Fingerprint of the local file at tracking
                time, used for newly tracked assets only. Later edits are
                measured against it.

        Returns:
            The tracked asset
        """
        resolved = str(Path(local_path).expanduser().resolve())
        with self.get_session() as session:
            stmt = select(TrackedAsset).where(TrackedAsset.asset_id == asset_id)
            asset = session.scalar(stmt)
            if asset is None:
                asset = TrackedAsset(
                    asset_id=asset_id,
                    slug=slug,
                    local_path=resolved,
                    last_fingerprint=baseline_fingerprint,
                )
                session.add(asset)
                logger.info("Tracking asset %s at %s", slug, resolved)
            else:
                asset.slug = slug
                asset.local_path = resolved
                logger.info("Updated tracked asset %s -> %s", slug, resolved)

            session.commit()
            session.refresh(asset)
            return asset

    def untrack_asset(self, asset_id: str) -> bool:
        """Stop tracking an asset.

        Returns:
            True if the asset was tracked, False otherwise
        """
        with self.get_session() as session:
            stmt = select(TrackedAsset).where(TrackedAsset.asset_id == asset_id)
            asset = session.scalar(stmt)
            if asset is None:
                return False

            session.delete(asset)
            session.commit()
            logger.info("Stopped tracking asset %s", asset_id)
            return True

    def get_tracked_asset(self, asset_id: str) -> Optional[TrackedAsset]:
        """Get a tracked asset by its server identifier."""
        with self.get_session() as session:
            stmt = select(TrackedAsset).where(TrackedAsset.asset_id == asset_id)
            return session.scalar(stmt)

    def get_tracked_assets(self) -> List[TrackedAsset]:
        """Get all tracked assets ordered by slug."""
        with self.get_session() as session:
            stmt = select(TrackedAsset).order_by(TrackedAsset.slug)
            return list(session.scalars(stmt).all())

    def update_sync_state(
        self,
        asset_id: str,
        fingerprint: str,
        remote_version: str,
        direction: SyncDirection,
    ) -> TrackedAsset:
        """Record the state reached by a successful transfer.

        Args:
            asset_id: Server identifier of the asset
            fingerprint: Fingerprint of the content now on both sides
            remote_version: Server version now matching the local content
            direction: Which way the content moved

        Returns:
            Updated TrackedAsset

        Raises:
            ValueError: If the asset is not tracked
        """
        with self.get_session() as session:
            stmt = select(TrackedAsset).where(TrackedAsset.asset_id == asset_id)
            asset = session.scalar(stmt)
            if asset is None:
                raise ValueError(f"Asset not tracked: {asset_id}")

            asset.last_fingerprint = fingerprint
            asset.last_remote_version = remote_version
            asset.last_direction = direction.value
            asset.last_synced_at = datetime.now(timezone.utc)
            session.commit()
            session.refresh(asset)
            logger.debug(
                "Sync state for %s: fingerprint=%s version=%s",
                asset.slug,
                fingerprint[:12],
                remote_version,
            )
            return asset

    # =========================================================================
    # Sync Pass History
    # =========================================================================

    def record_sync_pass(self, pass_data: Dict[str, Any]) -> SyncPass:
        """Store the summary of a sync pass.

        Args:
            pass_data: SyncPass column values

        Returns:
            Created SyncPass object
        """
        with self.get_session() as session:
            sync_pass = SyncPass(**pass_data)
            session.add(sync_pass)
            session.commit()
            session.refresh(sync_pass)
            logger.debug(
                "Recorded sync pass %s (status: %s)", sync_pass.id, sync_pass.status
            )
            return sync_pass

    def get_recent_passes(self, limit: int = 10) -> List[SyncPass]:
        """Get the most recent sync passes, newest first."""
        with self.get_session() as session:
            stmt = (
                select(SyncPass)
                .order_by(SyncPass.started_at.desc(), SyncPass.id.desc())
                .limit(limit)
            )
            return list(session.scalars(stmt).all())

    def get_statistics(self) -> Dict[str, Any]:
        """Get database statistics.

        Returns:
            Dictionary with statistics
        """
        with self.get_session() as session:
            tracked = session.query(TrackedAsset).count()
            never_synced = (
                session.query(TrackedAsset)
                .filter(TrackedAsset.last_remote_version.is_(None))
                .count()
            )
            passes = session.query(SyncPass).count()

            return {
                "tracked_assets": tracked,
                "never_synced": never_synced,
                "sync_passes": passes,
            }

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self.engine.dispose()

"""Sync orchestrator: one complete pass over all tracked assets.

For every tracked asset a pass:
1. Fingerprints the local file and compares it with the last synced fingerprint
2. Compares the server's current version with the last synced version
3. Asks the ConflictResolver for a SyncDecision
4. Pushes or pulls, then persists the new sync state
5. Records the outcome in the pass report

Sync state only advances after both the transfer and its persistence succeed,
so a failed asset keeps its pre-pass state and the next pass repeats the same
decision. One asset's failure never stops the pass; a failed remote listing
aborts it with ``ListingError``.
"""

import json
import logging
import threading
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from ...database.models import PassStatus, SyncDirection, TrackedAsset
from ...database.service import DatabaseService
from ...models import RemoteAssetVersion
from ...services.asset_store import LocalAssetStore
from .conflict_resolver import ConflictResolver, SyncDecision
from .errors import (
    FingerprintError,
    ListingError,
    StateError,
    SyncError,
    TransferError,
)
from .fingerprint import fingerprint, fingerprint_file
from .interfaces import AssetStore, RemoteStore

logger = logging.getLogger(__name__)

# Stands in for the mtime of an unreadable local file, so it never wins a conflict
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class OutcomeStatus(str, Enum):
    """Result of processing one asset in a pass."""

    UP_TO_DATE = "up_to_date"
    SYNCED = "synced"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class AssetPlan:
    """The decision for one asset, computed without transferring anything."""

    asset_id: str
    slug: str
    local_path: str
    decision: Optional[SyncDecision] = None
    local_changed: bool = False
    remote_changed: bool = False
    local_fingerprint: Optional[str] = None
    remote_version: Optional[str] = None
    synced_version: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class AssetOutcome:
    """What happened to one asset during a pass."""

    asset_id: str
    slug: str
    status: OutcomeStatus
    decision: Optional[SyncDecision] = None
    remote_version: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert outcome to dictionary for serialization."""
        return {
            "asset_id": self.asset_id,
            "slug": self.slug,
            "status": self.status.value,
            "decision": self.decision.value if self.decision else None,
            "remote_version": self.remote_version,
            "error": self.error,
        }


@dataclass
class SyncReport:
    """Result of a sync pass."""

    outcomes: List[AssetOutcome] = dataclass_field(default_factory=list)
    errors: List[str] = dataclass_field(default_factory=list)
    aborted: bool = False
    started_at: datetime = dataclass_field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    completed_at: Optional[datetime] = None

    def add_outcome(self, outcome: AssetOutcome) -> None:
        """Add the outcome of one asset."""
        self.outcomes.append(outcome)
        if outcome.status == OutcomeStatus.FAILED and outcome.error:
            self.errors.append(f"{outcome.slug}: {outcome.error}")

    def add_error(self, error: str) -> None:
        """Add a pass-level error message."""
        self.errors.append(error)

    def finish(self) -> None:
        """Mark the pass as complete."""
        self.completed_at = datetime.now(timezone.utc)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def pushed(self) -> int:
        """Assets whose local content was uploaded."""
        return sum(
            1
            for o in self.outcomes
            if o.status == OutcomeStatus.SYNCED and o.decision and o.decision.is_push
        )

    @property
    def pulled(self) -> int:
        """Assets whose server content was written locally."""
        return sum(
            1
            for o in self.outcomes
            if o.status == OutcomeStatus.SYNCED and o.decision and o.decision.is_pull
        )

    @property
    def conflicted(self) -> int:
        """Assets changed on both sides, whether or not the transfer worked."""
        return sum(1 for o in self.outcomes if o.decision and o.decision.is_conflict)

    @property
    def failed(self) -> int:
        """Assets whose sync failed this pass."""
        return self._count(OutcomeStatus.FAILED)

    @property
    def skipped(self) -> int:
        """Assets that could not be considered this pass."""
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def up_to_date(self) -> int:
        """Assets that needed no transfer."""
        return self._count(OutcomeStatus.UP_TO_DATE)

    @property
    def success(self) -> bool:
        """Whether the pass ran and every asset succeeded."""
        return not self.aborted and self.failed == 0

    @property
    def status(self) -> PassStatus:
        """Status recorded in the pass history."""
        if self.aborted:
            return PassStatus.FAILED
        if self.failed:
            return PassStatus.PARTIAL
        return PassStatus.COMPLETED

    def get_outcome(self, asset_id: str) -> Optional[AssetOutcome]:
        """Get the outcome for an asset, if it was processed."""
        for outcome in self.outcomes:
            if outcome.asset_id == asset_id:
                return outcome
        return None

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of the pass."""
        return {
            "success": self.success,
            "status": self.status.value,
            "assets": len(self.outcomes),
            "pushed": self.pushed,
            "pulled": self.pulled,
            "conflicted": self.conflicted,
            "failed": self.failed,
            "skipped": self.skipped,
            "up_to_date": self.up_to_date,
            "errors": len(self.errors),
        }


class SyncOrchestrator:
    """Runs sync passes between tracked local files and the remote store.

    Assets are processed one after another. Each asset's read-modify-write of
    its sync state also holds a per-asset lock, so two passes running at the
    same time (a manual sync during a poll) cannot interleave on one asset.
    """

    def __init__(
        self,
        db_service: DatabaseService,
        remote_store: RemoteStore,
        asset_store: Optional[AssetStore] = None,
    ):
        """Initialize sync orchestrator.

        Args:
            db_service: Persisted sync state
            remote_store: Server holding asset content and versions
            asset_store: Local file access (defaults to LocalAssetStore)
        """
        self.db_service = db_service
        self.remote_store = remote_store
        self.asset_store: AssetStore = asset_store or LocalAssetStore()
        self.resolver = ConflictResolver()

        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, asset_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(asset_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[asset_id] = lock
            return lock

    # =========================================================================
    # Public API
    # =========================================================================

    def run_sync(self, asset_id: Optional[str] = None) -> SyncReport:
        """Execute one sync pass.

        Args:
            asset_id: Restrict the pass to a single tracked asset

        Returns:
            SyncReport with one outcome per tracked asset

        Raises:
            ListingError: If the remote listing fails; the pass is recorded as
                failed before the error propagates
            ValueError: If ``asset_id`` is given but not tracked
        """
        report = SyncReport()
        targets = self._get_targets(asset_id)

        if not targets:
            logger.info("No tracked assets, nothing to sync")
            report.finish()
            return report

        logger.info("Starting sync pass over %d asset(s)", len(targets))

        try:
            remote_versions = self._list_remote_versions()
        except ListingError as e:
            report.aborted = True
            report.add_error(str(e))
            report.finish()
            logger.error("Sync pass aborted: %s", e)
            self._record_pass(report)
            raise

        for asset in targets:
            outcome = self._process_asset(asset, remote_versions.get(asset.asset_id))
            report.add_outcome(outcome)

        report.finish()
        self._log_pass_summary(report)
        self._record_pass(report)
        return report

    def plan(self, asset_id: Optional[str] = None) -> List[AssetPlan]:
        """Compute the decision for each tracked asset without syncing.

        Raises:
            ListingError: If the remote listing fails
        """
        targets = self._get_targets(asset_id)
        if not targets:
            return []

        remote_versions = self._list_remote_versions()
        return [
            self._evaluate(asset, remote_versions.get(asset.asset_id))
            for asset in targets
        ]

    # =========================================================================
    # Pass internals
    # =========================================================================

    def _get_targets(self, asset_id: Optional[str]) -> List[TrackedAsset]:
        if asset_id is None:
            return self.db_service.get_tracked_assets()

        asset = self.db_service.get_tracked_asset(asset_id)
        if asset is None:
            raise ValueError(f"Asset not tracked: {asset_id}")
        return [asset]

    def _list_remote_versions(self) -> Dict[str, RemoteAssetVersion]:
        try:
            versions = self.remote_store.list_asset_versions()
        except Exception as e:
            raise ListingError(f"Cannot list remote assets: {e}") from e
        return {version.id: version for version in versions}

    def _local_timestamp(self, path: str) -> datetime:
        try:
            return self.asset_store.modified_at(path)
        except OSError:
            return EPOCH

    def _evaluate(
        self, asset: TrackedAsset, remote: Optional[RemoteAssetVersion]
    ) -> AssetPlan:
        """Derive change flags and the decision for one asset."""
        plan = AssetPlan(
            asset_id=asset.asset_id,
            slug=asset.slug,
            local_path=asset.local_path,
            synced_version=asset.last_remote_version,
        )

        if remote is None:
            plan.reason = "asset not found on server"
            return plan
        plan.remote_version = remote.version_id
        if not remote.is_transferable:
            plan.reason = f"{remote.storage_type.value} assets are not synced inline"
            return plan

        # Always from current bytes. Without a baseline there is nothing local
        # to protect yet, so the server copy wins the first sync.
        has_baseline = asset.last_fingerprint is not None
        try:
            plan.local_fingerprint = fingerprint_file(asset.local_path)
            plan.local_changed = (
                has_baseline and plan.local_fingerprint != asset.last_fingerprint
            )
        except FingerprintError as e:
            if has_baseline:
                logger.warning("Treating %s as changed: %s", asset.slug, e)
            plan.local_changed = has_baseline

        plan.remote_changed = remote.version_id != asset.last_remote_version

        plan.decision = self.resolver.decide(
            plan.local_changed,
            plan.remote_changed,
            self._local_timestamp(asset.local_path),
            remote.updated_at,
        )
        return plan

    def _process_asset(
        self, asset: TrackedAsset, remote: Optional[RemoteAssetVersion]
    ) -> AssetOutcome:
        """Decide and sync one asset; never raises."""
        with self._lock_for(asset.asset_id):
            # Re-read under the lock; an overlapping pass may have advanced it
            current = self.db_service.get_tracked_asset(asset.asset_id)
            if current is None:
                return AssetOutcome(
                    asset_id=asset.asset_id,
                    slug=asset.slug,
                    status=OutcomeStatus.SKIPPED,
                    error="asset was untracked during the pass",
                )

            plan = self._evaluate(current, remote)
            if remote is None or plan.decision is None:
                logger.warning("Skipping %s: %s", current.slug, plan.reason)
                return AssetOutcome(
                    asset_id=current.asset_id,
                    slug=current.slug,
                    status=OutcomeStatus.SKIPPED,
                    remote_version=plan.remote_version,
                    error=plan.reason,
                )

            outcome = AssetOutcome(
                asset_id=current.asset_id,
                slug=current.slug,
                status=OutcomeStatus.UP_TO_DATE,
                decision=plan.decision,
                remote_version=plan.remote_version,
            )
            if plan.decision == SyncDecision.UP_TO_DATE:
                logger.debug("%s is up to date", current.slug)
                return outcome

            if plan.decision.is_conflict:
                winner = "local" if plan.decision.is_push else "server"
                logger.warning(
                    "Conflict on %s: both sides changed, %s copy is newer",
                    current.slug,
                    winner,
                )

            try:
                if plan.decision.is_push:
                    outcome.remote_version = self._push(current)
                else:
                    outcome.remote_version = self._pull(current, remote)
                outcome.status = OutcomeStatus.SYNCED
            except SyncError as e:
                outcome.status = OutcomeStatus.FAILED
                outcome.error = str(e)
                self._log_transfer_failure(current, plan.decision, e)
            except Exception as e:
                outcome.status = OutcomeStatus.FAILED
                outcome.error = f"Unexpected error: {e}"
                logger.exception(
                    "Unexpected error syncing %s (%s)", current.slug, plan.decision.value
                )

            return outcome

    def _push(self, asset: TrackedAsset) -> str:
        """Upload local content and persist the resulting state.

        Returns:
            The new server version
        """
        try:
            content = self.asset_store.read_content(asset.local_path)
        except OSError as e:
            raise TransferError(f"Cannot read local content: {e}") from e

        try:
            result = self.remote_store.upload_asset(asset.asset_id, content)
        except Exception as e:
            raise TransferError(f"Upload failed: {e}") from e

        content_fingerprint = fingerprint(content)
        self._commit_state(
            asset, content_fingerprint, result.version_id, SyncDirection.PUSH
        )
        self._report_sync(
            asset, result.version_id, content_fingerprint, SyncDirection.PUSH
        )
        logger.info("Pushed %s -> v%s", asset.slug, result.version_id)
        return result.version_id

    def _pull(self, asset: TrackedAsset, remote: RemoteAssetVersion) -> str:
        """Download server content, write it locally and persist the state.

        Returns:
            The server version now stored locally
        """
        try:
            content = self.remote_store.download_asset(asset.asset_id)
        except Exception as e:
            raise TransferError(f"Download failed: {e}") from e

        try:
            self.asset_store.write_content(asset.local_path, content)
        except OSError as e:
            raise TransferError(f"Cannot write local content: {e}") from e

        content_fingerprint = fingerprint(content)
        self._commit_state(
            asset, content_fingerprint, remote.version_id, SyncDirection.PULL
        )
        self._report_sync(
            asset, remote.version_id, content_fingerprint, SyncDirection.PULL
        )
        logger.info("Pulled %s -> v%s", asset.slug, remote.version_id)
        return remote.version_id

    def _commit_state(
        self,
        asset: TrackedAsset,
        content_fingerprint: str,
        remote_version: str,
        direction: SyncDirection,
    ) -> None:
        try:
            self.db_service.update_sync_state(
                asset.asset_id, content_fingerprint, remote_version, direction
            )
        except Exception as e:
            raise StateError(f"Cannot persist sync state: {e}") from e

    def _report_sync(
        self,
        asset: TrackedAsset,
        remote_version: str,
        content_fingerprint: str,
        direction: SyncDirection,
    ) -> None:
        """Tell the server what this machine holds; never fails the transfer."""
        try:
            self.remote_store.report_sync(
                asset.asset_id, remote_version, content_fingerprint, direction.value
            )
        except Exception as e:
            logger.warning("Could not report sync of %s to server: %s", asset.slug, e)

    # =========================================================================
    # Reporting
    # =========================================================================

    def _log_transfer_failure(
        self, asset: TrackedAsset, decision: SyncDecision, error: SyncError
    ) -> None:
        logger.error(
            "Sync failed for %s (%s): %s",
            asset.slug,
            decision.value,
            error,
            extra={
                "event": "transfer_failed",
                "asset_id": asset.asset_id,
                "decision": decision.value,
                "error_type": type(error).__name__,
            },
        )

    def _log_pass_summary(self, report: SyncReport) -> None:
        summary = report.get_summary()
        logger.info(
            "Sync pass complete: %s",
            summary,
            extra={"event": "sync_pass", "summary": summary},
        )

    def _record_pass(self, report: SyncReport) -> None:
        """Store the pass in the history table."""
        try:
            self.db_service.record_sync_pass(
                {
                    "status": report.status.value,
                    "assets_total": len(report.outcomes),
                    "pushed": report.pushed,
                    "pulled": report.pulled,
                    "conflicted": report.conflicted,
                    "failed": report.failed,
                    "skipped": report.skipped,
                    "details": json.dumps([o.to_dict() for o in report.outcomes]),
                    "error_message": "\n".join(report.errors) or None,
                    "started_at": report.started_at,
                    "completed_at": report.completed_at,
                }
            )
        except Exception as e:
            logger.warning("Failed to record sync pass: %s", e)

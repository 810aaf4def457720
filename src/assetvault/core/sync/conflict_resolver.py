"""Sync decision for a single asset.

Conflicts are resolved last-write-wins at whole-asset granularity: when both
sides changed, the side with the strictly later timestamp wins. Equal
timestamps resolve to ``CONFLICT_PULL`` (the server copy wins ties). That
tie-break is policy and must be preserved.
"""

from datetime import datetime
from enum import Enum


class SyncDecision(str, Enum):
    """What to do with an asset in this pass."""

    UP_TO_DATE = "up-to-date"
    PUSH = "push"
    PULL = "pull"
    CONFLICT_PUSH = "conflict-push"
    CONFLICT_PULL = "conflict-pull"

    @property
    def is_push(self) -> bool:
        """Whether local content goes to the server."""
        return self in (SyncDecision.PUSH, SyncDecision.CONFLICT_PUSH)

    @property
    def is_pull(self) -> bool:
        """Whether server content overwrites the local file."""
        return self in (SyncDecision.PULL, SyncDecision.CONFLICT_PULL)

    @property
    def is_conflict(self) -> bool:
        """Whether both sides had changed."""
        return self in (SyncDecision.CONFLICT_PUSH, SyncDecision.CONFLICT_PULL)


class ConflictResolver:
    """Maps change flags and timestamps to a ``SyncDecision``."""

    @staticmethod
    def decide(
        local_changed: bool,
        remote_changed: bool,
        local_timestamp: datetime,
        remote_timestamp: datetime,
    ) -> SyncDecision:
        """Decide which way an asset should be synced.

        Args:
            local_changed: Local content differs from the last synced content
            remote_changed: Server version differs from the last synced version
            local_timestamp: Last modification time of the local file
            remote_timestamp: Last update time reported by the server

        Returns:
            The sync decision. Timestamps only matter when both sides changed.
        """
        if not local_changed and not remote_changed:
            return SyncDecision.UP_TO_DATE
        if local_changed and not remote_changed:
            return SyncDecision.PUSH
        if not local_changed and remote_changed:
            return SyncDecision.PULL

        # Both changed: strict comparison, ties go to the server
        if local_timestamp > remote_timestamp:
            return SyncDecision.CONFLICT_PUSH
        return SyncDecision.CONFLICT_PULL


def decide(
    local_changed: bool,
    remote_changed: bool,
    local_timestamp: datetime,
    remote_timestamp: datetime,
) -> SyncDecision:
    """Module-level shortcut for ``ConflictResolver.decide``."""
    return ConflictResolver.decide(
        local_changed, remote_changed, local_timestamp, remote_timestamp
    )

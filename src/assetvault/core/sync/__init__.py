"""Synchronization module.

Handles change detection, sync decisions, pass orchestration and polling.
"""

from .conflict_resolver import ConflictResolver, SyncDecision, decide
from .errors import (
    FingerprintError,
    ListingError,
    StateError,
    SyncError,
    TransferError,
)
from .fingerprint import fingerprint, fingerprint_file
from .interfaces import AssetStore, RemoteStore
from .orchestrator import (
    AssetOutcome,
    AssetPlan,
    OutcomeStatus,
    SyncOrchestrator,
    SyncReport,
)
from .poller import PollHandle, Poller
from .watcher import FileWatcher, WatchedAssetStore

__all__ = [
    # Fingerprints
    "fingerprint",
    "fingerprint_file",
    # Decisions
    "ConflictResolver",
    "SyncDecision",
    "decide",
    # Orchestration
    "AssetOutcome",
    "AssetPlan",
    "OutcomeStatus",
    "SyncOrchestrator",
    "SyncReport",
    # Polling
    "PollHandle",
    "Poller",
    # Local change detection
    "FileWatcher",
    "WatchedAssetStore",
    # Collaborators
    "AssetStore",
    "RemoteStore",
    # Errors
    "SyncError",
    "FingerprintError",
    "TransferError",
    "ListingError",
    "StateError",
]

"""AssetVault sync agent.

Keeps local asset files in two-way sync with an AssetVault server: detects
local and remote changes, resolves conflicts last-write-wins, and pushes or
pulls each asset accordingly.
"""

__version__ = "1.0.0"

from .config import Config
from .core.sync import (
    ConflictResolver,
    Poller,
    SyncDecision,
    SyncOrchestrator,
    SyncReport,
    fingerprint,
)
from .database import DatabaseService
from .services import HttpRemoteStore, LocalAssetStore

__all__ = [
    "Config",
    "ConflictResolver",
    "DatabaseService",
    "HttpRemoteStore",
    "LocalAssetStore",
    "Poller",
    "SyncDecision",
    "SyncOrchestrator",
    "SyncReport",
    "fingerprint",
]

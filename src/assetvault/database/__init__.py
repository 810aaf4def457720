"""Database package: persisted sync state and pass history."""

from .models import PassStatus, SyncDirection, SyncPass, TrackedAsset
from .service import DatabaseService

__all__ = [
    # Models
    "TrackedAsset",
    "SyncPass",
    # Database service
    "DatabaseService",
    # Status enums
    "PassStatus",
    "SyncDirection",
]

"""Shared fixtures for the sync test suite."""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

import pytest

from assetvault.database import DatabaseService
from assetvault.models import RemoteAssetVersion, StorageType, UploadResult


class FakeRemoteStore:
    """In-memory RemoteStore that records every call."""

    def __init__(self) -> None:
        self.assets: Dict[str, Dict] = {}
        self.upload_calls: List[tuple] = []
        self.download_calls: List[str] = []
        self.list_calls = 0
        self.fail_listing = False
        self.fail_uploads: Set[str] = set()
        self.fail_downloads: Set[str] = set()
        self.sync_reports: List[tuple] = []
        self.fail_reports = False

    def add_asset(
        self,
        asset_id: str,
        content: bytes,
        updated_at: Optional[datetime] = None,
        storage_type: StorageType = StorageType.INLINE,
    ) -> None:
        self.assets[asset_id] = {
            "content": content,
            "version": 1,
            "updated_at": updated_at or datetime(2024, 1, 1, tzinfo=timezone.utc),
            "storage_type": storage_type,
        }

    def edit(self, asset_id: str, content: bytes, updated_at: datetime) -> None:
        asset = self.assets[asset_id]
        asset["content"] = content
        asset["version"] += 1
        asset["updated_at"] = updated_at

    def version_of(self, asset_id: str) -> str:
        return str(self.assets[asset_id]["version"])

    def list_asset_versions(self) -> List[RemoteAssetVersion]:
        self.list_calls += 1
        if self.fail_listing:
            raise ConnectionError("server unreachable")
        return [
            RemoteAssetVersion(
                id=asset_id,
                slug=asset_id,
                version_id=str(asset["version"]),
                updated_at=asset["updated_at"],
                storage_type=asset["storage_type"],
            )
            for asset_id, asset in self.assets.items()
        ]

    def upload_asset(self, asset_id: str, content: bytes) -> UploadResult:
        self.upload_calls.append((asset_id, content))
        if asset_id in self.fail_uploads:
            raise ConnectionError(f"upload of {asset_id} failed")
        asset = self.assets[asset_id]
        asset["content"] = content
        asset["version"] += 1
        asset["updated_at"] = datetime.now(timezone.utc)
        return UploadResult(
            version_id=str(asset["version"]), updated_at=asset["updated_at"]
        )

    def download_asset(self, asset_id: str) -> bytes:
        self.download_calls.append(asset_id)
        if asset_id in self.fail_downloads:
            raise ConnectionError(f"download of {asset_id} failed")
        return self.assets[asset_id]["content"]

    def report_sync(
        self, asset_id: str, synced_version: str, local_hash: str, direction: str
    ) -> None:
        if self.fail_reports:
            raise ConnectionError("sync report rejected")
        self.sync_reports.append((asset_id, synced_version, local_hash, direction))


@pytest.fixture
def db_service(tmp_path):
    """Create a temporary database service."""
    db = DatabaseService(tmp_path / "state" / "sync.db")
    db.init_db()
    return db


@pytest.fixture
def remote():
    """Create an empty fake remote store."""
    return FakeRemoteStore()

"""Collaborator interfaces consumed by the sync orchestrator.

Any object with matching methods works; the concrete implementations live in
``assetvault.services``.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Protocol, Union

from ...models import RemoteAssetVersion, UploadResult


class RemoteStore(Protocol):
    """The authoritative server holding asset content and versions."""

    def list_asset_versions(self) -> List[RemoteAssetVersion]:
        """Return the current version of every asset visible to this machine."""
        ...

    def upload_asset(self, asset_id: str, content: bytes) -> UploadResult:
        """Store new content for an asset and return the new version."""
        ...

    def download_asset(self, asset_id: str) -> bytes:
        """Fetch the current content of an asset."""
        ...

    def report_sync(
        self, asset_id: str, synced_version: str, local_hash: str, direction: str
    ) -> None:
        """Tell the server which version this machine now holds."""
        ...


class AssetStore(Protocol):
    """Local storage for asset replicas."""

    def read_content(self, path: Union[str, Path]) -> bytes:
        """Read a replica's bytes."""
        ...

    def write_content(self, path: Union[str, Path], content: bytes) -> None:
        """Replace a replica's bytes."""
        ...

    def modified_at(self, path: Union[str, Path]) -> datetime:
        """Last modification time of a replica."""
        ...

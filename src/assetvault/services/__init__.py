"""Concrete collaborators: local file storage and the server client."""

from .asset_store import LocalAssetStore
from .remote_store import HttpRemoteStore, RemoteStoreError

__all__ = [
    "LocalAssetStore",
    "HttpRemoteStore",
    "RemoteStoreError",
]

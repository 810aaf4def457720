"""HTTP client for the AssetVault server."""

import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from ..config import Config
from ..core.sync.fingerprint import fingerprint
from ..models import AssetContent, RemoteAssetVersion, StorageType, UploadResult

logger = logging.getLogger(__name__)


class RemoteStoreError(Exception):
    """Raised when the server cannot be reached or rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        """Initialize error.

        Args:
            message: Error message, taken from the server's body when present
            status_code: HTTP status, if a response was received
        """
        super().__init__(message)
        self.status_code = status_code


class HttpRemoteStore:
    """RemoteStore backed by the server's CLI API.

    Requests are authenticated with a bearer API key. Server errors (5xx) are
    retried with exponential backoff; anything else fails immediately.
    """

    def __init__(
        self,
        server_url: str,
        api_key: str,
        machine_id: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        base_delay: float = 1.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the client.

        Args:
            server_url: Base URL of the server
            api_key: API key sent as a bearer token
            machine_id: Registered machine this agent syncs for
            timeout: Per-request timeout in seconds
            max_retries: Retries for server errors
            base_delay: First retry delay in seconds (doubles each retry)
            session: Optional preconfigured requests session
        """
        self.server_url = server_url.rstrip("/")
        self.machine_id = machine_id
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    @classmethod
    def from_config(cls, config: Config) -> "HttpRemoteStore":
        """Build a client from application configuration."""
        config.validate_remote()
        return cls(
            server_url=config.server_url,
            api_key=config.api_key,
            machine_id=config.machine_id,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
        )

    # =========================================================================
    # RemoteStore API
    # =========================================================================

    def list_asset_versions(self) -> List[RemoteAssetVersion]:
        """Fetch the sync manifest for this machine."""
        data = self._request(
            "GET",
            f"/api/cli/sync-manifest?machineId={quote(self.machine_id, safe='')}",
        )
        assets = data.get("assets", [])
        try:
            return [RemoteAssetVersion.model_validate(asset) for asset in assets]
        except ValueError as e:
            raise RemoteStoreError(f"Malformed sync manifest: {e}") from e

    def upload_asset(self, asset_id: str, content: bytes) -> UploadResult:
        """Replace an asset's content on the server."""
        text = self._decode(asset_id, content)
        data = self._request(
            "PUT",
            f"/api/cli/assets/{quote(asset_id, safe='')}/content",
            json={
                "content": text,
                "localHash": fingerprint(content),
                "machineId": self.machine_id,
            },
        )
        try:
            return UploadResult.model_validate(data)
        except ValueError as e:
            raise RemoteStoreError(f"Malformed upload response: {e}") from e

    def download_asset(self, asset_id: str) -> bytes:
        """Fetch an asset's current content."""
        data = self._request(
            "GET", f"/api/cli/assets/{quote(asset_id, safe='')}/content"
        )
        try:
            asset_content = AssetContent.model_validate(data)
        except ValueError as e:
            raise RemoteStoreError(f"Malformed content response: {e}") from e

        if asset_content.type == StorageType.BUNDLE:
            raise RemoteStoreError(
                f"Asset {asset_id} is a bundle, download it from "
                f"{asset_content.bundle_url or 'the web UI'}"
            )
        return (asset_content.content or "").encode("utf-8")

    def report_sync(
        self, asset_id: str, synced_version: str, local_hash: str, direction: str
    ) -> None:
        """Record on the server which version this machine now holds.

        Feeds the server's per-machine sync view.
        """
        self._request(
            "POST",
            "/api/cli/sync",
            json={
                "machineId": self.machine_id,
                "assetId": asset_id,
                "syncedVersion": synced_version,
                "localHash": local_hash,
                "direction": direction,
            },
        )

    # =========================================================================
    # HTTP plumbing
    # =========================================================================

    @staticmethod
    def _decode(asset_id: str, content: bytes) -> str:
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RemoteStoreError(
                f"Asset {asset_id} content is not valid UTF-8 text"
            ) from e

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        """Send a request, retrying server errors with exponential backoff.

        Returns:
            Decoded JSON body

        Raises:
            RemoteStoreError: On connection failure, non-2xx status, or a body
                that is not JSON
        """
        url = f"{self.server_url}{path}"

        for attempt in range(self.max_retries + 1):
            try:
                response = self.session.request(
                    method, url, timeout=self.timeout, **kwargs
                )
            except requests.exceptions.RequestException as e:
                raise RemoteStoreError(f"{method} {path} failed: {e}") from e

            if response.ok:
                try:
                    return response.json()
                except ValueError as e:
                    raise RemoteStoreError(
                        f"{method} {path} returned invalid JSON",
                        response.status_code,
                    ) from e

            error = RemoteStoreError(
                self._error_message(response), response.status_code
            )
            if 500 <= response.status_code < 600 and attempt < self.max_retries:
                delay = self.base_delay * (2**attempt)
                logger.warning(
                    "Server error %s on %s %s, retrying in %.1fs... (attempt %d/%d)",
                    response.status_code,
                    method,
                    path,
                    delay,
                    attempt + 1,
                    self.max_retries,
                )
                time.sleep(delay)
                continue
            raise error

        raise RemoteStoreError(f"{method} {path} was not attempted")

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        """Prefer the server's ``{"error": ...}`` message over the status."""
        try:
            data = response.json()
        except ValueError:
            data = {}
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return f"HTTP {response.status_code}"

"""Tests for HttpRemoteStore."""

from datetime import datetime, timezone
from unittest.mock import Mock, patch

import pytest
import requests

from assetvault.config import Config, ConfigError
from assetvault.core.sync import fingerprint
from assetvault.models import StorageType
from assetvault.services import HttpRemoteStore, RemoteStoreError


def _response(status_code=200, json_data=None, json_error=False):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = json_data if json_data is not None else {}
    return response


@pytest.fixture
def session():
    """Create a mock requests session."""
    mock_session = Mock()
    mock_session.headers = {}
    return mock_session


@pytest.fixture
def store(session):
    """Create HttpRemoteStore with no retry delay."""
    return HttpRemoteStore(
        server_url="https://vault.example.com/",
        api_key="secret-key",
        machine_id="machine-1",
        max_retries=2,
        base_delay=0,
        session=session,
    )


class TestHttpRemoteStoreSetup:
    """Test client construction."""

    def test_headers(self, store, session):
        """Requests carry the bearer key."""
        assert session.headers["Authorization"] == "Bearer secret-key"
        assert session.headers["Content-Type"] == "application/json"
        assert store.server_url == "https://vault.example.com"

    def test_from_config_requires_settings(self, monkeypatch, tmp_path):
        """Missing server settings are reported before any request."""
        monkeypatch.setenv("ASSETVAULT_DATABASE_PATH", str(tmp_path / "sync.db"))
        monkeypatch.setenv("ASSETVAULT_API_KEY", "")
        monkeypatch.setenv("ASSETVAULT_MACHINE_ID", "")

        with pytest.raises(ConfigError, match="ASSETVAULT_API_KEY"):
            HttpRemoteStore.from_config(Config())


class TestListAssetVersions:
    """Test the sync manifest call."""

    def test_parses_manifest(self, store, session):
        """Manifest entries become RemoteAssetVersion objects."""
        session.request.return_value = _response(
            json_data={
                "assets": [
                    {
                        "id": "a1",
                        "slug": "deploy",
                        "currentVersion": 4,
                        "updatedAt": "2024-01-02T10:00:00Z",
                        "storageType": "INLINE",
                    },
                    {
                        "id": "a2",
                        "slug": "site",
                        "currentVersion": "9",
                        "updatedAt": "2024-01-03T10:00:00+02:00",
                        "storageType": "BUNDLE",
                    },
                ]
            }
        )

        versions = store.list_asset_versions()

        session.request.assert_called_once_with(
            "GET",
            "https://vault.example.com/api/cli/sync-manifest?machineId=machine-1",
            timeout=30.0,
        )
        assert versions[0].version_id == "4"
        assert versions[0].updated_at == datetime(
            2024, 1, 2, 10, 0, tzinfo=timezone.utc
        )
        assert versions[0].is_transferable is True
        assert versions[1].storage_type == StorageType.BUNDLE
        assert versions[1].updated_at == datetime(2024, 1, 3, 8, 0, tzinfo=timezone.utc)
        assert versions[1].is_transferable is False

    def test_malformed_manifest(self, store, session):
        """Entries missing required fields are rejected."""
        session.request.return_value = _response(json_data={"assets": [{"id": "a1"}]})

        with pytest.raises(RemoteStoreError, match="Malformed sync manifest"):
            store.list_asset_versions()


class TestUploadDownload:
    """Test content transfer calls."""

    def test_upload(self, store, session):
        """Upload sends content, hash and machine id."""
        session.request.return_value = _response(
            json_data={"version": 5, "updatedAt": "2024-01-02T00:00:00Z"}
        )

        result = store.upload_asset("a1", b"echo hi\n")

        args, kwargs = session.request.call_args
        assert args == ("PUT", "https://vault.example.com/api/cli/assets/a1/content")
        assert kwargs["json"] == {
            "content": "echo hi\n",
            "localHash": fingerprint(b"echo hi\n"),
            "machineId": "machine-1",
        }
        assert result.version_id == "5"

    def test_upload_non_text(self, store, session):
        """Binary content cannot be sent inline."""
        with pytest.raises(RemoteStoreError, match="not valid UTF-8"):
            store.upload_asset("a1", b"\xff\xfe")
        session.request.assert_not_called()

    def test_download(self, store, session):
        """Inline content is returned as UTF-8 bytes."""
        session.request.return_value = _response(
            json_data={"type": "INLINE", "content": "héllo", "version": 3}
        )

        assert store.download_asset("a1") == "héllo".encode("utf-8")

    def test_download_bundle(self, store, session):
        """Bundles cannot be downloaded inline."""
        session.request.return_value = _response(
            json_data={"type": "BUNDLE", "bundleUrl": "https://cdn/x.zip"}
        )

        with pytest.raises(RemoteStoreError, match="bundle"):
            store.download_asset("a1")


class TestReportSync:
    """Test the per-machine sync report."""

    def test_report_sync(self, store, session):
        """The report names the machine, asset, version and direction."""
        session.request.return_value = _response(json_data={"ok": True})

        store.report_sync("a1", "5", "abc123", "pull")

        session.request.assert_called_once_with(
            "POST",
            "https://vault.example.com/api/cli/sync",
            timeout=30.0,
            json={
                "machineId": "machine-1",
                "assetId": "a1",
                "syncedVersion": "5",
                "localHash": "abc123",
                "direction": "pull",
            },
        )

    def test_report_sync_rejected(self, store, session):
        """Server rejections surface as RemoteStoreError."""
        session.request.return_value = _response(
            404, {"error": "Machine not found or not authorized"}
        )

        with pytest.raises(RemoteStoreError, match="Machine not found"):
            store.report_sync("a1", "5", "abc123", "push")


class TestErrorHandling:
    """Test retries and error reporting."""

    def test_client_error_not_retried(self, store, session):
        """4xx fails at once with the server's message."""
        session.request.return_value = _response(404, {"error": "Asset not found"})

        with pytest.raises(RemoteStoreError, match="Asset not found") as exc_info:
            store.download_asset("missing")

        assert exc_info.value.status_code == 404
        assert session.request.call_count == 1

    def test_error_without_body(self, store, session):
        """Non-JSON error bodies fall back to the status."""
        session.request.return_value = _response(403, json_error=True)

        with pytest.raises(RemoteStoreError, match="HTTP 403"):
            store.list_asset_versions()

    @patch("assetvault.services.remote_store.time.sleep")
    def test_server_error_retried(self, mock_sleep, store, session):
        """5xx is retried and a later success is returned."""
        session.request.side_effect = [
            _response(502),
            _response(json_data={"assets": []}),
        ]

        assert store.list_asset_versions() == []
        assert session.request.call_count == 2
        mock_sleep.assert_called_once_with(0)

    @patch("assetvault.services.remote_store.time.sleep")
    def test_backoff_doubles(self, mock_sleep, session):
        """Retry delays grow exponentially."""
        store = HttpRemoteStore(
            "https://vault.example.com",
            "k",
            "m",
            max_retries=3,
            base_delay=1.0,
            session=session,
        )
        session.request.return_value = _response(503)

        with pytest.raises(RemoteStoreError) as exc_info:
            store.list_asset_versions()

        assert exc_info.value.status_code == 503
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0, 4.0]
        assert session.request.call_count == 4

    def test_connection_error(self, store, session):
        """Network failures become RemoteStoreError."""
        session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(RemoteStoreError, match="refused") as exc_info:
            store.list_asset_versions()

        assert exc_info.value.status_code is None

    def test_invalid_json(self, store, session):
        """A 2xx body that is not JSON is an error."""
        session.request.return_value = _response(200, json_error=True)

        with pytest.raises(RemoteStoreError, match="invalid JSON"):
            store.download_asset("a1")

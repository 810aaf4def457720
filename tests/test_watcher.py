"""Tests for FileWatcher and WatchedAssetStore."""

import threading
import time
from unittest.mock import Mock

import pytest

from assetvault.core.sync import FileWatcher, WatchedAssetStore

WAIT = 5.0


@pytest.fixture
def observer():
    """Create a mock watchdog observer."""
    return Mock()


@pytest.fixture
def watcher(observer):
    """Create FileWatcher with a short debounce and no real observer."""
    w = FileWatcher(debounce=0.05, observer_factory=lambda: observer)
    yield w
    w.unwatch_all()


class TestWatchRegistration:
    """Test watch/unwatch bookkeeping."""

    def test_watch_schedules_directory_once(self, watcher, observer, tmp_path):
        """Files sharing a directory share one observer watch."""
        assert watcher.watch(tmp_path / "a.txt", lambda: None) is True
        assert watcher.watch(tmp_path / "b.txt", lambda: None) is True

        assert watcher.watch_count == 2
        observer.schedule.assert_called_once()
        assert observer.schedule.call_args.args[1] == str(tmp_path.resolve())

    def test_watch_missing_directory(self, watcher, observer, tmp_path):
        """A file in a missing directory cannot be watched."""
        assert watcher.watch(tmp_path / "nope" / "a.txt", lambda: None) is False
        assert watcher.watch_count == 0
        observer.schedule.assert_not_called()

    def test_unwatch_last_file_unschedules(self, watcher, observer, tmp_path):
        """The directory watch is dropped with its last file."""
        watcher.watch(tmp_path / "a.txt", lambda: None)
        watcher.watch(tmp_path / "b.txt", lambda: None)

        watcher.unwatch(tmp_path / "a.txt")
        observer.unschedule.assert_not_called()

        watcher.unwatch(tmp_path / "b.txt")
        observer.unschedule.assert_called_once_with(observer.schedule.return_value)
        assert watcher.watch_count == 0


class TestChangeDelivery:
    """Test debouncing and muting."""

    def test_burst_debounced_to_one_call(self, watcher, tmp_path):
        """Several events in quick succession trigger one callback."""
        path = tmp_path / "a.txt"
        path.write_bytes(b"x")
        calls = []
        fired = threading.Event()

        def on_change():
            calls.append(1)
            fired.set()

        watcher.watch(path, on_change)
        for _ in range(5):
            watcher.notify(str(path))

        assert fired.wait(WAIT)
        time.sleep(0.2)
        assert calls == [1]

    def test_untracked_path_ignored(self, watcher, tmp_path):
        """Events for other files in the directory do nothing."""
        path = tmp_path / "a.txt"
        path.write_bytes(b"x")
        callback = Mock()
        watcher.watch(path, callback)

        watcher.notify(str(tmp_path / "other.txt"))
        time.sleep(0.2)

        callback.assert_not_called()

    def test_muted_path_ignored(self, watcher, tmp_path):
        """Events inside the mute window are dropped."""
        path = tmp_path / "a.txt"
        path.write_bytes(b"x")
        callback = Mock()
        watcher.watch(path, callback)

        watcher.mute(path, seconds=10)
        watcher.notify(str(path))
        time.sleep(0.2)

        callback.assert_not_called()

    def test_deleted_file_not_reported(self, watcher, tmp_path):
        """A file gone by the time the debounce ends is not synced."""
        path = tmp_path / "a.txt"
        path.write_bytes(b"x")
        callback = Mock()
        watcher.watch(path, callback)

        watcher.notify(str(path))
        path.unlink()
        time.sleep(0.2)

        callback.assert_not_called()

    def test_callback_error_logged(self, watcher, tmp_path):
        """A failing callback does not break later deliveries."""
        path = tmp_path / "a.txt"
        path.write_bytes(b"x")
        fired = threading.Event()
        calls = []

        def on_change():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("sync failed")
            fired.set()

        watcher.watch(path, on_change)
        watcher.notify(str(path))
        time.sleep(0.2)
        watcher.notify(str(path))

        assert fired.wait(WAIT)
        assert len(calls) == 2


class TestWatchedAssetStore:
    """Test writes that must not look like local edits."""

    def test_write_mutes_path(self, watcher, tmp_path):
        """Writing a pulled file does not trigger a push."""
        path = tmp_path / "a.txt"
        path.write_bytes(b"old")
        callback = Mock()
        watcher.watch(path, callback)
        store = WatchedAssetStore(watcher)

        store.write_content(path, b"pulled")
        watcher.notify(str(path))
        time.sleep(0.2)

        assert path.read_bytes() == b"pulled"
        callback.assert_not_called()


class TestRealObserver:
    """End to end with watchdog's observer."""

    def test_edit_triggers_callback(self, tmp_path):
        """Editing a watched file on disk reaches the callback."""
        path = tmp_path / "a.txt"
        path.write_bytes(b"v1")
        fired = threading.Event()

        file_watcher = FileWatcher(debounce=0.05)
        file_watcher.watch(path, fired.set)
        file_watcher.start()
        try:
            time.sleep(0.2)
            path.write_bytes(b"v2")
            assert fired.wait(WAIT)
        finally:
            file_watcher.stop(timeout=WAIT)

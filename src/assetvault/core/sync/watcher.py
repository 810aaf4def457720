"""File watcher that triggers a sync as soon as a tracked file is edited.

Bursts of filesystem events for one file are debounced into a single
callback. watchdog observes directories, so each tracked file's parent
directory is scheduled once and events are matched back to tracked paths.
"""

import logging
import os
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ...services.asset_store import LocalAssetStore

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], object]
PathLike = Union[str, Path]

DEFAULT_DEBOUNCE = 2.0


def _normalize(path: PathLike) -> str:
    return str(Path(os.fsdecode(path)).expanduser().resolve())


class _TrackedFileHandler(FileSystemEventHandler):
    """Forwards events that touch a watched file to its FileWatcher."""

    def __init__(self, watcher: "FileWatcher") -> None:
        self.watcher = watcher

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.watcher.notify(event.src_path)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.watcher.notify(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save via rename show up as a move onto the tracked path
        if not event.is_directory:
            self.watcher.notify(event.dest_path)


class FileWatcher:
    """Calls a per-file callback after a tracked file stops changing.

    ``mute`` ignores events for a path for a short window, so content the
    sync itself writes (a pull) does not bounce straight back as a push.
    """

    def __init__(
        self,
        debounce: float = DEFAULT_DEBOUNCE,
        observer_factory: Callable[[], Any] = Observer,
    ) -> None:
        """Initialize watcher.

        Args:
            debounce: Seconds a file must be quiet before its callback runs
            observer_factory: Builds the watchdog observer
        """
        self.debounce = debounce
        self._observer = observer_factory()
        self._handler = _TrackedFileHandler(self)
        self._lock = threading.Lock()

        self._callbacks: Dict[str, ChangeCallback] = {}
        self._directories: Dict[str, Any] = {}  # directory -> ObservedWatch
        self._timers: Dict[str, threading.Timer] = {}
        self._muted_until: Dict[str, float] = {}

    @property
    def watch_count(self) -> int:
        """Number of files being watched."""
        return len(self._callbacks)

    def start(self) -> None:
        """Start delivering filesystem events."""
        self._observer.start()

    def stop(self, timeout: Optional[float] = 10.0) -> None:
        """Stop watching everything and wait for the observer thread."""
        self.unwatch_all()
        self._observer.stop()
        self._observer.join(timeout)

    def watch(self, path: PathLike, on_change: ChangeCallback) -> bool:
        """Watch one file.

        Returns:
            False if the file's directory does not exist, so nothing can be
            observed yet
        """
        key = _normalize(path)
        directory = str(Path(key).parent)
        if not os.path.isdir(directory):
            logger.debug("Not watching %s: %s does not exist", key, directory)
            return False

        with self._lock:
            self._callbacks[key] = on_change
            if directory not in self._directories:
                self._directories[directory] = self._observer.schedule(
                    self._handler, directory, recursive=False
                )
        logger.debug("Watching %s", key)
        return True

    def unwatch(self, path: PathLike) -> None:
        """Stop watching one file and drop any pending callback."""
        key = _normalize(path)
        with self._lock:
            self._callbacks.pop(key, None)
            self._muted_until.pop(key, None)
            timer = self._timers.pop(key, None)
            if timer is not None:
                timer.cancel()

            directory = str(Path(key).parent)
            still_used = any(
                str(Path(other).parent) == directory for other in self._callbacks
            )
            watch = None if still_used else self._directories.pop(directory, None)

        if watch is not None:
            self._observer.unschedule(watch)

    def unwatch_all(self) -> None:
        """Stop watching every file."""
        for key in list(self._callbacks):
            self.unwatch(key)

    def mute(self, path: PathLike, seconds: Optional[float] = None) -> None:
        """Ignore events for ``path`` for ``seconds`` (default: the debounce)."""
        key = _normalize(path)
        window = self.debounce if seconds is None else seconds
        with self._lock:
            self._muted_until[key] = time.monotonic() + window
            timer = self._timers.pop(key, None)
            if timer is not None:
                timer.cancel()

    def notify(self, path: PathLike) -> None:
        """Handle an event for ``path``, restarting its debounce timer."""
        key = _normalize(path)
        with self._lock:
            if key not in self._callbacks:
                return
            if time.monotonic() < self._muted_until.get(key, 0.0):
                return

            existing = self._timers.get(key)
            if existing is not None:
                existing.cancel()

            timer = threading.Timer(self.debounce, self._fire, args=(key,))
            timer.daemon = True
            self._timers[key] = timer
            timer.start()

    def _fire(self, key: str) -> None:
        with self._lock:
            if self._timers.get(key) is threading.current_thread():
                del self._timers[key]
            callback = self._callbacks.get(key)

        if callback is None or not os.path.isfile(key):
            return

        logger.info("Local change detected: %s", key)
        try:
            callback()
        except Exception as e:
            logger.exception("Change handler for %s failed: %s", key, e)


class WatchedAssetStore(LocalAssetStore):
    """LocalAssetStore that mutes the watcher for files it writes."""

    def __init__(self, watcher: FileWatcher) -> None:
        self.watcher = watcher

    def write_content(self, path: PathLike, content: bytes) -> None:
        """Write a replica without it registering as a local edit."""
        self.watcher.mute(path)
        super().write_content(path, content)

"""Recurring scheduler that drives sync passes."""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

TickCallback = Callable[[], object]


@dataclass
class PollHandle:
    """One live schedule: a worker thread and the event that stops it."""

    thread: threading.Thread
    stop_event: threading.Event
    interval: float

    def cancel(self) -> None:
        """Prevent further ticks; a tick already running is left to finish."""
        self.stop_event.set()


class Poller:
    """Calls ``on_tick`` every ``interval`` seconds until stopped.

    A Poller owns at most one PollHandle. ``start`` replaces any running
    schedule and ``stop`` cancels it; they are the only mutators. A tick that
    raises is logged and counted, and the schedule carries on. A tick that
    comes due while the previous one is still running is skipped instead of
    overlapping it.
    """

    def __init__(self, name: str = "assetvault-poller") -> None:
        """Initialize poller.

        Args:
            name: Name given to worker threads
        """
        self.name = name
        self._handle: Optional[PollHandle] = None
        self._last_thread: Optional[threading.Thread] = None
        self._state_lock = threading.Lock()
        self._in_flight = threading.Lock()

        self.tick_count = 0
        self.failed_ticks = 0
        self.skipped_ticks = 0
        self.last_error: Optional[BaseException] = None

    @property
    def is_running(self) -> bool:
        """Whether a schedule is active."""
        return self._handle is not None

    def start(self, interval: float, on_tick: TickCallback) -> None:
        """Start calling ``on_tick`` every ``interval`` seconds.

        The first tick happens one interval after starting. Any schedule
        already running is stopped first.

        Args:
            interval: Seconds between ticks
            on_tick: Callback invoked on each tick
        """
        if interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {interval}")

        with self._state_lock:
            self._cancel_current()

            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(interval, on_tick, stop_event),
                name=self.name,
                daemon=True,
            )
            self._handle = PollHandle(
                thread=thread, stop_event=stop_event, interval=interval
            )
            thread.start()

        logger.info("Polling every %.1fs", interval)

    def stop(self) -> None:
        """Cancel the schedule. Does nothing if already stopped."""
        with self._state_lock:
            if self._handle is None:
                return
            self._cancel_current()
        logger.info("Polling stopped")

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the worker thread to exit.

        After ``stop`` this waits for the stopped worker, including a tick it
        is still running.
        """
        handle = self._handle
        thread = handle.thread if handle is not None else self._last_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _cancel_current(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._last_thread = self._handle.thread
            self._handle = None

    def _run(
        self, interval: float, on_tick: TickCallback, stop_event: threading.Event
    ) -> None:
        while not stop_event.wait(interval):
            self._tick(on_tick)
        logger.debug("Poll worker exiting")

    def _tick(self, on_tick: TickCallback) -> None:
        """Run one tick unless the previous tick is still running."""
        if not self._in_flight.acquire(blocking=False):
            self.skipped_ticks += 1
            logger.warning("Previous poll still running, skipping this tick")
            return

        try:
            self.tick_count += 1
            on_tick()
        except Exception as e:
            self.failed_ticks += 1
            self.last_error = e
            logger.exception("Poll tick failed: %s", e)
        finally:
            self._in_flight.release()

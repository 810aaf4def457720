"""CLI command modules."""

from .assets import track_command, untrack_command
from .history import history_command
from .init import InitializationError, init_db, init_orchestrator, init_remote
from .status import status_command
from .sync import sync_command, watch_command

__all__ = [
    "InitializationError",
    "init_db",
    "init_orchestrator",
    "init_remote",
    "track_command",
    "untrack_command",
    "status_command",
    "sync_command",
    "watch_command",
    "history_command",
]

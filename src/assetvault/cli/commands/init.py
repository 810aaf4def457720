"""Service construction shared by CLI commands.

- init_db() -> DatabaseService
- init_remote() -> HttpRemoteStore
- init_orchestrator() -> SyncOrchestrator
"""

import logging
from typing import Optional

from ...config import Config, ConfigError
from ...core.sync import AssetStore, SyncOrchestrator
from ...database import DatabaseService
from ...services import HttpRemoteStore

logger = logging.getLogger(__name__)


class InitializationError(Exception):
    """Raised when initialization fails."""

    pass


def init_db(config: Optional[Config] = None) -> DatabaseService:
    """Open the sync state database, creating its schema if needed.

    Raises:
        InitializationError: If the database cannot be initialized
    """
    if config is None:
        config = Config()

    try:
        db_service = DatabaseService(db_path=config.database_path)

        if not db_service.is_initialized():
            logger.info("Initializing database schema...")
            db_service.init_db()

        stats = db_service.get_statistics()
        logger.debug("Database connected: %d tracked assets", stats["tracked_assets"])
        return db_service

    except Exception as e:
        logger.exception("Database initialization failed")
        raise InitializationError(f"Database initialization failed: {e}") from e


def init_remote(config: Optional[Config] = None) -> HttpRemoteStore:
    """Build the server client.

    Raises:
        InitializationError: If server settings are missing
    """
    if config is None:
        config = Config()

    try:
        return HttpRemoteStore.from_config(config)
    except ConfigError as e:
        raise InitializationError(str(e)) from e


def init_orchestrator(
    config: Optional[Config] = None,
    db_service: Optional[DatabaseService] = None,
    asset_store: Optional[AssetStore] = None,
) -> SyncOrchestrator:
    """Build a SyncOrchestrator wired to the database and server."""
    if config is None:
        config = Config()
    if db_service is None:
        db_service = init_db(config)

    return SyncOrchestrator(
        db_service=db_service,
        remote_store=init_remote(config),
        asset_store=asset_store,
    )

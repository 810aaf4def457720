"""Logging configuration for the AssetVault sync agent.

Console output goes through rich so log lines match the CLI's tables; the
optional log file gets plain, timestamped lines.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s - %(name)-40s - %(levelname)-8s - %(message)s"

NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "sqlalchemy.orm",
    "urllib3",
    "requests",
    "watchdog",
)


def _console_handler(level: int) -> logging.Handler:
    # stderr keeps logs out of command output that may be piped
    handler = RichHandler(
        console=Console(stderr=True),
        level=level,
        show_path=level <= logging.DEBUG,
        rich_tracebacks=True,
        markup=False,
        log_time_format="%H:%M:%S",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def _file_handler(
    log_file: Path, level: int, max_file_size: int, backup_count: int
) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=max_file_size, backupCount=backup_count
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """Set up application logging.

    Replaces any handlers already on the root logger, so calling it again
    (each CLI invocation does) does not duplicate output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a rotating log file
        console_output: Whether to log to the console
        max_file_size: Maximum size of log file before rotation
        backup_count: Number of rotated log files to keep
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_output:
        root_logger.addHandler(_console_handler(level))
    if log_file:
        root_logger.addHandler(
            _file_handler(log_file, level, max_file_size, backup_count)
        )

    logger = logging.getLogger(__name__)
    logger.debug("Logging initialized at %s", log_level.upper())
    if log_file:
        logger.info("Logging to %s", log_file)


def configure_third_party_loggers(level: int = logging.WARNING) -> None:
    """Keep library loggers (SQLAlchemy, HTTP, watchdog) at ``level``."""
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)

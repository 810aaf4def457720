"""Command-line interface for the AssetVault sync agent.

This is the main entry point that delegates to command modules.
"""

from pathlib import Path
from typing import Any, Optional

import click

from ..config import Config
from ..utils.logging_config import configure_third_party_loggers, setup_logging
from .commands import (
    history_command,
    status_command,
    sync_command,
    track_command,
    untrack_command,
    watch_command,
)


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set logging level",
)
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.pass_context
def cli(ctx: Any, log_level: str, log_file: Optional[str]) -> None:
    """AssetVault sync agent.

    Keeps local asset files and the AssetVault server in sync.
    """
    setup_logging(log_level=log_level, log_file=Path(log_file) if log_file else None)
    configure_third_party_loggers()

    ctx.obj = Config()


cli.add_command(track_command)
cli.add_command(untrack_command)
cli.add_command(status_command)
cli.add_command(sync_command)
cli.add_command(watch_command)
cli.add_command(history_command)


if __name__ == "__main__":
    cli()

"""History command: recorded sync passes."""

import click
from rich.console import Console
from rich.table import Table

from ...config import Config
from .init import init_db

console = Console()


@click.command("history")
@click.option("--limit", "-n", default=10, show_default=True, help="Passes to show")
@click.pass_obj
def history_command(config: Config, limit: int) -> None:
    """Show recent sync passes, newest first."""
    passes = init_db(config).get_recent_passes(limit=limit)
    if not passes:
        console.print("[dim]No sync passes recorded yet.[/dim]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Started", style="cyan")
    table.add_column("Status")
    for column in ("Pushed", "Pulled", "Conflicts", "Failed", "Skipped"):
        table.add_column(column, justify="right")
    table.add_column("Errors", style="dim")

    for sync_pass in passes:
        table.add_row(
            sync_pass.started_at.strftime("%Y-%m-%d %H:%M:%S"),
            sync_pass.status,
            str(sync_pass.pushed),
            str(sync_pass.pulled),
            str(sync_pass.conflicted),
            str(sync_pass.failed),
            str(sync_pass.skipped),
            (sync_pass.error_message or "").splitlines()[0]
            if sync_pass.error_message
            else "",
        )

    console.print(table)

"""Status command: what the next sync would do."""

import logging

import click
from rich.console import Console
from rich.table import Table

from ...config import Config
from ...core.sync import AssetPlan, SyncDecision
from .init import init_orchestrator

console = Console()
logger = logging.getLogger(__name__)

_DECISION_STYLES = {
    SyncDecision.UP_TO_DATE: "[green]Up to date[/green]",
    SyncDecision.PUSH: "[cyan]Local changed[/cyan]",
    SyncDecision.PULL: "[yellow]Outdated[/yellow]",
    SyncDecision.CONFLICT_PUSH: "[magenta]Conflict (local newer)[/magenta]",
    SyncDecision.CONFLICT_PULL: "[magenta]Conflict (server newer)[/magenta]",
}


def _describe(plan: AssetPlan) -> str:
    if plan.decision is None:
        return f"[dim]Skipped: {plan.reason}[/dim]"
    if plan.synced_version is None:
        return "[bright_black]Not synced[/bright_black]"
    return _DECISION_STYLES[plan.decision]


@click.command("status")
@click.pass_obj
def status_command(config: Config) -> None:
    """Show the sync status of every tracked asset."""
    try:
        plans = init_orchestrator(config).plan()
    except Exception as e:
        logger.exception("Status failed")
        console.print(f"[bold red]❌ Status failed: {e}[/bold red]")
        raise click.Abort()

    if not plans:
        console.print(
            "No assets tracked. Run `assetvault track <asset-id> <path>` "
            "to get started."
        )
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Asset", style="cyan")
    table.add_column("Server", justify="right")
    table.add_column("Synced", justify="right")
    table.add_column("Status")

    for plan in plans:
        table.add_row(
            plan.slug,
            f"v{plan.remote_version}" if plan.remote_version else "???",
            f"v{plan.synced_version}" if plan.synced_version else "—",
            _describe(plan),
        )

    console.print(table)

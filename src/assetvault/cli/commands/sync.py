"""Sync and watch commands."""

import logging
import time
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ...config import Config
from ...core.sync import (
    FileWatcher,
    OutcomeStatus,
    Poller,
    SyncReport,
    WatchedAssetStore,
)
from ...core.sync.watcher import DEFAULT_DEBOUNCE
from .init import init_orchestrator

console = Console()
logger = logging.getLogger(__name__)

_STATUS_STYLES = {
    OutcomeStatus.UP_TO_DATE: "dim",
    OutcomeStatus.SYNCED: "green",
    OutcomeStatus.FAILED: "bold red",
    OutcomeStatus.SKIPPED: "yellow",
}


def _display_report(report: SyncReport) -> None:
    """Print per-asset outcomes and totals."""
    if not report.outcomes:
        console.print("[dim]No tracked assets. Nothing to sync.[/dim]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Asset", style="cyan")
    table.add_column("Decision")
    table.add_column("Result")
    table.add_column("Version", justify="right")
    table.add_column("Detail", style="dim")

    for outcome in report.outcomes:
        style = _STATUS_STYLES[outcome.status]
        table.add_row(
            outcome.slug,
            outcome.decision.value if outcome.decision else "—",
            f"[{style}]{outcome.status.value}[/{style}]",
            f"v{outcome.remote_version}" if outcome.remote_version else "",
            outcome.error or "",
        )

    console.print(table)
    console.print(
        f"Pushed {report.pushed}, pulled {report.pulled}, "
        f"conflicts {report.conflicted}, failed {report.failed}, "
        f"skipped {report.skipped}"
    )


@click.command("sync")
@click.option("--asset", "-a", "asset_id", help="Sync only this asset id")
@click.pass_obj
def sync_command(config: Config, asset_id: Optional[str]) -> None:
    """Run one sync pass: push local changes and pull server updates."""
    try:
        console.print("[bold blue]🔄 Syncing...[/bold blue]")
        report = init_orchestrator(config).run_sync(asset_id=asset_id)
    except Exception as e:
        logger.exception("Sync failed")
        console.print(f"[bold red]❌ Sync failed: {e}[/bold red]")
        raise click.Abort()

    _display_report(report)

    if report.failed:
        console.print("[bold red]❌ Some assets failed to sync[/bold red]")
        raise SystemExit(1)
    console.print("[bold green]✅ Sync complete![/bold green]")


@click.command("watch")
@click.option(
    "--interval",
    "-i",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds between sync passes (defaults to ASSETVAULT_SYNC_INTERVAL)",
)
@click.option(
    "--debounce",
    type=click.FloatRange(min=0),
    default=DEFAULT_DEBOUNCE,
    show_default=True,
    help="Seconds a file must be quiet before a local edit is pushed",
)
@click.pass_obj
def watch_command(
    config: Config, interval: Optional[float], debounce: float
) -> None:
    """Sync continuously until interrupted with Ctrl+C.

    Local edits are pushed as soon as the file settles; server changes are
    picked up by polling.
    """
    poll_interval = interval if interval is not None else config.sync_interval
    if poll_interval <= 0:
        raise click.BadParameter(
            f"must be positive, got {poll_interval:g} from ASSETVAULT_SYNC_INTERVAL",
            param_hint="'--interval'",
        )

    watcher = FileWatcher(debounce=debounce)
    try:
        orchestrator = init_orchestrator(
            config, asset_store=WatchedAssetStore(watcher)
        )
        assets = orchestrator.db_service.get_tracked_assets()
    except Exception as e:
        logger.exception("Watch failed to start")
        console.print(f"[bold red]❌ Watch failed: {e}[/bold red]")
        raise click.Abort()

    def run_pass(asset_id: Optional[str] = None) -> None:
        report = orchestrator.run_sync(asset_id=asset_id)
        if report.pushed or report.pulled or report.failed:
            _display_report(report)

    for asset in assets:
        watcher.watch(
            asset.local_path, lambda asset_id=asset.asset_id: run_pass(asset_id)
        )

    poller = Poller()
    watcher.start()
    poller.start(poll_interval, run_pass)
    console.print(
        f"[green]Watching {watcher.watch_count} file(s), "
        f"polling every {poll_interval:g}s[/green] [dim](Ctrl+C to stop)[/dim]"
    )

    try:
        while poller.is_running:
            time.sleep(0.5)
    except KeyboardInterrupt:
        console.print("\nShutting down...")
    finally:
        watcher.stop()
        poller.stop()
        # A pass already underway is allowed to finish its transfers
        poller.join()

    console.print("Sync daemon stopped.")

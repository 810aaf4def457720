"""Commands that manage which assets are tracked."""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ...config import Config
from ...core.sync import fingerprint_file
from ...services import LocalAssetStore
from .init import init_db

console = Console()
logger = logging.getLogger(__name__)


@click.command("track")
@click.argument("asset_id")
@click.argument("local_path", type=click.Path(path_type=Path))
@click.option("--slug", "-s", help="Display name (defaults to the file name)")
@click.pass_obj
def track_command(
    config: Config, asset_id: str, local_path: Path, slug: Optional[str]
) -> None:
    """Track ASSET_ID, keeping it in sync with LOCAL_PATH."""
    store = LocalAssetStore()
    try:
        db_service = init_db(config)
        # Edits made after tracking are measured against the current content
        baseline = fingerprint_file(local_path) if store.exists(local_path) else None
        asset = db_service.track_asset(
            asset_id, slug or local_path.stem, local_path, baseline_fingerprint=baseline
        )
    except Exception as e:
        logger.exception("Track failed")
        console.print(f"[bold red]❌ Track failed: {e}[/bold red]")
        raise click.Abort()

    console.print(f"[green]✓ Tracking {asset.slug} → {asset.local_path}[/green]")
    if not store.exists(asset.local_path):
        console.print("  [dim]Local file missing, the server copy will be pulled[/dim]")
    elif not asset.has_synced:
        console.print("  [dim]Run `assetvault sync` to perform the first sync[/dim]")


@click.command("untrack")
@click.argument("asset_id")
@click.pass_obj
def untrack_command(config: Config, asset_id: str) -> None:
    """Stop tracking ASSET_ID. The local file is left in place."""
    db_service = init_db(config)
    if db_service.untrack_asset(asset_id):
        console.print(f"[green]✓ Stopped tracking {asset_id}[/green]")
    else:
        console.print(f"[yellow]⚠️  {asset_id} is not tracked[/yellow]")

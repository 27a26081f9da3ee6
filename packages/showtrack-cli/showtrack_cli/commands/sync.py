"""CLI commands for syncing game results."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table
from showtrack_core.config import get_settings
from showtrack_sync.ingestion import GameSyncService, SyncCycleResult
from showtrack_sync.scheduling import SyncScheduler

from showtrack_cli import context

app = typer.Typer()
console = Console()


def _print_cycle(result: SyncCycleResult) -> None:
    table = Table(title="Sync Cycle")
    table.add_column("Game", style="cyan")
    table.add_column("Fetched", justify="right")
    table.add_column("Upserted", justify="right")
    table.add_column("Failures", justify="right")
    table.add_column("Status")

    for game in result.game_results:
        if game.skipped:
            status = "[dim]skipped (no URL)[/dim]"
        elif game.fetch_error:
            status = f"[red]fetch failed: {game.fetch_error}[/red]"
        elif game.failures:
            status = "[yellow]partial[/yellow]"
        else:
            status = "[green]ok[/green]"
        table.add_row(
            game.api_name,
            str(game.fetched),
            str(game.upserted),
            str(game.error_count),
            status,
        )

    console.print(table)
    console.print(
        f"  Games synced: {result.synced_games} of {result.total_games}, "
        f"results stored: {result.total_upserted}, result failures: {result.total_failures}"
    )


@app.command("once")
def sync_once():
    """Run a single sync cycle across all games."""
    asyncio.run(_sync_once())


async def _sync_once():
    """Async implementation of sync once."""
    console.print("[bold blue]Syncing game results...[/bold blue]")
    service = GameSyncService(context.get_repository(), settings=get_settings())
    result = await service.run_sync_cycle()
    _print_cycle(result)

    if result.synced_games and result.failed_games == result.synced_games:
        console.print("[bold red]✗ Every game failed to fetch[/bold red]")
        raise typer.Exit(code=1)


@app.command("start")
def sync_start():
    """
    Run the periodic sync until interrupted.

    Example:
        SYNC_INTERVAL_SECONDS=30 showtrack sync start
    """
    app_settings = get_settings()
    console.print(
        f"[bold blue]Syncing every {app_settings.sync.interval_seconds}s "
        "(Ctrl+C to stop)...[/bold blue]"
    )
    try:
        asyncio.run(_sync_start())
    except KeyboardInterrupt:
        console.print("\n[yellow]Sync stopped[/yellow]")


async def _sync_start():
    """Async implementation of sync start."""
    app_settings = get_settings()
    service = GameSyncService(context.get_repository(), settings=app_settings)
    async with SyncScheduler(service, app_settings.sync) as scheduler:
        await scheduler.run_forever()

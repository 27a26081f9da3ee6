"""CLI commands for the tracked game catalogue."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table
from showtrack_sync.seed import load_games_file, seed_games

from showtrack_cli import context

app = typer.Typer()
console = Console()


@app.command("list")
def list_games():
    """List tracked games and whether they are synced."""
    asyncio.run(_list_games())


async def _list_games():
    """Async implementation of games list."""
    try:
        games = await context.get_repository().list_games()
    except Exception as e:
        console.print(f"[bold red]✗ Failed to load games: {str(e)}[/bold red]")
        raise typer.Exit(code=1) from e

    if not games:
        console.print("[yellow]No games tracked. Run 'showtrack games seed' first.[/yellow]")
        return

    table = Table(title="Tracked Games")
    table.add_column("API Name", style="cyan")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Provider")
    table.add_column("Synced", justify="center")

    for game in games:
        table.add_row(
            game.api_name,
            game.name,
            game.category,
            game.provider or "-",
            "[green]yes[/green]" if game.fetch_results_url else "[dim]no[/dim]",
        )

    console.print(table)


@app.command("seed")
def seed(
    file: Path | None = typer.Option(
        None, "--file", "-f", help="JSON file of game definitions (default: bundled catalogue)"
    ),
    force: bool = typer.Option(
        False, "--force", help="Seed even when games exist, skipping known api names"
    ),
):
    """
    Load game definitions into the catalogue.

    Example:
        showtrack games seed
        showtrack games seed --file my_games.json --force
    """
    asyncio.run(_seed(file, force))


async def _seed(file: Path | None, force: bool):
    """Async implementation of games seed."""
    try:
        games_data = load_games_file(file)
        result = await seed_games(context.get_repository(), games_data, force=force)
    except Exception as e:
        console.print(f"[bold red]✗ Seed failed: {str(e)}[/bold red]")
        raise typer.Exit(code=1) from e

    if result.skipped:
        console.print(
            f"[yellow]Catalogue already has {result.skipped_existing} games, skipping seed "
            "(use --force to add missing games)[/yellow]"
        )
        return

    console.print(f"[bold green]✓ Seeded {len(result.created)} games[/bold green]")
    for api_name in result.failed:
        console.print(f"[yellow]  Failed: {api_name}[/yellow]")

"""CLI commands for stored results."""

import asyncio
import json

import typer
from rich.console import Console
from showtrack_analytics.results_view import transform_game_results
from showtrack_analytics.windows import PageParams

from showtrack_cli import context

app = typer.Typer()
console = Console()


@app.command("latest")
def latest_results(
    game: str = typer.Argument(..., help="Game api name (e.g. monopoly)"),
    size: int = typer.Option(10, "--size", "-n", help="Results per page (max 100)"),
    page: int = typer.Option(0, "--page", "-p", help="Zero-based page"),
    duration: int = typer.Option(12, "--duration", "-d", help="Lookback window in hours (max 720)"),
):
    """Print the newest stored results of a game as JSON."""
    asyncio.run(_latest_results(game, PageParams(page=page, size=size, duration=duration)))


async def _latest_results(api_name: str, params: PageParams):
    """Async implementation of results latest."""
    repository = context.get_repository()
    try:
        game = await repository.get_game_by_api_name(api_name)
        if game is None:
            console.print(f"[bold red]✗ Unknown game: {api_name}[/bold red]")
            raise typer.Exit(code=1)

        results = await repository.query_results(
            game.id, params.since(), limit=params.offset + params.size
        )
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[bold red]✗ Failed to load results: {str(e)}[/bold red]")
        raise typer.Exit(code=1) from e

    page = results[params.offset :]
    typer.echo(json.dumps(transform_game_results(page), indent=2))

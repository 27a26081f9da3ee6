"""CLI commands for game statistics and the biggest wins feed."""

import asyncio
import json

import typer
from rich.console import Console
from rich.table import Table
from showtrack_analytics.aggregation import GameStats, aggregate_game_stats
from showtrack_analytics.biggest_wins import select_biggest_wins
from showtrack_analytics.windows import DEFAULT_DURATION_HOURS, MAX_DURATION_HOURS, window_start
from showtrack_core.config import get_settings

from showtrack_cli import context

app = typer.Typer()
console = Console()


@app.command("show")
def show_stats(
    game: str = typer.Argument(..., help="Game api name (e.g. crazytime)"),
    duration: int = typer.Option(
        DEFAULT_DURATION_HOURS, "--duration", "-d", help="Lookback window in hours"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the camelCase JSON document"),
):
    """
    Show hot/cold frequencies and leaderboards for one game.

    Example:
        showtrack stats show monopoly --duration 24
    """
    asyncio.run(_show_stats(game, duration, as_json))


async def _show_stats(api_name: str, duration: int, as_json: bool):
    """Async implementation of stats show."""
    app_settings = get_settings()
    repository = context.get_repository()
    duration = min(max(duration, 1), MAX_DURATION_HOURS)

    try:
        game = await repository.get_game_by_api_name(api_name)
        if game is None:
            console.print(f"[bold red]✗ Unknown game: {api_name}[/bold red]")
            raise typer.Exit(code=1)

        results = await repository.query_results(game.id, window_start(duration))
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[bold red]✗ Failed to load results: {str(e)}[/bold red]")
        raise typer.Exit(code=1) from e

    stats = aggregate_game_stats(
        results,
        leaderboard_size=app_settings.stats.leaderboard_size,
        media_base_url=app_settings.media.base_url,
    )

    if as_json:
        typer.echo(json.dumps(stats.model_dump(by_alias=True), indent=2))
        return

    _print_stats(game.name, duration, stats)


def _print_stats(name: str, duration: int, stats: GameStats) -> None:
    console.print(
        f"\n[bold cyan]{name}[/bold cyan] - last {duration}h, {stats.total_count} results\n"
    )

    if stats.total_count == 0:
        console.print("[yellow]No results in this window[/yellow]")
        return

    table = Table(title="Wheel Results")
    table.add_column("Result", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("%", justify="right")
    table.add_column("Last Seen", justify="right")
    table.add_column("Last Occurred")
    for stat in stats.agg_stats:
        table.add_row(
            stat.wheel_result,
            str(stat.count),
            f"{stat.percentage:.2f}",
            f"{stat.last_seen_before} ago",
            stat.last_occurred_at,
        )
    console.print(table)

    if stats.best_multipliers:
        table = Table(title="Best Multipliers")
        table.add_column("Result", style="cyan")
        table.add_column("Multiplier", justify="right", style="green")
        table.add_column("Round")
        for best in stats.best_multipliers:
            table.add_row(best.wheel_result, f"{best.max_multiplier:g}x", best.id)
        console.print(table)

    if stats.best_individual_wins:
        table = Table(title="Best Individual Wins")
        table.add_column("Player", style="cyan")
        table.add_column("Amount", justify="right", style="green")
        table.add_column("Result")
        for win in stats.best_individual_wins:
            table.add_row(win.screen_name, f"{win.win_amount:,.2f}", win.wheel_result)
        console.print(table)


@app.command("biggest-wins")
def biggest_wins(
    size: int | None = typer.Option(None, "--size", "-n", help="Number of wins to show"),
    duration: int | None = typer.Option(
        None, "--duration", "-d", help="Lookback window in hours"
    ),
    games: list[str] | None = typer.Option(
        None, "--game", "-g", help="Restrict to these game api names (repeatable)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the camelCase JSON document"),
):
    """
    Show the highest multiplier rounds across games.

    Example:
        showtrack stats biggest-wins --size 10 --duration 24 --game crazytime
    """
    asyncio.run(_biggest_wins(size, duration, games or [], as_json))


async def _biggest_wins(
    size: int | None, duration: int | None, api_names: list[str], as_json: bool
):
    """Async implementation of stats biggest-wins."""
    stats_config = get_settings().stats
    media_base_url = get_settings().media.base_url
    size = min(size or stats_config.biggest_wins_default_size, stats_config.biggest_wins_max_size)
    duration = min(duration or stats_config.biggest_wins_default_duration, MAX_DURATION_HOURS)

    repository = context.get_repository()
    try:
        tracked = await repository.list_games()
        if api_names:
            tracked = [game for game in tracked if game.api_name in api_names]
        game_names = {game.id: game.api_name for game in tracked}

        results = await repository.query_results_across_games(
            list(game_names), window_start(duration)
        )
    except Exception as e:
        console.print(f"[bold red]✗ Failed to load results: {str(e)}[/bold red]")
        raise typer.Exit(code=1) from e

    wins = select_biggest_wins(
        results,
        game_names,
        size,
        min_multiplier=stats_config.big_win_min_multiplier,
        media_base_url=media_base_url,
    )

    if as_json:
        typer.echo(json.dumps([win.to_document() for win in wins], indent=2))
        return

    if not wins:
        console.print(f"[yellow]No big wins in the last {duration}h[/yellow]")
        return

    table = Table(title=f"Biggest Wins (last {duration}h)")
    table.add_column("Game", style="cyan")
    table.add_column("Multiplier", justify="right", style="green")
    table.add_column("Outcome")
    table.add_column("Settled")
    table.add_column("Winners", justify="right")
    for win in wins:
        table.add_row(
            win.game_show,
            f"{win.multiplier:g}x",
            win.spin_outcome,
            win.settled_at,
            str(win.total_winners) if win.total_winners is not None else "-",
        )
    console.print(table)

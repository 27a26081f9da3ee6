"""Main CLI entry point using Typer."""

import typer
from rich.console import Console
from showtrack_core.config import get_settings
from showtrack_core.logging_setup import configure_logging

from showtrack_cli.commands import db, games, results, stats, sync

app = typer.Typer(
    name="showtrack",
    help="Game Show Tracker - live casino result ingestion and statistics",
    add_completion=False,
)

# Add command groups
app.add_typer(db.app, name="db", help="Database management")
app.add_typer(games.app, name="games", help="Tracked game catalogue")
app.add_typer(sync.app, name="sync", help="Fetch and store game results")
app.add_typer(stats.app, name="stats", help="Statistics and biggest wins")
app.add_typer(results.app, name="results", help="Stored results")

console = Console()


@app.callback()
def callback(
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines"),
):
    """
    Game Show Tracker

    Syncs settled rounds of live casino game shows and derives hot/cold,
    multiplier and biggest win statistics from them.
    """
    configure_logging(get_settings(), json_output=json_logs)


if __name__ == "__main__":
    app()

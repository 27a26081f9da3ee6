"""CLI commands for database management."""

import asyncio

import typer
from rich.console import Console
from showtrack_core.database import close_db, init_db

app = typer.Typer()
console = Console()


@app.command("init")
def db_init():
    """Create all tables."""
    asyncio.run(_db_init())


async def _db_init():
    """Async implementation of db init."""
    try:
        await init_db()
        console.print("[bold green]✓ Database tables created[/bold green]")
    except Exception as e:
        console.print(f"[bold red]✗ Database init failed: {str(e)}[/bold red]")
        raise typer.Exit(code=1) from e
    finally:
        await close_db()

"""
Database management commands.
"""

from __future__ import annotations

import typer
from rich.console import Console

from tendersync.cli.context import load_config_or_exit

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Database operations",
    no_args_is_help=True,
)


@app.command("init")
def init_database() -> None:
    """Initialize the database schema.

    Creates any missing tables; existing data is kept.
    """
    from tendersync.persistence.db import Database

    config = load_config_or_exit()
    database = Database.from_config(config.database)

    console.print("Creating database schema...")
    try:
        database.init_db()
    finally:
        database.dispose()

    console.print(f"[green]OK[/green] Database initialized at [cyan]{config.database.url}[/cyan]")


@app.command("reset")
def reset_database(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Skip confirmation",
    ),
) -> None:
    """Drop and recreate all tables, deleting sync history and locks."""
    from tendersync.persistence.db import Database

    if not force and not typer.confirm("This will DELETE ALL DATA. Continue?", default=False):
        raise typer.Abort()

    config = load_config_or_exit()
    database = Database.from_config(config.database)

    try:
        console.print("[yellow]Dropping existing tables...[/yellow]")
        database.drop_db()
        console.print("Creating database schema...")
        database.init_db()
    finally:
        database.dispose()

    console.print("[green]OK[/green] Database reset")

"""
Sync history commands.
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from tendersync.cli.context import load_config_or_exit

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="View sync history",
    no_args_is_help=True,
)


@app.command("list")
def list_logs(
    limit: int = typer.Option(
        10,
        "--limit",
        "-n",
        help="Number of sync logs to show",
    ),
) -> None:
    """Show the most recent sync log entries, newest first."""
    from sqlalchemy.exc import SQLAlchemyError

    from tendersync.persistence.db import Database
    from tendersync.persistence.repo import SyncLogRepository

    config = load_config_or_exit()
    database = Database.from_config(config.database)

    async def _fetch():
        try:
            async with database.async_session() as session:
                return await SyncLogRepository(session).get_recent(limit)
        finally:
            await database.dispose_async()

    try:
        entries = asyncio.run(_fetch())
    except SQLAlchemyError as e:
        err_console.print(f"[red]Could not read sync logs:[/red] {e}")
        err_console.print("[dim]Initialize the database with:[/dim] tendersync db init")
        raise typer.Exit(1)

    if not entries:
        console.print("[dim]No syncs logged yet.[/dim]")
        return

    table = Table(title="Sync History", show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Sync Time", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("New", justify="right", style="green")

    for entry in entries:
        table.add_row(
            str(entry.id),
            entry.sync_time.strftime("%Y-%m-%d %H:%M:%S"),
            str(entry.total_tenders),
            str(entry.new_tenders_count),
        )

    console.print(table)

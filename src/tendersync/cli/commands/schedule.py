"""
Schedule commands for periodic syncs.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Console

from tendersync.cli.context import load_config_or_exit, open_services

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Run periodic tender syncs",
    no_args_is_help=True,
)


@app.command("run")
def run_scheduler(
    interval: Optional[int] = typer.Option(
        None,
        "--interval",
        "-i",
        help="Minutes between syncs (overrides config)",
    ),
    once: bool = typer.Option(
        False,
        "--once",
        help="Run a single locked sync and exit",
    ),
) -> None:
    """Start the scheduler service.

    Runs as a foreground process. Use Ctrl+C to stop.
    """
    from tendersync.core.scheduler import SchedulerService

    config = load_config_or_exit()

    if interval is not None:
        if interval < 1:
            err_console.print("[red]--interval must be at least 1 minute[/red]")
            raise typer.Exit(1)
        config.scheduler.interval_minutes = interval

    if not once and not config.scheduler.enabled:
        err_console.print("[yellow]Scheduler is disabled in configuration[/yellow]")
        raise typer.Exit(1)

    async def _run():
        async with open_services(config) as (database, index_client):
            await database.init_db_async()
            service = SchedulerService(config, database, index_client)
            if once:
                return await service.run_once()
            await service.start()
            return None

    if once:
        result = asyncio.run(_run())
        if result is None:
            console.print("[yellow]Another sync holds the lock; skipped[/yellow]")
            return
        if result.success:
            console.print(f"[green]OK[/green] {result.message}")
        else:
            err_console.print(f"[red]FAILED[/red] {result.message}")
            raise typer.Exit(1)
        return

    console.print(
        f"[bold]Starting scheduler:[/bold] sync every {config.scheduler.interval_minutes} minute(s)"
    )
    console.print("[dim]Press Ctrl+C to stop[/dim]")
    console.print()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("[dim]Scheduler stopped[/dim]")


@app.command("status")
def show_status() -> None:
    """Show whether a sync currently holds the run lock."""
    from sqlalchemy import select

    from tendersync.core.scheduler.locks import SYNC_LOCK_NAME
    from tendersync.persistence.db import Database
    from tendersync.persistence.models import RunLock, utcnow

    config = load_config_or_exit()
    database = Database.from_config(config.database)
    database.init_db()

    try:
        with database.session() as session:
            stmt = select(RunLock).where(RunLock.lock_name == SYNC_LOCK_NAME)
            lock = session.execute(stmt).scalar_one_or_none()

            if lock is None or lock.expires_at <= utcnow():
                console.print("[green]Idle[/green] - no sync is running")
                return

            console.print(f"[yellow]Running[/yellow] - held by [cyan]{lock.holder_id}[/cyan]")
            console.print(
                f"[dim]Acquired {lock.acquired_at:%Y-%m-%d %H:%M:%S}, "
                f"expires {lock.expires_at:%Y-%m-%d %H:%M:%S} UTC[/dim]"
            )
    finally:
        database.dispose()

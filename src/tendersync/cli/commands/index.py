"""
Search index commands.
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from tendersync.cli.context import load_config_or_exit
from tendersync.core.errors import IndexingError

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Search index operations",
    no_args_is_help=True,
)


def _run_with_client(config, operation):
    """Run ``operation(client, index)`` against a fresh client, exiting on IndexingError."""
    from tendersync.core.index.client import create_index_client

    async def _run():
        client = create_index_client(config.elasticsearch)
        try:
            return await operation(client, config.elasticsearch.tenders_index)
        finally:
            await client.close()

    try:
        return asyncio.run(_run())
    except IndexingError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


@app.command("init")
def init_index() -> None:
    """Check the cluster and create the tender index if missing."""
    from tendersync.core.index.client import check_connection, ensure_index

    config = load_config_or_exit()

    async def _init(client, index):
        cluster = await check_connection(client, attempts=config.elasticsearch.connect_attempts)
        created = await ensure_index(client, index)
        return cluster, created

    cluster, created = _run_with_client(config, _init)
    index = config.elasticsearch.tenders_index

    console.print(f"[green]OK[/green] Connected to cluster [cyan]{cluster}[/cyan]")
    if created:
        console.print(f"[green]OK[/green] Created index [cyan]{index}[/cyan]")
    else:
        console.print(f"[dim]Index {index} already exists[/dim]")


@app.command("stats")
def show_stats() -> None:
    """Show tender counts by status and category."""
    from tendersync.core.index.queries import get_tender_stats

    config = load_config_or_exit()
    stats = _run_with_client(config, get_tender_stats)

    console.print()
    console.print(f"[bold]Total tenders:[/bold] {stats.total_tenders}")
    console.print(f"[bold]Added in the last day:[/bold] {stats.new_today_count}")
    console.print()

    for title, counts in (("By Status", stats.by_status), ("By Category", stats.by_category)):
        if not counts:
            continue
        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("Name", style="cyan")
        table.add_column("Count", justify="right")
        for name, count in counts.items():
            table.add_row(name, str(count))
        console.print(table)


@app.command("recent")
def show_recent(
    limit: int = typer.Option(
        4,
        "--limit",
        "-n",
        help="Number of tenders to show",
    ),
) -> None:
    """Show the most recently indexed tenders."""
    from tendersync.core.index.queries import get_recent_tenders

    config = load_config_or_exit()

    async def _recent(client, index):
        return await get_recent_tenders(client, index, limit=limit)

    tenders = _run_with_client(config, _recent)

    if not tenders:
        console.print("[dim]No tenders indexed yet.[/dim]")
        return

    table = Table(title="Recent Tenders", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan", max_width=50)
    table.add_column("Organization")
    table.add_column("Status")
    table.add_column("Closing")

    for tender in tenders:
        table.add_row(
            str(tender["id"]),
            tender["title"] or "",
            tender["organization"],
            tender["status"],
            str(tender["closingDate"] or "-"),
        )

    console.print(table)

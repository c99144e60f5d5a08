"""
Sync commands for pulling tenders into the search index.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from tendersync.cli.context import load_config_or_exit, open_services

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Run tender syncs",
    no_args_is_help=True,
)


@app.command("run")
def run_sync_command(
    page_size: Optional[int] = typer.Option(
        None,
        "--page-size",
        "-n",
        help="Records to request (default 50)",
    ),
    category: Optional[int] = typer.Option(
        None,
        "--category",
        "-c",
        help="TenderCategory filter",
    ),
    activity: Optional[int] = typer.Option(
        None,
        "--activity",
        "-a",
        help="TenderActivityId filter",
    ),
    area: Optional[int] = typer.Option(
        None,
        "--area",
        help="TenderAreasIdString filter",
    ),
    fields: Optional[str] = typer.Option(
        None,
        "--fields",
        "-f",
        help="Comma-separated field projection",
    ),
    settings_file: Optional[Path] = typer.Option(
        None,
        "--settings",
        "-s",
        help="YAML file with sync settings (options above override it)",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Deadline in seconds for the whole sync",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the result as JSON",
    ),
) -> None:
    """Fetch tenders from the source and upsert them into the index.

    Examples:
        tendersync sync run
        tendersync sync run --page-size 100 --category 2
        tendersync sync run --settings configs/sync.yaml --json
    """
    from tendersync.core.config.loader import load_sync_settings
    from tendersync.core.errors import ConfigurationError
    from tendersync.core.logging import json_dumps
    from tendersync.core.orchestrator.runner import run_sync

    config = load_config_or_exit()

    settings: dict = {}
    if settings_file:
        try:
            settings = load_sync_settings(settings_file).model_dump(exclude_none=True)
        except ConfigurationError as e:
            err_console.print(f"[red]{e}[/red]")
            if e.details:
                err_console.print(f"[dim]{e.details}[/dim]")
            raise typer.Exit(1)

    overrides = {
        "page_size": page_size,
        "tender_category": category,
        "tender_activity_id": activity,
        "tender_areas_id": area,
        "requested_fields": fields,
    }
    settings.update({key: value for key, value in overrides.items() if value is not None})

    async def _run():
        async with open_services(config) as (database, index_client):
            await database.init_db_async()
            return await run_sync(
                settings,
                index_client=index_client,
                database=database,
                config=config,
                timeout=timeout,
            )

    if not as_json:
        console.print()
        console.print(f"[bold]Syncing tenders from:[/bold] {config.source.url}")
        console.print(f"[dim]Index: {config.elasticsearch.tenders_index}[/dim]")
        console.print()

    result = asyncio.run(_run())

    if as_json:
        console.print_json(json_dumps(result.to_dict()))
    else:
        _show_result(result)

    if not result.success:
        raise typer.Exit(1)


def _show_result(result) -> None:
    """Print a sync result."""
    if result.success:
        console.print(f"[green]OK[/green] {result.message}")
    else:
        err_console.print(f"[red]FAILED[/red] {result.message}")

    if result.stats is None:
        return

    table = Table(title="Sync Stats", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")

    stats = result.stats
    table.add_row("Fetched", str(stats.total))
    table.add_row("Added", f"[green]{stats.added}[/green]")
    table.add_row("Updated", f"[yellow]{stats.updated}[/yellow]")
    table.add_row("Failed", f"[red]{stats.failed}[/red]" if stats.failed else "0")
    table.add_row("Duplicates", str(stats.duplicates))

    console.print()
    console.print(table)


@app.command("options")
def show_options() -> None:
    """List known filter values for categories, activities and areas."""
    from tendersync.core.config.catalog import (
        DEFAULT_FIELDS,
        TENDER_ACTIVITIES,
        TENDER_AREAS,
        TENDER_CATEGORIES,
    )

    for title, option, values in (
        ("Tender Categories", "--category", TENDER_CATEGORIES),
        ("Tender Activities", "--activity", TENDER_ACTIVITIES),
        ("Tender Areas", "--area", TENDER_AREAS),
    ):
        table = Table(title=f"{title} ({option})", show_header=True, header_style="bold magenta")
        table.add_column("ID", justify="right", style="cyan")
        table.add_column("Name")
        for value_id, name in values.items():
            table.add_row(str(value_id), name)
        console.print(table)
        console.print()

    console.print(f"[bold]Default fields:[/bold] {','.join(DEFAULT_FIELDS)}")

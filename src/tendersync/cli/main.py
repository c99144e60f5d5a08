"""
TenderSync CLI - Main entry point.

Pulls government tender listings into an Elasticsearch index on demand
or on a schedule, and keeps an audit log of every sync.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.traceback import install as install_rich_traceback

from tendersync import __app_name__, __version__

# Load environment variables from .env (if present)
load_dotenv()

# Install rich traceback for better error display
install_rich_traceback(show_locals=False, width=120)

# Area and activity names are Arabic; force UTF-8 on Windows consoles
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")
    if hasattr(sys.stdout, "reconfigure"):
        try:
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        except (AttributeError, OSError):
            pass
    if hasattr(sys.stderr, "reconfigure"):
        try:
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")
        except (AttributeError, OSError):
            pass

console = Console(legacy_windows=False)

# Create main app
app = typer.Typer(
    name=__app_name__,
    help="Sync government tender listings into Elasticsearch",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """TenderSync - Tender listing sync and indexing."""
    pass


# =============================================================================
# Import and register subcommand modules
# =============================================================================

from .commands import db, index, logs, schedule, sync  # noqa: E402

app.add_typer(sync.app, name="sync", help="Run tender syncs")
app.add_typer(logs.app, name="logs", help="View sync history")
app.add_typer(index.app, name="index", help="Search index operations")
app.add_typer(schedule.app, name="schedule", help="Run periodic tender syncs")
app.add_typer(db.app, name="db", help="Database operations")


# =============================================================================
# Init Command
# =============================================================================


@app.command()
def init(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
) -> None:
    """Initialize TenderSync database and configuration.

    Creates required directories, a default configuration file,
    and the database schema.
    """
    from rich.progress import Progress, SpinnerColumn, TextColumn

    from tendersync.cli.context import load_config_or_exit
    from tendersync.persistence.db import Database

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Creating directories...", total=None)

        for dir_path in (Path("configs"), Path("data"), Path("logs")):
            dir_path.mkdir(parents=True, exist_ok=True)

        progress.update(task, description="Creating default configuration...")

        app_config_path = Path("configs/app.yaml")
        if not app_config_path.exists() or force:
            _create_default_app_config(app_config_path)

        progress.update(task, description="Initializing database...")

        config = load_config_or_exit(app_config_path)
        config.ensure_directories()
        database = Database.from_config(config.database)
        try:
            database.init_db()
        finally:
            database.dispose()

        progress.update(task, description="Done!")

    console.print()
    console.print(Panel.fit(
        "[bold green]OK - TenderSync initialized successfully![/bold green]\n\n"
        "Created:\n"
        "  - [cyan]configs/app.yaml[/cyan] - Application configuration\n"
        "  - [cyan]data/[/cyan] - Sync log database\n"
        "  - [cyan]logs/[/cyan] - Log files\n\n"
        "Next steps:\n"
        "  1. Create the index: [yellow]tendersync index init[/yellow]\n"
        "  2. Run a sync: [yellow]tendersync sync run[/yellow]\n"
        "  3. Schedule syncs: [yellow]tendersync schedule run[/yellow]",
        title="[bold]Initialization Complete[/bold]",
        border_style="green",
    ))


def _create_default_app_config(path: Path) -> None:
    """Create default app.yaml configuration."""
    default_config = """\
# TenderSync Configuration
# Values may reference environment variables as ${VAR} or ${VAR:-default}

data_dir: data

database:
  url: ${DATABASE_URL:-sqlite:///data/tendersync.db}
  echo: false

logging:
  level: INFO
  file: logs/tendersync.log
  json_format: true
  rich_console: true

source:
  url: https://tenders.etimad.sa/Tender/AllSupplierTendersForVisitorAsync
  timeout_seconds: 30

elasticsearch:
  url: ${ELASTICSEARCH_URL:-http://localhost:9200}
  tenders_index: tenders
  auth_required: false
  username: ${ELASTICSEARCH_USERNAME:-}
  password: ${ELASTICSEARCH_PASSWORD:-}

scheduler:
  enabled: true
  interval_minutes: 60
  jitter_minutes: 0
  lock_ttl_minutes: 30
  timeout_seconds: 300
  settings:
    pageSize: 50
"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(default_config, encoding="utf-8")


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()

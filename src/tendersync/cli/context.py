"""
Shared wiring for CLI commands: config loading and service lifetimes.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, AsyncGenerator

import typer
from rich.console import Console

from tendersync.core.config.loader import load_app_config
from tendersync.core.config.models import AppConfig
from tendersync.core.errors import ConfigurationError
from tendersync.core.logging import setup_logging
from tendersync.persistence.db import Database

if TYPE_CHECKING:
    from elasticsearch import AsyncElasticsearch

err_console = Console(stderr=True)


def load_config_or_exit(path: Path | None = None) -> AppConfig:
    """Load app config, printing the error and exiting on failure."""
    try:
        config = load_app_config(path)
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        rich_console=config.logging.rich_console,
    )
    return config


@asynccontextmanager
async def open_services(
    config: AppConfig,
) -> AsyncGenerator[tuple[Database, "AsyncElasticsearch"], None]:
    """Database and Elasticsearch client for the duration of a command."""
    from tendersync.core.index.client import create_index_client

    database = Database.from_config(config.database)
    index_client = create_index_client(config.elasticsearch)
    try:
        yield database, index_client
    finally:
        await index_client.close()
        await database.dispose_async()

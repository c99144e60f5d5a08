"""CLI command modules."""

from . import db, index, logs, schedule, sync

__all__ = [
    "db",
    "index",
    "logs",
    "schedule",
    "sync",
]

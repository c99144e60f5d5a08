"""Database persistence layer."""

from .db import DEFAULT_DATABASE_URL, Database
from .models import Base, RunLock, SyncLog
from .repo import SyncLogRepository

__all__ = [
    "DEFAULT_DATABASE_URL",
    "Database",
    "Base",
    "RunLock",
    "SyncLog",
    "SyncLogRepository",
]

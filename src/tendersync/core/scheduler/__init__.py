"""Scheduler service - APScheduler integration."""

from .locks import SYNC_LOCK_NAME, LockManager
from .service import SchedulerService

__all__ = [
    "SYNC_LOCK_NAME",
    "LockManager",
    "SchedulerService",
]

"""Orchestrator - sync sequencing, stage error mapping, sync logging."""

from .recorder import SyncLogRecorder
from .runner import SyncContext, SyncRunner, completed_message, run_sync

__all__ = [
    "SyncContext",
    "SyncLogRecorder",
    "SyncRunner",
    "completed_message",
    "run_sync",
]

"""
Sync statistics and result types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SyncState(str, Enum):
    """Orchestrator states, in pipeline order."""

    IDLE = "idle"
    NORMALIZING = "normalizing"
    FETCHING = "fetching"
    TRANSFORMING = "transforming"
    INDEXING = "indexing"
    LOGGING = "logging"
    DONE = "done"


@dataclass
class SyncStats:
    """Counts for one sync run.

    ``total`` is the number of records fetched. Every fetched record ends
    up in exactly one of added, updated, failed or duplicates.
    """

    total: int = 0
    added: int = 0
    updated: int = 0
    failed: int = 0
    duplicates: int = 0

    @property
    def accounted(self) -> int:
        return self.added + self.updated + self.failed + self.duplicates

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "added": self.added,
            "updated": self.updated,
            "failed": self.failed,
            "duplicates": self.duplicates,
        }


@dataclass
class SyncResult:
    """Outcome of one sync invocation.

    ``stats`` is None when the run stopped before indexing finished;
    ``failed_stage`` names the stage that stopped it.
    """

    success: bool
    message: str
    stats: SyncStats | None = None
    sync_id: str | None = None
    failed_stage: SyncState | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
        }
        if self.stats is not None:
            data["stats"] = self.stats.to_dict()
        return data

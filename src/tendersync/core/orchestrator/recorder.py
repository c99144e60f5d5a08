"""
Sync log recorder.

Writes one audit row per sync that got through the indexing stage.
"""

from __future__ import annotations

import logging

from tendersync.core.errors import LogPersistenceError
from tendersync.core.results import SyncStats
from tendersync.persistence.db import Database
from tendersync.persistence.models import SyncLog
from tendersync.persistence.repo import SyncLogRepository


logger = logging.getLogger(__name__)


class SyncLogRecorder:
    """Persists SyncLog rows through an explicitly provided Database."""

    def __init__(self, database: Database):
        self.database = database

    async def record(self, stats: SyncStats) -> SyncLog:
        """Insert one sync log row for the given stats.

        Raises:
            LogPersistenceError: If the row could not be written
        """
        try:
            async with self.database.async_session() as session:
                entry = await SyncLogRepository(session).create(
                    total_tenders=stats.total,
                    new_tenders_count=stats.added,
                )
        except Exception as e:
            raise LogPersistenceError(f"Error logging sync to database: {e}", cause=e) from e

        logger.info(
            "Sync logged to database: %d total, %d new",
            entry.total_tenders,
            entry.new_tenders_count,
        )
        return entry

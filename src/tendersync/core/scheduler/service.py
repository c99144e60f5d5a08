"""
APScheduler v4 integration for TenderSync.

Re-runs the sync on an interval. Each tick takes the sync run lock so
that only one sync runs at a time across processes.
"""

from __future__ import annotations

import os
import socket
from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import uuid4

from apscheduler import AsyncScheduler, ConflictPolicy
from apscheduler.triggers.interval import IntervalTrigger

from tendersync.core.config.models import AppConfig
from tendersync.core.logging import get_logger
from tendersync.core.orchestrator.runner import run_sync
from tendersync.core.results import SyncResult
from tendersync.core.scheduler.locks import SYNC_LOCK_NAME, LockManager

if TYPE_CHECKING:
    from elasticsearch import AsyncElasticsearch

    from tendersync.persistence.db import Database

logger = get_logger("scheduler")

SCHEDULE_ID = "tender-sync"


class SchedulerService:
    """APScheduler v4 integration for TenderSync."""

    def __init__(
        self,
        config: AppConfig,
        database: "Database",
        index_client: "AsyncElasticsearch",
    ) -> None:
        self.config = config
        self.database = database
        self.index_client = index_client
        self._holder_id = f"{socket.gethostname()}-{os.getpid()}-{uuid4().hex[:8]}"

    async def run_once(self) -> SyncResult | None:
        """Run one sync under the run lock.

        Returns:
            The SyncResult, or None if another holder has the lock
        """
        scheduler_config = self.config.scheduler

        with self.database.session() as session:
            lock_manager = LockManager(session)
            if not lock_manager.acquire(
                SYNC_LOCK_NAME,
                self._holder_id,
                ttl_minutes=scheduler_config.lock_ttl_minutes,
            ):
                logger.info("Lock held, skipping scheduled sync")
                return None

        try:
            result = await run_sync(
                scheduler_config.settings,
                index_client=self.index_client,
                database=self.database,
                config=self.config,
                timeout=scheduler_config.timeout_seconds,
            )
        finally:
            with self.database.session() as session:
                LockManager(session).release(SYNC_LOCK_NAME, self._holder_id)

        if result.success:
            logger.info("Scheduled sync finished: %s", result.message)
        else:
            logger.error("Scheduled sync failed: %s", result.message)
        return result

    def build_trigger(self) -> IntervalTrigger:
        """Interval trigger from scheduler config."""
        return IntervalTrigger(minutes=self.config.scheduler.interval_minutes)

    async def start(self) -> None:
        """Start scheduler in foreground mode (blocking)."""
        scheduler_config = self.config.scheduler

        max_jitter = None
        if scheduler_config.jitter_minutes > 0:
            max_jitter = timedelta(minutes=scheduler_config.jitter_minutes)

        async with AsyncScheduler() as scheduler:
            await scheduler.add_schedule(
                self.run_once,
                self.build_trigger(),
                id=SCHEDULE_ID,
                conflict_policy=ConflictPolicy.replace,
                max_jitter=max_jitter,
            )
            logger.info(
                "Scheduled tender sync every %d minute(s)",
                scheduler_config.interval_minutes,
            )
            await scheduler.run_until_stopped()

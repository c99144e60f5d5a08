"""
Sync runner orchestrator.

Coordinates one sync: settings → fetch → normalize → bulk index → log.
Every stage failure is turned into a SyncResult here; nothing raises out
of ``SyncRunner.run``.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from tendersync.core.config.models import AppConfig, SourceConfig, SyncSettings
from tendersync.core.errors import (
    ConfigurationError,
    FetchError,
    IndexingError,
    LogPersistenceError,
)
from tendersync.core.index.bulk import BulkIndexer
from tendersync.core.logging import ContextualLogger, get_contextual_logger
from tendersync.core.normalize.records import normalize_records
from tendersync.core.normalize.settings import build_query_params, coerce_settings
from tendersync.core.results import SyncResult, SyncState, SyncStats
from tendersync.core.source.http_source import TenderSource

from .recorder import SyncLogRecorder

if TYPE_CHECKING:
    from elasticsearch import AsyncElasticsearch

    from tendersync.persistence.db import Database


DEFAULT_TENDERS_INDEX = "tenders"

FETCH_ERROR_PREFIX = "Error fetching from API"
INDEX_ERROR_PREFIX = "Error indexing to Elasticsearch"
SETTINGS_ERROR_PREFIX = "Invalid sync settings"
UNEXPECTED_ERROR_PREFIX = "Sync operation failed"
EMPTY_FETCH_MESSAGE = "API returned 0 tenders to sync"

# Message prefix for a deadline hit while in a given state
_TIMEOUT_PREFIXES = {
    SyncState.FETCHING: FETCH_ERROR_PREFIX,
    SyncState.INDEXING: INDEX_ERROR_PREFIX,
}


def completed_message(stats: SyncStats) -> str:
    return f"Sync completed: {stats.added} added, {stats.updated} updated, {stats.failed} failed"


@dataclass
class SyncContext:
    """Per-invocation state; never shared between runs."""

    sync_id: str
    log: ContextualLogger
    state: SyncState = SyncState.IDLE
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def enter(self, state: SyncState) -> None:
        self.state = state
        self.log = self.log.with_context(stage=state.value)
        self.log.debug("Entering %s", state.value)

    @property
    def duration_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self.started_at).total_seconds()


class SyncRunner:
    """Runs the tender sync pipeline once per ``run`` call.

    The index client and database are owned by the caller. A TenderSource
    may be injected; otherwise one is built per run from ``source_config``
    and closed when the run ends.
    """

    def __init__(
        self,
        index_client: "AsyncElasticsearch",
        database: "Database",
        *,
        index: str = DEFAULT_TENDERS_INDEX,
        source: TenderSource | None = None,
        source_config: SourceConfig | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the sync runner.

        Args:
            index_client: Elasticsearch client
            database: Database holding the sync_logs table
            index: Target tender index
            source: Tender source to fetch from (caller keeps ownership)
            source_config: Used to build a source when none is injected
            timeout: Deadline in seconds for fetch through indexing
        """
        self.index_client = index_client
        self.database = database
        self.index = index
        self.source = source
        self.source_config = source_config or SourceConfig()
        self.timeout = timeout

        self.indexer = BulkIndexer(index_client, index)
        self.recorder = SyncLogRecorder(database)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        index_client: "AsyncElasticsearch",
        database: "Database",
        *,
        source: TenderSource | None = None,
        timeout: float | None = None,
    ) -> "SyncRunner":
        """Build a runner from application config."""
        return cls(
            index_client,
            database,
            index=config.elasticsearch.tenders_index,
            source=source,
            source_config=config.source,
            timeout=timeout,
        )

    async def run(
        self,
        settings: SyncSettings | Mapping[str, Any] | None = None,
    ) -> SyncResult:
        """Execute one sync.

        Args:
            settings: Sync settings, as a model or a camelCase mapping

        Returns:
            SyncResult; ``stats`` is set only when indexing completed
        """
        sync_id = uuid.uuid4().hex[:12]
        ctx = SyncContext(
            sync_id=sync_id,
            log=get_contextual_logger("sync", sync_id=sync_id),
        )
        ctx.log.info("Starting tender sync")

        try:
            async with asyncio.timeout(self.timeout):
                stats = await self._sync(ctx, settings)
        except ConfigurationError as e:
            return self._fail(ctx, SETTINGS_ERROR_PREFIX, e)
        except FetchError as e:
            return self._fail(ctx, FETCH_ERROR_PREFIX, e)
        except IndexingError as e:
            return self._fail(ctx, INDEX_ERROR_PREFIX, e)
        except TimeoutError as e:
            prefix = _TIMEOUT_PREFIXES.get(ctx.state, UNEXPECTED_ERROR_PREFIX)
            if self.timeout is None:
                # Raised by a collaborator, not by our deadline
                return self._fail(ctx, prefix, str(e) or "timed out")
            return self._fail(ctx, prefix, f"Sync timed out after {self.timeout:g}s")
        except Exception as e:
            ctx.log.exception("Unexpected error during sync")
            return self._fail(ctx, UNEXPECTED_ERROR_PREFIX, e)

        # Outside the deadline: the data is already indexed
        ctx.enter(SyncState.LOGGING)
        try:
            await self.recorder.record(stats)
        except LogPersistenceError as e:
            ctx.log.error("%s", e)

        ctx.enter(SyncState.DONE)
        message = EMPTY_FETCH_MESSAGE if stats.total == 0 else completed_message(stats)
        ctx.log.info("%s (%.2fs)", message, ctx.duration_seconds)
        return SyncResult(True, message, stats=stats, sync_id=sync_id)

    async def _sync(
        self,
        ctx: SyncContext,
        settings: SyncSettings | Mapping[str, Any] | None,
    ) -> SyncStats:
        """Run the stages up to and including indexing."""
        ctx.enter(SyncState.NORMALIZING)
        params = build_query_params(coerce_settings(settings))

        ctx.enter(SyncState.FETCHING)
        records = await self._fetch(params)

        ctx.enter(SyncState.TRANSFORMING)
        batch = normalize_records(records)
        if batch.rejected or batch.duplicates:
            ctx.log.warning(
                "Filtered %d record(s) without ID and %d duplicate(s)",
                batch.rejected,
                batch.duplicates,
            )

        ctx.enter(SyncState.INDEXING)
        indexed = await self.indexer.index_documents(batch.documents)

        return SyncStats(
            total=len(records),
            added=indexed.added,
            updated=indexed.updated,
            failed=indexed.failed + batch.rejected,
            duplicates=batch.duplicates,
        )

    async def _fetch(self, params: dict[str, str]) -> list[Any]:
        if self.source is not None:
            return await self.source.fetch_records(params)

        async with TenderSource.from_config(self.source_config) as source:
            return await source.fetch_records(params)

    def _fail(self, ctx: SyncContext, prefix: str, error: Exception | str) -> SyncResult:
        failed_stage = ctx.state
        message = f"{prefix}: {error}"
        ctx.enter(SyncState.DONE)
        ctx.log.error("%s", message)
        return SyncResult(
            False,
            message,
            sync_id=ctx.sync_id,
            failed_stage=failed_stage,
        )


async def run_sync(
    settings: SyncSettings | Mapping[str, Any] | None = None,
    *,
    index_client: "AsyncElasticsearch",
    database: "Database",
    config: AppConfig | None = None,
    source: TenderSource | None = None,
    timeout: float | None = None,
) -> SyncResult:
    """Convenience function to run one sync.

    Args:
        settings: Sync settings
        index_client: Elasticsearch client (caller-owned)
        database: Database for the sync log (caller-owned)
        config: Application config (defaults when omitted)
        source: Tender source override
        timeout: Deadline in seconds for fetch through indexing

    Returns:
        SyncResult
    """
    runner = SyncRunner.from_config(
        config or AppConfig(),
        index_client,
        database,
        source=source,
        timeout=timeout,
    )
    return await runner.run(settings)

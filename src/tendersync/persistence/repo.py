"""
Repository pattern for database operations.

Sync log rows are written from inside the async sync pipeline, so the
repository works on an AsyncSession.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from sqlalchemy import func, select

from .models import SyncLog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


# =============================================================================
# Sync Log Repository
# =============================================================================


class SyncLogRepository:
    """Repository for sync log rows."""

    def __init__(self, session: "AsyncSession"):
        self.session = session

    async def create(self, total_tenders: int, new_tenders_count: int) -> SyncLog:
        """Insert one sync log row; sync_time is assigned by the database."""
        entry = SyncLog(
            total_tenders=total_tenders,
            new_tenders_count=new_tenders_count,
        )
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def get_recent(self, limit: int = 10) -> Sequence[SyncLog]:
        """Most recent sync logs, newest first."""
        stmt = (
            select(SyncLog)
            .order_by(SyncLog.sync_time.desc(), SyncLog.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_latest(self) -> SyncLog | None:
        """The most recent sync log, if any."""
        recent = await self.get_recent(limit=1)
        return recent[0] if recent else None

    async def count(self) -> int:
        """Number of sync log rows."""
        result = await self.session.execute(select(func.count(SyncLog.id)))
        return int(result.scalar_one())

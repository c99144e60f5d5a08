"""
SQLAlchemy ORM models for TenderSync.

Defines the relational side of the sync:
- SyncLogs: One audit row per completed sync
- RunLocks: Overlap protection for scheduled syncs
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# =============================================================================
# Base Class
# =============================================================================


def utcnow() -> datetime:
    """Naive UTC now, matching how DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all ORM models."""


# =============================================================================
# Sync Log Model
# =============================================================================


class SyncLog(Base):
    """Audit record of one sync that reached the indexing stage.

    Rows are only ever inserted by the sync; retention is handled
    elsewhere.
    """

    __tablename__ = "sync_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sync_time: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    total_tenders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    new_tenders_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<SyncLog(id={self.id}, total={self.total_tenders}, "
            f"new={self.new_tenders_count})>"
        )


# =============================================================================
# Lock Model (for overlap protection)
# =============================================================================


class RunLock(Base):
    """Lock row preventing overlapping scheduled syncs."""

    __tablename__ = "run_locks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lock_name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    acquired_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    holder_id: Mapped[str] = mapped_column(String(100), nullable=False)  # Process identifier

    def __repr__(self) -> str:
        return f"<RunLock(name='{self.lock_name}', holder='{self.holder_id}')>"

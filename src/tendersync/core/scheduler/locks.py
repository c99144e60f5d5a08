"""
Run lock management for scheduled syncs.
"""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from tendersync.persistence.models import RunLock, utcnow


# Lock guarding the periodic tender sync
SYNC_LOCK_NAME = "sync:tenders"


class LockManager:
    """Manages RunLock rows in database for overlap protection."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _get(self, lock_name: str) -> RunLock | None:
        stmt = select(RunLock).where(RunLock.lock_name == lock_name)
        return self._session.execute(stmt).scalar_one_or_none()

    def acquire(self, lock_name: str, holder_id: str, ttl_minutes: int = 30) -> bool:
        """Acquire lock. Returns True if acquired, False if held by another."""
        now = utcnow()
        expires_at = now + timedelta(minutes=ttl_minutes)

        lock = self._get(lock_name)

        if lock:
            if lock.expires_at > now and lock.holder_id != holder_id:
                return False

            # Expired or already ours: take it over
            lock.holder_id = holder_id
            lock.acquired_at = now
            lock.expires_at = expires_at
        else:
            lock = RunLock(
                lock_name=lock_name,
                acquired_at=now,
                expires_at=expires_at,
                holder_id=holder_id,
            )
            self._session.add(lock)

        self._session.commit()
        return True

    def release(self, lock_name: str, holder_id: str) -> bool:
        """Release lock. Returns True if released, False if not held by us."""
        lock = self._get(lock_name)

        if lock is None or lock.holder_id != holder_id:
            return False

        self._session.delete(lock)
        self._session.commit()
        return True

    def is_locked(self, lock_name: str) -> bool:
        """Check if lock is currently held (not expired)."""
        lock = self._get(lock_name)
        return lock is not None and lock.expires_at > utcnow()

    def cleanup_expired(self) -> int:
        """Remove all expired locks. Returns count removed."""
        stmt = delete(RunLock).where(RunLock.expires_at <= utcnow())
        result = self._session.execute(stmt)
        self._session.commit()
        return int(result.rowcount or 0)

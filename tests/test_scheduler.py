"""Tests for run locks and the scheduled sync job."""

from datetime import timedelta

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from tendersync.core.config.models import AppConfig
from tendersync.core.scheduler.locks import SYNC_LOCK_NAME, LockManager
from tendersync.core.scheduler.service import SchedulerService
from tendersync.persistence.models import RunLock, utcnow

from conftest import SOURCE_URL, make_tender


class TestLockManager:
    """Test suite for LockManager."""

    @pytest.mark.asyncio
    async def test_acquire_and_release(self, database):
        with database.session() as session:
            locks = LockManager(session)

            assert locks.acquire(SYNC_LOCK_NAME, "holder-a") is True
            assert locks.is_locked(SYNC_LOCK_NAME) is True
            assert locks.acquire(SYNC_LOCK_NAME, "holder-b") is False

            assert locks.release(SYNC_LOCK_NAME, "holder-b") is False
            assert locks.release(SYNC_LOCK_NAME, "holder-a") is True
            assert locks.is_locked(SYNC_LOCK_NAME) is False

    @pytest.mark.asyncio
    async def test_reacquire_by_same_holder(self, database):
        with database.session() as session:
            locks = LockManager(session)

            assert locks.acquire(SYNC_LOCK_NAME, "holder-a") is True
            assert locks.acquire(SYNC_LOCK_NAME, "holder-a") is True

    @pytest.mark.asyncio
    async def test_expired_lock_taken_over(self, database):
        with database.session() as session:
            session.add(
                RunLock(
                    lock_name=SYNC_LOCK_NAME,
                    holder_id="dead-process",
                    expires_at=utcnow() - timedelta(minutes=1),
                )
            )
            session.commit()

            locks = LockManager(session)
            assert locks.is_locked(SYNC_LOCK_NAME) is False
            assert locks.acquire(SYNC_LOCK_NAME, "holder-b") is True

    @pytest.mark.asyncio
    async def test_cleanup_expired(self, database):
        with database.session() as session:
            session.add(
                RunLock(
                    lock_name="stale",
                    holder_id="x",
                    expires_at=utcnow() - timedelta(minutes=5),
                )
            )
            session.commit()

            assert LockManager(session).cleanup_expired() == 1


class TestSchedulerService:
    """Test suite for SchedulerService."""

    def _config(self):
        return AppConfig.model_validate({
            "source": {"url": SOURCE_URL},
            "scheduler": {"interval_minutes": 5, "settings": {"pageSize": 10}},
        })

    @pytest.mark.asyncio
    async def test_build_trigger(self, database, es_client):
        service = SchedulerService(self._config(), database, es_client)

        trigger = service.build_trigger()

        assert isinstance(trigger, IntervalTrigger)
        assert trigger.minutes == 5

    @pytest.mark.asyncio
    async def test_run_once_syncs_and_releases_lock(self, database, es_client, source_stub, monkeypatch):
        """A scheduled tick runs one sync and frees the lock afterwards."""
        source_stub.respond_records([make_tender(1)])
        client = source_stub.client()

        from tendersync.core.source import http_source

        original_init = http_source.TenderSource.__init__

        def init_with_stub(self, *args, **kwargs):
            kwargs["client"] = client
            original_init(self, *args, **kwargs)

        monkeypatch.setattr(http_source.TenderSource, "__init__", init_with_stub)

        service = SchedulerService(self._config(), database, es_client)
        try:
            result = await service.run_once()
        finally:
            await client.aclose()

        assert result.success is True
        assert result.stats.added == 1
        assert source_stub.last_params == {"PageSize": "10"}

        with database.session() as session:
            assert LockManager(session).is_locked(SYNC_LOCK_NAME) is False

    @pytest.mark.asyncio
    async def test_run_once_skips_when_locked(self, database, es_client, source_stub):
        """Another holder's live lock means the tick does nothing."""
        with database.session() as session:
            LockManager(session).acquire(SYNC_LOCK_NAME, "other-process")

        service = SchedulerService(self._config(), database, es_client)

        assert await service.run_once() is None
        assert source_stub.requests == []
        assert es_client.bulk_calls == []

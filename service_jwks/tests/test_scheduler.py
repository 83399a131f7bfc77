"""
Unit tests for RefreshScheduler.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from apscheduler.triggers.cron import CronTrigger
from unittest.mock import AsyncMock, MagicMock

from service_jwks.app.models import JWK
from service_jwks.app.refresh.orchestrator import RefreshOrchestrator
from service_jwks.app.refresh.scheduler import RefreshScheduler
from service_jwks.app.snapshot.store import SnapshotStore
from service_jwks.app.sources.registry import SourceDescriptor, SourceRegistry
from shared.metrics import MetricsCollector
from shared.test_helpers import TestDataFactory, source_urls


class TestRefreshScheduler:
    """Test cases for RefreshScheduler."""

    @pytest.fixture
    def orchestrator(self):
        """Orchestrator double."""
        orchestrator = MagicMock()
        orchestrator.refresh = AsyncMock(return_value=None)
        return orchestrator

    @pytest.mark.asyncio
    async def test_start_registers_cron_job(self, orchestrator):
        """The refresh job runs on the configured crontab and lets overlapping runs through."""
        scheduler = RefreshScheduler(orchestrator, "*/5 * * * *", run_on_startup=False)

        scheduler.start()
        try:
            job = scheduler.scheduler.get_job(RefreshScheduler.JOB_ID)

            assert scheduler.running
            assert isinstance(job.trigger, CronTrigger)
            assert str(job.trigger.fields[6]) == "*/5"
            assert job.max_instances == 2
            assert job.coalesce is True
            assert job.next_run_time > datetime.now(timezone.utc)
        finally:
            scheduler.stop()

        assert not scheduler.running

    @pytest.mark.asyncio
    async def test_run_on_startup(self, orchestrator):
        """With run_on_startup the first tick fires immediately."""
        scheduler = RefreshScheduler(orchestrator, "0 0 1 1 *", run_on_startup=True)

        scheduler.start()
        try:
            for _ in range(50):
                if orchestrator.refresh.await_count:
                    break
                await asyncio.sleep(0.02)

            orchestrator.refresh.assert_awaited_once()
            job = scheduler.scheduler.get_job(RefreshScheduler.JOB_ID)
            assert job.next_run_time > datetime.now(timezone.utc) + timedelta(days=1)
        finally:
            scheduler.stop()

    @pytest.mark.asyncio
    async def test_tick_delegates_to_orchestrator(self, orchestrator):
        """Each tick runs one orchestrator refresh."""
        scheduler = RefreshScheduler(orchestrator)

        await scheduler._tick()

        orchestrator.refresh.assert_awaited_once_with()

    def test_stop_without_start(self, orchestrator):
        """Stopping a scheduler that never started is a no-op."""
        scheduler = RefreshScheduler(orchestrator)

        scheduler.stop()

        assert not scheduler.running

    @pytest.mark.asyncio
    async def test_overlapping_tick_counted_as_skipped(self):
        """A tick firing while another is in flight is skipped and counted."""
        registry = SourceRegistry()
        for source_id, url in source_urls("a"):
            registry.register(source_id, SourceDescriptor(source_id, f"{source_id}-jwks-api", url))

        fetcher = MagicMock()
        release = asyncio.Event()
        key = JWK.model_validate(TestDataFactory.create_rsa_key("a1"))

        async def fetch(descriptor):
            await release.wait()
            return (key,)

        fetcher.fetch = AsyncMock(side_effect=fetch)
        metrics = MetricsCollector("jwks")
        store = SnapshotStore()
        orchestrator = RefreshOrchestrator(registry, fetcher, store, metrics=metrics)
        orchestrator.logger = MagicMock()
        scheduler = RefreshScheduler(orchestrator)

        first = asyncio.create_task(scheduler._tick())
        await asyncio.sleep(0)
        await scheduler._tick()
        release.set()
        await first

        assert fetcher.fetch.await_count == 1
        assert metrics.registry.get_sample_value("jwks_refresh_skipped_total") == 1.0
        orchestrator.logger.warning.assert_called_once()
        assert [k.kid for k in store.get().keys] == ["a1"]

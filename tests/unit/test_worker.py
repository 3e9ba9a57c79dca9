"""Unit tests for the arq worker configuration."""
from unittest.mock import AsyncMock, patch

import pytest

from depot_stats.services.store.sql_store import SqlPlaceStore
from depot_stats.tasks.statistics_tasks import (
    recompute_place_statistics_task,
    scheduled_recompute_task,
)
from depot_stats.worker import WorkerSettings, build_cron_jobs, shutdown, startup


class TestBuildCronJobs:
    """Tests for the daily trigger registration."""

    def test_registers_daily_job(self):
        with patch("depot_stats.worker.settings") as mock_settings:
            mock_settings.recompute_enabled = True
            mock_settings.recompute_hour = 4
            mock_settings.recompute_minute = 30

            jobs = build_cron_jobs()

        assert len(jobs) == 1
        job = jobs[0]
        assert job.coroutine is scheduled_recompute_task
        assert job.hour == 4
        assert job.minute == 30
        assert job.unique is True
        assert job.run_at_startup is False

    def test_disabled_registers_nothing(self):
        with patch("depot_stats.worker.settings") as mock_settings:
            mock_settings.recompute_enabled = False

            assert build_cron_jobs() == []


class TestWorkerSettings:
    """Tests for WorkerSettings."""

    def test_registered_functions(self):
        assert WorkerSettings.functions == [recompute_place_statistics_task]
        assert WorkerSettings.max_jobs == 1
        assert WorkerSettings.max_tries == 1
        assert WorkerSettings.queue_name == "depot-stats-queue"

    def test_redis_settings_from_environment(self):
        assert WorkerSettings.redis_settings.host == "localhost"
        assert WorkerSettings.redis_settings.port == 6379
        assert WorkerSettings.redis_settings.password == "test_password"


class TestLifecycle:
    """Tests for startup/shutdown hooks."""

    @pytest.mark.asyncio
    async def test_startup_and_shutdown(self):
        ctx = {}

        await startup(ctx)
        assert isinstance(ctx["store"], SqlPlaceStore)

        with patch("depot_stats.worker.dispose_engine", AsyncMock()) as dispose:
            await shutdown(ctx)

        assert "store" not in ctx
        dispose.assert_awaited_once()

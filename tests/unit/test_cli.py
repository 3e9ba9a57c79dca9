"""Unit tests for the depot-stats command line."""
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from depot_stats import cli
from depot_stats.errors.exceptions import StoreUnavailableError
from depot_stats.services.statistics.batch import BatchResult


class TestRecomputeCommand:
    """Tests for `depot-stats recompute`."""

    def test_success(self, capsys):
        result = BatchResult(places_total=2, places_updated=2, fields_written=42)

        with patch.object(cli, "recompute", AsyncMock(return_value=result)) as recompute:
            assert cli.main(["recompute"]) == 0

        recompute.assert_awaited_once_with(None, False)
        out = capsys.readouterr().out
        assert "Status:          success" in out
        assert "Fields Written:  42" in out

    def test_partial_success_exits_zero(self):
        result = BatchResult(places_total=2, places_updated=1, places_failed=1, failed_place_ids=["p2"])

        with patch.object(cli, "recompute", AsyncMock(return_value=result)):
            assert cli.main(["recompute"]) == 0

    def test_all_failed_exits_one(self):
        result = BatchResult(places_total=1, places_failed=1, failed_place_ids=["p1"])

        with patch.object(cli, "recompute", AsyncMock(return_value=result)):
            assert cli.main(["recompute"]) == 1

    def test_dry_run_subset_prints_values(self, capsys):
        result = BatchResult(
            places_total=1,
            places_updated=1,
            dry_run=True,
            statistics={"p1": {"average price": Decimal("10.00")}},
        )

        with patch.object(cli, "recompute", AsyncMock(return_value=result)) as recompute:
            assert cli.main(["recompute", "--place-id", "p1", "--dry-run"]) == 0

        recompute.assert_awaited_once_with(["p1"], True)
        assert "average price: 10.00" in capsys.readouterr().out

    def test_store_outage_exits_one(self, capsys):
        with patch.object(cli, "recompute", AsyncMock(side_effect=StoreUnavailableError("db down"))):
            assert cli.main(["recompute"]) == 1

        assert "Error: db down" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_recompute_disposes_engine(self, populated_store):
        with patch.object(cli, "SqlPlaceStore", return_value=populated_store), \
             patch.object(cli, "dispose_engine", AsyncMock()) as dispose:
            result = await cli.recompute(["place-a"], False)

        assert result.places_updated == 1
        dispose.assert_awaited_once()


class TestEnqueueCommand:
    """Tests for `depot-stats enqueue`."""

    @pytest.mark.asyncio
    async def test_enqueue_recompute(self):
        pool = MagicMock()
        pool.enqueue_job = AsyncMock(return_value=MagicMock(job_id="job-1"))
        pool.close = AsyncMock()

        with patch.object(cli, "create_pool", AsyncMock(return_value=pool)):
            job_id = await cli.enqueue_recompute("t-1", ["p1"], True)

        assert job_id == "job-1"
        pool.enqueue_job.assert_awaited_once_with(
            "recompute_place_statistics_task",
            task_id="t-1",
            place_ids=["p1"],
            dry_run=True,
            _queue_name="depot-stats-queue",
        )
        pool.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_job(self):
        pool = MagicMock()
        pool.enqueue_job = AsyncMock(return_value=None)
        pool.close = AsyncMock()

        with patch.object(cli, "create_pool", AsyncMock(return_value=pool)):
            assert await cli.enqueue_recompute("t-1", None, False) is None

    def test_main_prints_job(self, capsys):
        with patch.object(cli, "enqueue_recompute", AsyncMock(return_value="job-9")) as enqueue:
            assert cli.main(["enqueue", "--task-id", "manual-1"]) == 0

        enqueue.assert_awaited_once_with("manual-1", None, False)
        assert "job-9" in capsys.readouterr().out

    def test_main_generates_task_id(self, capsys):
        with patch.object(cli, "enqueue_recompute", AsyncMock(return_value=None)) as enqueue:
            assert cli.main(["enqueue"]) == 0

        task_id = enqueue.await_args[0][0]
        assert task_id.startswith("recompute-manual-")
        assert "already queued" in capsys.readouterr().out


class TestShowCommand:
    """Tests for `depot-stats show`."""

    @pytest.mark.asyncio
    async def test_show_single_field(self, memory_store):
        await memory_store.set_stat_field("p1", "average price", Decimal("12.30"))

        with patch.object(cli, "SqlPlaceStore", return_value=memory_store), \
             patch.object(cli, "dispose_engine", AsyncMock()) as dispose:
            lines = await cli.show("p1", "average price")

        assert lines == ["12.30"]
        dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_show_all_fields(self, memory_store):
        await memory_store.set_stat_field("p1", "num of units available", 5)

        with patch.object(cli, "SqlPlaceStore", return_value=memory_store), \
             patch.object(cli, "dispose_engine", AsyncMock()) as dispose:
            lines = await cli.show("p1", None)

        assert len(lines) == 21
        assert lines[0].startswith("num of units available")
        assert lines[0].endswith("5")
        dispose.assert_awaited_once()

    def test_unknown_field_is_rejected(self):
        with pytest.raises(SystemExit):
            cli.main(["show", "p1", "--field", "median price"])

    def test_main_prints_lines(self, capsys):
        with patch.object(cli, "show", AsyncMock(return_value=["1.00"])):
            assert cli.main(["show", "p1", "--field", "average price"]) == 0

        assert capsys.readouterr().out.strip() == "1.00"

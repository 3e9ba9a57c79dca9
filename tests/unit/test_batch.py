"""Unit tests for the batch recompute.

Tests cover:
    - run_batch: writes, skips, per-place failures, dry runs, place subsets
    - call_store: retry and timeout guard
    - BatchResult: status and serialization
"""
import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from depot_stats.errors.exceptions import (
    ConfigurationError,
    StoreError,
    StoreUnavailableError,
    UnknownFieldError,
)
from depot_stats.models.statistics import MINI_BUCKET, STAT_FIELD_NAMES, BucketDefinition
from depot_stats.services.statistics.batch import BatchResult, call_store, run_batch
from depot_stats.services.store.memory_store import InMemoryPlaceStore

FAST = {"max_attempts": 3, "timeout_seconds": 1.0, "retry_wait_seconds": 0}


class TestRunBatch:
    """Tests for run_batch."""

    @pytest.mark.asyncio
    async def test_writes_all_fields_for_places_with_units(self, populated_store):
        result = await run_batch(populated_store, **FAST)

        assert result.places_total == 3
        assert result.places_updated == 2
        assert result.places_skipped == 1
        assert result.places_failed == 0
        assert result.fields_written == 42
        assert result.status == "success"
        assert set(populated_store.stats["place-a"]) == set(STAT_FIELD_NAMES)

    @pytest.mark.asyncio
    async def test_written_values(self, populated_store):
        await run_batch(populated_store, **FAST)

        stats = populated_store.stats["place-a"]
        assert stats["num of units available"] == Decimal("2")
        assert stats["num of m2 available"] == Decimal("12.00")
        assert stats["num of m3 available"] == Decimal("35.00")
        assert stats["average price"] == Decimal("200.00")
        assert stats["average m2 price"] == Decimal("33.33")
        assert stats["mini size average price"] == Decimal("100.00")
        assert stats["medium size average m2 price"] == Decimal("30.00")

        # place-b has a priced unit without a size
        assert populated_store.stats["place-b"]["num of units available"] == Decimal("1")
        assert populated_store.stats["place-b"]["average price"] == Decimal("0")

    @pytest.mark.asyncio
    async def test_place_without_units_keeps_previous_values(self, populated_store):
        previous = {name: Decimal("7.77") for name in STAT_FIELD_NAMES}
        populated_store.stats["place-c"] = dict(previous)

        await run_batch(populated_store, **FAST)

        assert populated_store.stats["place-c"] == previous

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, populated_store):
        await run_batch(populated_store, **FAST)
        first = {place: dict(values) for place, values in populated_store.stats.items()}

        await run_batch(populated_store, **FAST)

        assert populated_store.stats == first

    @pytest.mark.asyncio
    async def test_failing_place_does_not_stop_the_run(self, populated_store):
        original = populated_store.get_units_for_place

        async def flaky(place_id):
            if place_id == "place-a":
                raise UnknownFieldError("broken unit data")
            return await original(place_id)

        populated_store.get_units_for_place = flaky

        result = await run_batch(populated_store, **FAST)

        assert result.places_failed == 1
        assert result.failed_place_ids == ["place-a"]
        assert result.places_updated == 1
        assert result.status == "partial_success"
        assert "place-a" not in populated_store.stats
        assert "place-b" in populated_store.stats

    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self, populated_store):
        original = populated_store.get_units_for_place
        calls = {"n": 0}

        async def unstable(place_id):
            calls["n"] += 1
            if calls["n"] == 1:
                raise StoreUnavailableError("connection reset")
            return await original(place_id)

        populated_store.get_units_for_place = unstable

        result = await run_batch(populated_store, **FAST)

        assert result.places_failed == 0
        assert result.places_updated == 2

    @pytest.mark.asyncio
    async def test_rejected_write_fails_the_place(self, populated_store):
        populated_store.set_stat_field = AsyncMock(return_value=False)

        result = await run_batch(populated_store, place_ids=["place-b"], **FAST)

        assert result.places_failed == 1
        assert result.fields_written == 0
        assert result.status == "error"

    @pytest.mark.asyncio
    async def test_list_failure_aborts(self, memory_store):
        memory_store.list_place_ids = AsyncMock(side_effect=StoreUnavailableError("down"))

        with pytest.raises(StoreUnavailableError):
            await run_batch(memory_store, **FAST)

        assert memory_store.list_place_ids.await_count == 3

    @pytest.mark.asyncio
    async def test_dry_run_does_not_write(self, populated_store):
        result = await run_batch(populated_store, dry_run=True, **FAST)

        assert populated_store.stats == {}
        assert result.fields_written == 0
        assert result.places_updated == 2
        assert set(result.statistics) == {"place-a", "place-b"}
        assert result.statistics["place-a"]["average price"] == Decimal("200.00")

    @pytest.mark.asyncio
    async def test_place_subset(self, populated_store):
        populated_store.list_place_ids = AsyncMock()

        result = await run_batch(populated_store, place_ids=["place-b"], **FAST)

        populated_store.list_place_ids.assert_not_called()
        assert result.places_total == 1
        assert set(populated_store.stats) == {"place-b"}

    @pytest.mark.asyncio
    async def test_empty_store(self, memory_store):
        result = await run_batch(memory_store, **FAST)

        assert result.places_total == 0
        assert result.status == "success"

    @pytest.mark.asyncio
    async def test_empty_bucket_catalog_rejected(self, populated_store):
        with pytest.raises(ConfigurationError):
            await run_batch(populated_store, buckets=(), **FAST)

    @pytest.mark.asyncio
    async def test_custom_catalog_written_by_matching_store(self):
        tiny = (BucketDefinition(label="tiny", min=0, max=1),)
        store = InMemoryPlaceStore(buckets=tiny)
        store.add_unit_type("locker", m2="0.5", m3="1")
        store.add_unit("p1", "u1", price="20", unit_type_id="locker")

        result = await run_batch(store, **FAST)

        assert result.status == "success"
        assert result.fields_written == 6
        assert store.stats["p1"]["tiny average m2 price"] == Decimal("40.00")

    @pytest.mark.asyncio
    async def test_catalog_unknown_to_store_rejected_before_writing(self, populated_store):
        tiny = (BucketDefinition(label="tiny", min=0, max=1),)

        with pytest.raises(ConfigurationError) as exc_info:
            await run_batch(populated_store, buckets=tiny, **FAST)

        assert "tiny average price" in exc_info.value.message
        assert populated_store.stats == {}

    @pytest.mark.asyncio
    async def test_standard_subset_catalog_accepted(self, populated_store):
        result = await run_batch(populated_store, buckets=(MINI_BUCKET,), **FAST)

        assert result.fields_written == 12
        assert set(populated_store.stats["place-a"]) == {
            "num of units available",
            "num of m2 available",
            "num of m3 available",
            "mini size average price",
            "mini size average m2 price",
            "mini size average m3 price",
        }

    @pytest.mark.asyncio
    async def test_dry_run_accepts_any_catalog(self, populated_store):
        tiny = (BucketDefinition(label="tiny", min=0, max=1),)

        result = await run_batch(populated_store, buckets=tiny, dry_run=True, **FAST)

        assert result.status == "success"
        assert "tiny average price" in result.statistics["place-a"]


class TestCallStore:
    """Tests for the per-call timeout and retry guard."""

    @pytest.mark.asyncio
    async def test_returns_result(self):
        func = AsyncMock(return_value=["p1"])

        assert await call_store("list_place_ids", func, **FAST) == ["p1"]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        func = AsyncMock(side_effect=StoreUnavailableError("down"))

        with pytest.raises(StoreUnavailableError):
            await call_store("get_units_for_place", func, "p1", **FAST)

        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_timeout_becomes_store_unavailable(self):
        async def slow():
            await asyncio.sleep(1)

        with pytest.raises(StoreUnavailableError) as exc_info:
            await call_store(
                "list_place_ids", slow,
                max_attempts=2, timeout_seconds=0.01, retry_wait_seconds=0,
            )

        assert "timed out" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self):
        func = AsyncMock(side_effect=UnknownFieldError("bad field"))

        with pytest.raises(UnknownFieldError):
            await call_store("set_stat_field", func, **FAST)

        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_rejected_query_is_not_retried(self):
        func = AsyncMock(side_effect=StoreError("numeric field overflow"))

        with pytest.raises(StoreError):
            await call_store("set_stat_field", func, "p1", "average price", 1, **FAST)

        assert func.await_count == 1


class TestBatchResult:
    """Tests for BatchResult."""

    @pytest.mark.parametrize("total,failed,status", [
        (0, 0, "success"),
        (5, 0, "success"),
        (5, 2, "partial_success"),
        (5, 5, "error"),
    ])
    def test_status(self, total, failed, status):
        assert BatchResult(places_total=total, places_failed=failed).status == status

    def test_to_dict_includes_statistics_only_when_dry(self):
        statistics = {"p": {"average price": Decimal("1.50")}}

        assert "statistics" not in BatchResult(statistics=statistics).to_dict()
        data = BatchResult(dry_run=True, statistics=statistics).to_dict()
        assert data["statistics"] == {"p": {"average price": "1.50"}}

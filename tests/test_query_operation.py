"""
Tests for QueryOperation.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from dbbench.core.errors import OperationFailedError
from dbbench.core.operations.helpers import generate_transaction
from dbbench.core.operations.query import QueryOperation
from dbbench.models.metrics import OperationKind
from dbbench.models.operation_config import WriteConfig


class TestQueryOperation:
    """QueryOperation against the fake backend."""

    @pytest.mark.asyncio
    async def test_default_window_returns_recent_records(self, collector, backend) -> None:
        cfg = WriteConfig.from_params({"dataSize": 4})
        backend.seed([generate_transaction(cfg, i) for i in range(3)])
        await collector.start_test("query")

        result = await QueryOperation.from_params({"limit": 50, "dataSize": 10}).execute(
            backend, collector
        )

        assert result.items_processed == 3
        assert len(result.data["transactionIDs"]) == 3
        _, (_, start, end) = backend.calls[0]
        assert end - start == timedelta(hours=24)

        run = await collector.end_test("query")
        assert len(run.operations) == 1
        record = run.operations[0]
        assert record.kind == OperationKind.QUERY
        # Counts are the planned limit, not the returned row count.
        assert record.item_count == 50
        assert record.byte_count == 500

    @pytest.mark.asyncio
    async def test_explicit_rfc3339_window(self, collector, backend) -> None:
        await collector.start_test("window")

        result = await QueryOperation.from_params(
            {"startTime": "2024-01-01T00:00:00Z", "endTime": "2024-01-02T00:00:00+00:00"}
        ).execute(backend, collector)

        assert result.data["startTime"] == "2024-01-01T00:00:00+00:00"
        assert result.data["endTime"] == "2024-01-02T00:00:00+00:00"
        assert result.items_processed == 0

    @pytest.mark.asyncio
    async def test_unparseable_time_falls_back_to_last_day(self, collector, backend) -> None:
        await collector.start_test("fallback")
        before = datetime.now(UTC)

        await QueryOperation.from_params({"startTime": "yesterday-ish"}).execute(
            backend, collector
        )

        _, (_, start, end) = backend.calls[0]
        assert end >= before
        assert start == end - timedelta(hours=24)

    @pytest.mark.asyncio
    async def test_failed_query_raises(self, collector, make_backend) -> None:
        backend = make_backend(fail_all=True)
        await collector.start_test("query-fail")

        with pytest.raises(OperationFailedError) as exc_info:
            await QueryOperation.from_params({}).execute(backend, collector)

        assert len(exc_info.value.result.errors) == 1
        run = await collector.end_test("query-fail")
        assert run.summary["errorCount"] == 1

"""
Tests for WriteOperation (individual and batched).
"""

from __future__ import annotations

import pytest

from dbbench.core.errors import OperationFailedError
from dbbench.core.operations.helpers import deterministic_id
from dbbench.core.operations.write import WriteOperation
from dbbench.models.metrics import OperationKind


class TestWriteOperation:
    """WriteOperation against the fake backend."""

    @pytest.mark.asyncio
    async def test_individual_writes(self, collector, backend) -> None:
        await collector.start_test("write")

        result = await WriteOperation.from_params(
            {"itemCount": 5, "dataSize": 64, "accountId": "acct-1"}
        ).execute(backend, collector)

        assert result.items_processed == 5
        assert result.data["transactionIDs"] == [deterministic_id("acct-1", i) for i in range(5)]
        assert len(backend.store) == 5
        assert all(len(tx.metadata) == 64 for tx in backend.store.values())

        run = await collector.end_test("write")
        assert run.summary["totalBytes"] == 5 * 64
        assert all(op.kind == OperationKind.WRITE for op in run.operations)

    @pytest.mark.asyncio
    async def test_batch_write_with_one_failed_batch(self, collector, make_backend) -> None:
        """53 records in batches of 25: the middle batch fails, the rest succeed."""
        backend = make_backend(fail_keys={deterministic_id("test-account", 25)})
        await collector.start_test("write-batch")

        result = await WriteOperation.from_params(
            {"itemCount": 53, "batchSize": 25, "batch": True, "dataSize": 16}
        ).execute(backend, collector)

        assert result.data["batchCount"] == 3
        assert len(result.errors) == 1
        assert result.errors[0].key == 1
        assert result.items_processed == 28
        assert result.items_attempted == 53
        assert sorted(size for name, size in backend.calls if name == "batch_write") == [3, 25, 25]

        run = await collector.end_test("write-batch")
        batches = sorted(op.item_count for op in run.operations)
        assert batches == [3, 25, 25]
        assert all(op.kind == OperationKind.BATCH for op in run.operations)
        assert run.summary["errorCount"] == 1
        assert run.summary["totalBytes"] == 53 * 16

    @pytest.mark.asyncio
    async def test_all_batches_failed_raises(self, collector, make_backend) -> None:
        backend = make_backend(fail_all=True)
        await collector.start_test("write-fail")

        with pytest.raises(OperationFailedError) as exc_info:
            await WriteOperation.from_params(
                {"itemCount": 10, "batchSize": 4, "batch": True}
            ).execute(backend, collector)

        assert len(exc_info.value.result.errors) == 3
        assert exc_info.value.result.items_processed == 0

    @pytest.mark.asyncio
    async def test_random_ids_are_unique(self, collector, backend) -> None:
        await collector.start_test("random")

        result = await WriteOperation.from_params(
            {"itemCount": 20, "useRandomIDs": True}
        ).execute(backend, collector)

        ids = result.data["transactionIDs"]
        assert len(set(ids)) == 20
        assert not any(i.startswith("test-account-tx-") for i in ids)

    @pytest.mark.asyncio
    async def test_cold_start_flag_is_recorded(self, collector, backend) -> None:
        await collector.start_test("cold")
        await WriteOperation.from_params(
            {"itemCount": 2, "isColdStart": True}
        ).execute(backend, collector)
        run = await collector.end_test("cold")
        assert run.summary["coldStartCount"] == 2

"""
Tests for the pydantic data models, error types and error classification.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from dbbench.core.errors import (
    ItemFailure,
    RecordNotFoundError,
    StorageError,
    classify_error,
    count_error_categories,
)
from dbbench.models import (
    BenchmarkRun,
    OperationKind,
    OperationRecord,
    OperationResult,
    Transaction,
    TransactionKey,
    TransactionType,
)


def _record(**overrides) -> OperationRecord:
    values = dict(
        kind=OperationKind.READ,
        start_time=datetime(2024, 1, 1, tzinfo=UTC),
        start_ns=1_000,
        end_ns=3_000,
    )
    values.update(overrides)
    return OperationRecord(**values)


def test_operation_record_derived_fields() -> None:
    record = _record(item_count=2, byte_count=10)

    assert record.duration_ns == 2_000
    assert record.success is True
    assert record.end_time > record.start_time

    failed = _record(error_message="boom", error_type="RuntimeError")
    assert failed.success is False


def test_operation_record_rejects_backwards_clock() -> None:
    with pytest.raises(ValidationError):
        _record(start_ns=5, end_ns=4)


def test_operation_record_rejects_negative_counts() -> None:
    with pytest.raises(ValidationError):
        _record(item_count=-1)


def test_operation_record_serializes_computed_fields() -> None:
    data = _record().model_dump()
    assert data["duration_ns"] == 2_000
    assert data["success"] is True


def test_benchmark_run_defaults() -> None:
    run = BenchmarkRun(name="r")

    assert run.status.value == "running"
    assert run.is_finished is False
    assert run.operation_count == 0
    assert run.summary == {}
    assert run.custom_metrics() == {}


def test_transaction_key_and_size() -> None:
    tx = Transaction(account_id="acct", uuid="id-1", metadata=b"x" * 10)

    assert tx.key == TransactionKey("acct", "id-1")
    assert tx.transaction_type == TransactionType.DEPOSIT
    assert tx.estimated_size() == len("id-1") + len("acct") + len("DEPOSIT") + 8 + 10


def test_operation_result_partial_failure() -> None:
    result = OperationResult(items_processed=3, errors=[ItemFailure("bad")])
    assert result.partial_failure
    assert result.error_count == 1
    assert not OperationResult().partial_failure
    assert not OperationResult(errors=[ItemFailure("bad")]).partial_failure


def test_item_failure_wraps_cause() -> None:
    cause = RecordNotFoundError("acct", "id-9")
    failure = ItemFailure("failed to read transaction id-9", key="id-9", cause=cause)

    assert failure.key == "id-9"
    assert failure.cause is cause
    assert failure.__cause__ is cause
    assert str(failure) == "failed to read transaction id-9: transaction not found: acct/id-9"


@pytest.mark.parametrize(
    "exc, category",
    [
        (asyncio.TimeoutError(), "TimeoutError"),
        (TimeoutError("slow"), "TimeoutError"),
        (asyncio.CancelledError(), "CancelledError"),
        (StorageError("Rate exceeded for shard"), "THROTTLED"),
        (StorageError("ProvisionedThroughputExceeded: throttling"), "THROTTLED"),
        (RecordNotFoundError("a", "b"), "RecordNotFoundError"),
        (ValueError("x"), "ValueError"),
    ],
)
def test_classify_error(exc, category) -> None:
    assert classify_error(exc) == category


def test_classify_error_unwraps_item_failure() -> None:
    failure = ItemFailure("failed", cause=TimeoutError())
    assert classify_error(failure) == "TimeoutError"


def test_count_error_categories() -> None:
    errors = [
        ItemFailure("a", cause=TimeoutError()),
        ItemFailure("b", cause=TimeoutError()),
        ItemFailure("c", cause=RecordNotFoundError("x", "y")),
    ]
    assert count_error_categories(errors) == {"TimeoutError": 2, "RecordNotFoundError": 1}
    assert count_error_categories([]) == {}

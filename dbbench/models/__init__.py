"""
Data models for dbbench.

This package contains Pydantic models for:
- Benchmark runs and per-operation measurements
- The transaction record written to and read from backends
- Storage call options
- Operation parameter sets
- Orchestrator request/response payloads
"""

from dbbench.models.metrics import (
    OperationKind,
    RunStatus,
    OperationRecord,
    BenchmarkRun,
)

from dbbench.models.transaction import (
    TransactionType,
    TransactionKey,
    Transaction,
)

from dbbench.models.options import (
    ReadOptions,
    WriteOptions,
    QueryOptions,
    BatchOptions,
)

from dbbench.models.results import OperationResult

from dbbench.models.benchmark import BenchmarkRequest, BenchmarkResponse

__all__ = [
    # metrics
    "OperationKind",
    "RunStatus",
    "OperationRecord",
    "BenchmarkRun",
    # transaction
    "TransactionType",
    "TransactionKey",
    "Transaction",
    # options
    "ReadOptions",
    "WriteOptions",
    "QueryOptions",
    "BatchOptions",
    # results
    "OperationResult",
    # orchestrator
    "BenchmarkRequest",
    "BenchmarkResponse",
]

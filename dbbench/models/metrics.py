"""
Metrics Models

Pydantic models for benchmark runs and the individual operations measured
inside them.
"""

from enum import Enum
from typing import Optional, Dict, Any, List
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, computed_field, model_validator


class OperationKind(str, Enum):
    """Kinds of measured storage operations."""

    READ = "READ"
    WRITE = "WRITE"
    QUERY = "QUERY"
    BATCH = "BATCH"
    TRANSACTION = "TRANSACTION"


class RunStatus(str, Enum):
    """Benchmark run lifecycle status."""

    RUNNING = "running"
    COMPLETED = "completed"


# Summary keys computed at end_test. Anything else in a run summary was added
# through add_custom_metric.
OPERATION_COUNT = "operationCount"
TOTAL_DURATION = "totalDuration"
AVERAGE_DURATION = "averageDuration"
TOTAL_ITEMS = "totalItems"
TOTAL_BYTES = "totalBytes"
SUCCESS_COUNT = "successCount"
ERROR_COUNT = "errorCount"
SUCCESS_RATE = "successRate"
THROUGHPUT_ITEMS = "throughputItems"
THROUGHPUT_BYTES = "throughputBytes"
COLD_START_COUNT = "coldStartCount"
P50 = "p50"
P90 = "p90"
P99 = "p99"

PERCENTILE_KEYS = {P50: 50, P90: 90, P99: 99}

SUMMARY_KEYS = (
    OPERATION_COUNT,
    TOTAL_DURATION,
    AVERAGE_DURATION,
    TOTAL_ITEMS,
    TOTAL_BYTES,
    SUCCESS_COUNT,
    ERROR_COUNT,
    SUCCESS_RATE,
    THROUGHPUT_ITEMS,
    THROUGHPUT_BYTES,
    COLD_START_COUNT,
    *PERCENTILE_KEYS,
)


class OperationRecord(BaseModel):
    """
    One measured unit of work.

    Duration comes from the monotonic clock readings taken around the call,
    so it is never negative even if the wall clock moves.
    """

    model_config = ConfigDict(frozen=True)

    kind: OperationKind = Field(..., description="Operation kind")
    start_time: datetime = Field(..., description="Wall-clock start (UTC)")
    start_ns: int = Field(..., description="Monotonic clock at start (ns)")
    end_ns: int = Field(..., description="Monotonic clock at end (ns)")
    item_count: int = Field(0, ge=0, description="Logical records touched")
    byte_count: int = Field(0, ge=0, description="Payload size in bytes")
    is_cold_start: bool = Field(False, description="Includes backend initialization")
    error_message: Optional[str] = Field(None, description="Error message if failed")
    error_type: Optional[str] = Field(None, description="Exception class if failed")

    @model_validator(mode="after")
    def validate_clock(self):
        if self.end_ns < self.start_ns:
            raise ValueError("end_ns must not precede start_ns")
        return self

    @computed_field
    @property
    def duration_ns(self) -> int:
        return self.end_ns - self.start_ns

    @computed_field
    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(microseconds=self.duration_ns / 1000)

    @computed_field
    @property
    def success(self) -> bool:
        return self.error_message is None


class BenchmarkRun(BaseModel):
    """
    A named, time-bounded collection of measured operations.

    The summary is filled by MetricsCollector.end_test and may also hold
    custom metrics added while the run was active.
    """

    name: str = Field(..., description="Unique run name")
    description: str = Field("", description="Human-readable description")
    backend: str = Field("", description="Backend type tag")
    config: Dict[str, Any] = Field(default_factory=dict, description="Backend config")
    parameters: Dict[str, Any] = Field(
        default_factory=dict, description="Operation parameters"
    )

    status: RunStatus = Field(RunStatus.RUNNING, description="Run status")
    start_time: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Run start (UTC)"
    )
    end_time: Optional[datetime] = Field(None, description="Run end (UTC)")
    duration_seconds: Optional[float] = Field(None, description="Run duration")

    operations: List[OperationRecord] = Field(default_factory=list)
    summary: Dict[str, Any] = Field(default_factory=dict)

    _start_ns: int = PrivateAttr(default=0)

    @property
    def is_finished(self) -> bool:
        return self.status == RunStatus.COMPLETED

    @property
    def operation_count(self) -> int:
        return len(self.operations)

    def custom_metrics(self) -> Dict[str, Any]:
        """Summary entries that were not computed by end_test."""
        return {k: v for k, v in self.summary.items() if k not in SUMMARY_KEYS}

"""
Metrics Collector

Tracks named benchmark runs, records per-operation measurements and computes
run summaries (throughput, success rate, percentiles) when a run ends.
"""

import asyncio
import logging
import time
from datetime import UTC, datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from dbbench.config import settings
from dbbench.core.errors import CollectorError, DuplicateRunError, NoActiveRunError
from dbbench.models.metrics import (
    AVERAGE_DURATION,
    COLD_START_COUNT,
    ERROR_COUNT,
    OPERATION_COUNT,
    PERCENTILE_KEYS,
    SUCCESS_COUNT,
    SUCCESS_RATE,
    THROUGHPUT_BYTES,
    THROUGHPUT_ITEMS,
    TOTAL_BYTES,
    TOTAL_DURATION,
    TOTAL_ITEMS,
    BenchmarkRun,
    OperationKind,
    OperationRecord,
    RunStatus,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def nearest_rank_percentile(sorted_values: List[int], p: float) -> int:
    """
    Nearest-rank percentile: sorted_values[floor(n * p / 100)].

    No interpolation between ranks. The index is clamped to the last element
    so p=100 is valid.
    """
    n = len(sorted_values)
    if n == 0:
        raise ValueError("cannot take a percentile of an empty sequence")
    idx = min(int(n * p // 100), n - 1)
    return sorted_values[idx]


class MetricsCollector:
    """
    Collects operation measurements for one benchmark session.

    Features:
    - Named runs with a single "current" run receiving measurements
    - Pass-through timing of async work callables
    - Summary statistics recomputed from the raw records at end_test
    - Custom metrics merged into the run summary at any time

    A single asyncio.Lock guards the run table and the current pointer. The
    measured work itself runs outside the lock.
    """

    def __init__(self, percentile_min_operations: Optional[int] = None):
        """
        Initialize metrics collector.

        Args:
            percentile_min_operations: Minimum operations before p50/p90/p99
                are included in a summary
        """
        self.percentile_min_operations = (
            percentile_min_operations
            if percentile_min_operations is not None
            else settings.PERCENTILE_MIN_OPERATIONS
        )
        self._runs: Dict[str, BenchmarkRun] = {}
        self._current: Optional[BenchmarkRun] = None
        self._lock = asyncio.Lock()

    @property
    def current_test_name(self) -> Optional[str]:
        return self._current.name if self._current is not None else None

    async def start_test(
        self,
        name: str,
        description: str = "",
        backend: str = "",
        config: Optional[Dict[str, Any]] = None,
        parameters: Optional[Dict[str, Any]] = None,
        *,
        overwrite: bool = False,
    ) -> BenchmarkRun:
        """
        Start a new run and make it the current measurement target.

        Any previously current run stops receiving new measurements but stays
        retrievable by name.

        Raises:
            DuplicateRunError: name is already in the run table and
                overwrite is False
        """
        async with self._lock:
            if name in self._runs and not overwrite:
                raise DuplicateRunError(name)

            previous = self._current
            run = BenchmarkRun(
                name=name,
                description=description,
                backend=backend,
                config=dict(config or {}),
                parameters=dict(parameters or {}),
            )
            run._start_ns = time.perf_counter_ns()

            self._runs[name] = run
            self._current = run

        if previous is not None and previous.name != name:
            logger.info(f"Test '{previous.name}' superseded by '{name}'")
        logger.info(f"✅ Test started: {name} (backend={backend or 'n/a'})")
        return run

    async def measure_operation(
        self,
        kind: OperationKind,
        item_count: int,
        byte_count: int,
        is_cold_start: bool,
        work: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Await `work` and record its duration and outcome on the current run.

        Returns whatever `work` returns. If `work` raises, the exception is
        recorded and re-raised unchanged.

        Raises:
            CollectorError: work is None or kind is not an OperationKind
            NoActiveRunError: no run is current (work is not invoked)
        """
        if work is None:
            raise CollectorError("operation function cannot be None")
        try:
            kind = OperationKind(kind)
        except ValueError as e:
            raise CollectorError(f"invalid operation kind: {kind!r}") from e

        async with self._lock:
            run = self._current
        if run is None:
            raise NoActiveRunError()

        start_time = datetime.now(UTC)
        start_ns = time.perf_counter_ns()
        error: Optional[BaseException] = None
        try:
            return await work()
        except BaseException as exc:
            error = exc
            raise
        finally:
            end_ns = time.perf_counter_ns()
            record = OperationRecord(
                kind=kind,
                start_time=start_time,
                start_ns=start_ns,
                end_ns=end_ns,
                item_count=max(0, int(item_count)),
                byte_count=max(0, int(byte_count)),
                is_cold_start=bool(is_cold_start),
                error_message=_error_message(error) if error is not None else None,
                error_type=type(error).__name__ if error is not None else None,
            )
            await self._append(run, record)

    async def _append(self, run: BenchmarkRun, record: OperationRecord) -> None:
        async with self._lock:
            if run.is_finished:
                logger.warning(
                    "Dropping %s measurement for finished test '%s'",
                    record.kind.value,
                    run.name,
                )
                return
            run.operations.append(record)

    async def add_custom_metric(self, name: str, value: Any) -> None:
        """
        Merge a custom key/value into the current run's summary.

        Raises:
            NoActiveRunError: no run is current
        """
        async with self._lock:
            if self._current is None:
                raise NoActiveRunError()
            self._current.summary[name] = value

    async def end_test(self, name: str) -> Optional[BenchmarkRun]:
        """
        Finalize the named run if it is the current one.

        Returns:
            The finalized run, or None when `name` is not the current run
            (unknown, already ended, or superseded)
        """
        async with self._lock:
            run = self._runs.get(name)
            if run is None or run is not self._current:
                logger.warning(f"end_test('{name}') ignored: not the current test")
                return None

            elapsed_ns = time.perf_counter_ns() - run._start_ns
            run.duration_seconds = elapsed_ns / 1e9
            run.end_time = run.start_time + timedelta(seconds=run.duration_seconds)
            run.summary.update(self._calculate_summary(run))
            run.status = RunStatus.COMPLETED
            self._current = None

        logger.info(
            f"🏁 Test finished: {name} ops={run.summary[OPERATION_COUNT]} "
            f"errors={run.summary[ERROR_COUNT]} duration={run.duration_seconds:.3f}s"
        )
        return run

    def _calculate_summary(self, run: BenchmarkRun) -> Dict[str, Any]:
        """
        Compute summary statistics from the run's operation records.

        Must be called while holding _lock.
        """
        ops = run.operations
        op_count = len(ops)

        total_duration = 0
        total_items = 0
        total_bytes = 0
        success_count = 0
        error_count = 0
        cold_start_count = 0
        for op in ops:
            total_duration += op.duration_ns
            total_items += op.item_count
            total_bytes += op.byte_count
            if op.success:
                success_count += 1
            else:
                error_count += 1
            if op.is_cold_start:
                cold_start_count += 1

        seconds = run.duration_seconds or 0.0

        summary: Dict[str, Any] = {
            OPERATION_COUNT: op_count,
            TOTAL_DURATION: total_duration,
            AVERAGE_DURATION: total_duration // op_count if op_count else 0,
            TOTAL_ITEMS: total_items,
            TOTAL_BYTES: total_bytes,
            SUCCESS_COUNT: success_count,
            ERROR_COUNT: error_count,
            SUCCESS_RATE: success_count / op_count if op_count else 0.0,
            THROUGHPUT_ITEMS: total_items / seconds if seconds > 0 else 0.0,
            THROUGHPUT_BYTES: total_bytes / seconds if seconds > 0 else 0.0,
            COLD_START_COUNT: cold_start_count,
        }

        if op_count >= self.percentile_min_operations:
            summary.update(self._calculate_percentiles([op.duration_ns for op in ops]))
        else:
            # Percentile keys are computed-only; do not leave stale values.
            for key in PERCENTILE_KEYS:
                run.summary.pop(key, None)

        return summary

    def _calculate_percentiles(self, durations: List[int]) -> Dict[str, int]:
        """
        Calculate nearest-rank duration percentiles (nanoseconds).

        Args:
            durations: Per-operation durations in nanoseconds
        """
        sorted_durations = sorted(durations)
        return {
            key: nearest_rank_percentile(sorted_durations, p)
            for key, p in PERCENTILE_KEYS.items()
        }

    async def get_test_result(self, name: str) -> Optional[BenchmarkRun]:
        """Look up a run by name, finished or still in progress."""
        async with self._lock:
            return self._runs.get(name)

    async def list_test_results(self) -> List[BenchmarkRun]:
        """All stored runs in start order."""
        async with self._lock:
            return list(self._runs.values())

    async def reset(self) -> None:
        """Drop all runs and the current pointer."""
        async with self._lock:
            self._runs.clear()
            self._current = None
        logger.info("Metrics reset")


def _error_message(exc: BaseException) -> str:
    msg = str(exc)
    return msg if msg else type(exc).__name__

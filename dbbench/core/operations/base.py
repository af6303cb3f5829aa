"""
Operation strategy base class and execution context.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, ClassVar, Mapping, Optional, TypeVar

from dbbench.core.errors import ItemFailure, NoActiveRunError, OperationFailedError
from dbbench.core.metrics_collector import MetricsCollector
from dbbench.models.metrics import OperationKind
from dbbench.models.operation_config import OperationConfig
from dbbench.models.results import OperationResult
from dbbench.storage.base import StorageBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ExecutionContext:
    """Everything one Operation.execute call threads through its storage calls."""

    backend: StorageBackend
    collector: MetricsCollector
    result: OperationResult
    is_cold_start: bool = False
    deadline: Optional[float] = None

    async def call(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Await a storage call, bounded by the execution deadline if any."""
        if self.deadline is None:
            return await fn()
        async with asyncio.timeout_at(self.deadline):
            return await fn()

    async def measure(
        self,
        kind: OperationKind,
        item_count: int,
        byte_count: int,
        fn: Callable[[], Awaitable[T]],
    ) -> T:
        """Run a storage call through the collector."""
        return await self.collector.measure_operation(
            kind,
            item_count,
            byte_count,
            self.is_cold_start,
            lambda: self.call(fn),
        )

    def record_failure(self, message: str, key: Any, exc: Exception) -> None:
        self.result.errors.append(ItemFailure(message, key=key, cause=exc))
        logger.debug("%s: %s", message, exc)


class Operation(ABC):
    """
    A benchmark workload against one storage backend.

    Subclasses implement _run, dispatching storage calls through the
    ExecutionContext so every call is timed by the collector. Per-item
    failures are collected on the result; execute raises only when every
    dispatched unit of work failed.
    """

    operation_name: ClassVar[str] = "operation"
    config_model: ClassVar[type[OperationConfig]] = OperationConfig

    def __init__(self, config: OperationConfig):
        self.config = config

    @classmethod
    def from_params(cls, params: Optional[Mapping[str, Any]] = None, **overrides: Any):
        """Build the operation from an untyped parameter map."""
        merged = dict(params or {})
        merged.update(overrides)
        return cls(cls.config_model.from_params(merged))

    async def execute(
        self,
        backend: StorageBackend,
        collector: MetricsCollector,
        *,
        timeout: Optional[float] = None,
    ) -> OperationResult:
        """
        Run the operation.

        Args:
            backend: Storage backend under test
            collector: Collector with an active run
            timeout: Optional overall deadline in seconds shared by every
                storage call; expiry is recorded as a per-item TimeoutError

        Returns:
            OperationResult with per-item failures in `errors`

        Raises:
            OperationFailedError: every dispatched unit of work failed
            OperationConfigError: invalid parameters detected before dispatch
            CollectorError: the collector has no active run, or it was ended
                while the operation was still dispatching
        """
        if collector.current_test_name is None:
            raise NoActiveRunError()

        deadline = None
        if timeout is not None:
            deadline = asyncio.get_running_loop().time() + timeout

        result = OperationResult()
        ctx = ExecutionContext(
            backend=backend,
            collector=collector,
            result=result,
            is_cold_start=self.config.is_cold_start,
            deadline=deadline,
        )

        start = time.perf_counter()
        dispatched = await self._run(ctx)
        result.total_duration = time.perf_counter() - start

        if result.errors:
            logger.info(
                f"{self.operation_name}: {len(result.errors)}/{dispatched} "
                f"units failed, {result.items_processed} items processed"
            )

        if dispatched > 0 and len(result.errors) >= dispatched:
            raise OperationFailedError(f"all {self.operation_name} operations failed", result)

        return result

    @abstractmethod
    async def _run(self, ctx: ExecutionContext) -> int:
        """
        Dispatch the workload.

        Returns:
            Number of units of work dispatched (items, batches or queries),
            used for the all-failed check
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config!r})"

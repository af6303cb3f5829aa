"""
Benchmark Orchestrator

Turns a BenchmarkRequest into a measured run: builds the backend and the
operation, executes it inside a named collector run and reports the summary.
"""

import logging
import time
from datetime import UTC, datetime
from typing import Any, Callable, Dict, Optional

import psutil

from dbbench.config import settings
from dbbench.core.errors import BenchmarkError, OperationFailedError, count_error_categories
from dbbench.core.metrics_collector import MetricsCollector
from dbbench.core.operations.factory import OperationFactory
from dbbench.models.benchmark import BenchmarkRequest, BenchmarkResponse
from dbbench.models.results import OperationResult
from dbbench.storage import StorageBackend, create_backend

logger = logging.getLogger(__name__)

BACKEND_PARAM_PREFIX = "db."

BackendFactory = Callable[[str, Dict[str, Any]], StorageBackend]


def default_parameters() -> Dict[str, Any]:
    return {
        "concurrency": settings.DEFAULT_CONCURRENCY,
        "itemCount": settings.DEFAULT_ITEM_COUNT,
        "dataSize": settings.DEFAULT_DATA_SIZE,
        "consistentRead": True,
    }


def split_parameters(params: Dict[str, Any]) -> tuple[Dict[str, Any], Dict[str, Any]]:
    """Split request parameters into (backend config, operation parameters)."""
    backend_config: Dict[str, Any] = {}
    op_params: Dict[str, Any] = {}
    for key, value in params.items():
        if key.startswith(BACKEND_PARAM_PREFIX):
            backend_config[key[len(BACKEND_PARAM_PREFIX):]] = value
        else:
            op_params[key] = value
    return backend_config, op_params


class BenchmarkRunner:
    """
    Executes benchmark requests against a shared collector.

    The first request a runner handles is flagged as a cold start; every
    later one is warm. Failures are reported on the response rather than
    raised.
    """

    def __init__(
        self,
        collector: Optional[MetricsCollector] = None,
        factory: Optional[OperationFactory] = None,
        backend_factory: BackendFactory = create_backend,
    ):
        self.collector = collector or MetricsCollector()
        self.factory = factory or OperationFactory()
        self.backend_factory = backend_factory
        self._is_cold_start = True
        self._process = psutil.Process()
        # Prime cpu_percent so later calls return a delta.
        self._process.cpu_percent(interval=None)

    async def run(self, request: BenchmarkRequest) -> BenchmarkResponse:
        wall_start = time.perf_counter()
        logger.info(
            f"Received benchmark request: {request.database_type}/{request.operation_type}"
        )

        response = BenchmarkResponse(
            operation_type=request.operation_type,
            database_type=request.database_type,
        )

        params = dict(request.parameters)
        backend_config, op_params = split_parameters(params)

        test_name = (
            f"{request.database_type}-{request.operation_type}-"
            f"{datetime.now(UTC).isoformat(timespec='microseconds')}"
        )
        try:
            await self.collector.start_test(
                test_name,
                f"{request.operation_type} operations on {request.database_type}",
                request.database_type,
                backend_config,
                params,
            )
        except BenchmarkError as e:
            response.error_message = f"Failed to start test: {e}"
            logger.error(response.error_message)
            return response

        result: Optional[OperationResult] = None
        try:
            result = await self._execute(request, backend_config, op_params, response)
        finally:
            if self.collector.current_test_name == test_name:
                await self._add_run_metrics(result)
            run = await self.collector.end_test(test_name)

        if run is not None and _as_bool(params.get("collectMetrics"), True):
            response.metrics = dict(run.summary)

        if result is not None:
            response.items_processed = result.items_processed
            response.total_duration_ns = int(result.total_duration * 1e9)
            if result.items_processed > 0:
                response.avg_operation_duration_ns = (
                    response.total_duration_ns // result.items_processed
                )
                if result.total_duration > 0:
                    response.throughput = result.items_processed / result.total_duration

        self._is_cold_start = False
        logger.info(f"Benchmark completed in {time.perf_counter() - wall_start:.3f}s")
        return response

    async def _execute(
        self,
        request: BenchmarkRequest,
        backend_config: Dict[str, Any],
        op_params: Dict[str, Any],
        response: BenchmarkResponse,
    ) -> Optional[OperationResult]:
        try:
            backend = self.backend_factory(request.database_type, backend_config)
            await backend.initialize()
        except Exception as e:
            response.error_message = f"Failed to create database adapter: {e}"
            logger.error(response.error_message)
            return None

        try:
            merged = default_parameters()
            merged.update(op_params)
            merged["isColdStart"] = self._is_cold_start

            try:
                operation = self.factory.create(request.operation_type, merged)
            except BenchmarkError as e:
                response.error_message = f"Failed to create operation strategy: {e}"
                logger.error(response.error_message)
                return None

            try:
                result = await operation.execute(backend, self.collector)
            except OperationFailedError as e:
                response.error_message = f"Operation execution failed: {e}"
                logger.error(response.error_message)
                return e.result
            except BenchmarkError as e:
                response.error_message = f"Operation execution failed: {e}"
                logger.error(response.error_message)
                return None

            response.success = True
            return result
        finally:
            await backend.close()

    async def _add_run_metrics(self, result: Optional[OperationResult]) -> None:
        if result is not None and result.errors:
            await self.collector.add_custom_metric(
                "errorCategories", count_error_categories(result.errors)
            )

        try:
            memory_mb = self._process.memory_info().rss / (1024 * 1024)
            cpu_percent = self._process.cpu_percent(interval=None)
        except psutil.Error as e:
            logger.debug("Process metrics collection error: %s", e)
            return
        await self.collector.add_custom_metric("memoryMb", round(memory_mb, 2))
        await self.collector.add_custom_metric("cpuPercent", cpu_percent)


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    return default

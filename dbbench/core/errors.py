"""
Exception types and error classification helpers.

Structural misuse (collector without an active run, unknown operation or
backend names, bad parameters) raises. Per-item storage failures are wrapped
in ItemFailure and collected as data on the OperationResult.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Iterable, Optional

if TYPE_CHECKING:
    from dbbench.models.results import OperationResult


class BenchmarkError(Exception):
    """Base class for all dbbench errors."""


class CollectorError(BenchmarkError):
    """Misuse of the metrics collector API."""


class NoActiveRunError(CollectorError):
    """Raised when a measurement is attempted with no current run."""

    def __init__(self, message: str = "no test is currently running"):
        super().__init__(message)


class DuplicateRunError(CollectorError):
    """Raised when a run name is already present in the run table."""

    def __init__(self, name: str):
        super().__init__(f"a test named '{name}' already exists")
        self.name = name


class OperationConfigError(BenchmarkError, ValueError):
    """Invalid operation parameters or a caller contract violation."""


class UnknownOperationError(BenchmarkError, ValueError):
    """No operation builder registered under the requested type."""

    def __init__(self, operation_type: str):
        super().__init__(f"unknown operation type: {operation_type}")
        self.operation_type = operation_type


class UnsupportedBackendError(BenchmarkError, ValueError):
    """No storage backend registered under the requested type."""

    def __init__(self, backend_type: str):
        super().__init__(f"unsupported database type: {backend_type}")
        self.backend_type = backend_type


class OperationFailedError(BenchmarkError):
    """Every item of an operation failed; the partial result is attached."""

    def __init__(self, message: str, result: "OperationResult"):
        super().__init__(message)
        self.result = result


class ItemFailure(BenchmarkError):
    """A single failed storage call inside an operation."""

    def __init__(self, message: str, key: Any = None, cause: Optional[BaseException] = None):
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.key = key
        self.cause = cause
        self.__cause__ = cause


class StorageError(BenchmarkError):
    """Raised by storage backends."""


class RecordNotFoundError(StorageError):
    """The requested record does not exist."""

    def __init__(self, account_id: str, uuid: str):
        super().__init__(f"transaction not found: {account_id}/{uuid}")
        self.account_id = account_id
        self.uuid = uuid


def classify_error(exc: BaseException) -> str:
    """
    Return a stable, low-cardinality category for a storage failure.

    Failures are expected under load (timeouts, throttling, missing keys), so
    they are aggregated by category rather than logged one by one.
    """
    if isinstance(exc, ItemFailure) and exc.cause is not None:
        exc = exc.cause

    if isinstance(exc, asyncio.CancelledError):
        return "CancelledError"
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return "TimeoutError"

    msg_l = str(exc or "").lower()
    if "throttl" in msg_l or "rate exceeded" in msg_l:
        return "THROTTLED"

    return type(exc).__name__


def count_error_categories(errors: Iterable[BaseException]) -> dict[str, int]:
    """Count errors per classify_error category."""
    counts: dict[str, int] = {}
    for err in errors:
        category = classify_error(err)
        counts[category] = counts.get(category, 0) + 1
    return counts

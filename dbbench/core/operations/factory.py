"""
Operation factory.

Maps operation-type names to operation builders. The built-in names form a
closed enum; register() adds new names at runtime.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from dbbench.core.errors import UnknownOperationError
from dbbench.core.operations.base import Operation
from dbbench.core.operations.ledger import (
    LedgerQueryOperation,
    LedgerReadOperation,
    LedgerWriteOperation,
)
from dbbench.core.operations.query import QueryOperation
from dbbench.core.operations.read import ReadOperation
from dbbench.core.operations.write import WriteOperation

logger = logging.getLogger(__name__)

OperationBuilder = Callable[[Mapping[str, Any]], Operation]


class OperationType(str, Enum):
    """Built-in operation names."""

    READ = "read"
    READ_SEQUENTIAL = "read-sequential"
    READ_PARALLEL = "read-parallel"
    WRITE = "write"
    WRITE_BATCH = "write-batch"
    QUERY = "query"
    LEDGER_WRITE = "ledger_write"
    LEDGER_READ = "ledger_read"
    LEDGER_QUERY = "ledger_query"


_DEFAULT_BUILDERS: Dict[str, OperationBuilder] = {
    OperationType.READ.value: ReadOperation.from_params,
    OperationType.READ_SEQUENTIAL.value: lambda p: ReadOperation.from_params(p, parallel=False),
    OperationType.READ_PARALLEL.value: lambda p: ReadOperation.from_params(p, parallel=True),
    OperationType.WRITE.value: WriteOperation.from_params,
    OperationType.WRITE_BATCH.value: lambda p: WriteOperation.from_params(p, batch=True),
    OperationType.QUERY.value: QueryOperation.from_params,
    OperationType.LEDGER_WRITE.value: LedgerWriteOperation.from_params,
    OperationType.LEDGER_READ.value: LedgerReadOperation.from_params,
    OperationType.LEDGER_QUERY.value: LedgerQueryOperation.from_params,
}


class OperationFactory:
    """Creates operations by name."""

    def __init__(self):
        self._builders: Dict[str, OperationBuilder] = dict(_DEFAULT_BUILDERS)

    def register(self, name: str, builder: OperationBuilder) -> None:
        """Register (or replace) the builder for an operation name."""
        if name in self._builders:
            logger.warning(f"Replacing builder for operation type {name!r}")
        self._builders[name] = builder

    def available(self) -> List[str]:
        return sorted(self._builders)

    def create(self, operation_type: str, params: Optional[Mapping[str, Any]] = None) -> Operation:
        """
        Build an operation from its name and untyped parameters.

        Raises:
            UnknownOperationError: no builder registered for operation_type
            OperationConfigError: parameters have the wrong types
        """
        key = operation_type.value if isinstance(operation_type, OperationType) else operation_type
        builder = self._builders.get(key)
        if builder is None:
            raise UnknownOperationError(operation_type)
        return builder(dict(params or {}))

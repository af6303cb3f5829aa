"""
Operation strategies: read, write, query and their ledger variants.
"""

from dbbench.core.operations.base import ExecutionContext, Operation
from dbbench.core.operations.factory import OperationFactory, OperationType
from dbbench.core.operations.ledger import (
    LedgerQueryOperation,
    LedgerReadOperation,
    LedgerWriteOperation,
)
from dbbench.core.operations.query import QueryOperation
from dbbench.core.operations.read import ReadOperation
from dbbench.core.operations.write import WriteOperation

__all__ = [
    "ExecutionContext",
    "Operation",
    "OperationFactory",
    "OperationType",
    "ReadOperation",
    "WriteOperation",
    "QueryOperation",
    "LedgerWriteOperation",
    "LedgerReadOperation",
    "LedgerQueryOperation",
]

"""
Base Storage Backend

Abstract interface every benchmarked database adapter implements.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
import logging

from dbbench.models.options import BatchOptions, QueryOptions, ReadOptions, WriteOptions
from dbbench.models.transaction import Transaction, TransactionKey

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """
    Abstract base class for storage backends under benchmark.

    Each backend (key-value, time-series, ledger) implements this interface so
    operation strategies can drive them interchangeably. Calls may raise any
    exception; strategies record failures per item.
    """

    backend_type: str = "abstract"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize backend with configuration.

        Args:
            config: Backend-specific settings (endpoint, table name, ...)
        """
        self.config: Dict[str, Any] = dict(config or {})
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @abstractmethod
    async def initialize(self) -> None:
        """Open connections / ensure tables exist."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
        pass

    @abstractmethod
    async def read_transaction(
        self, account_id: str, uuid: str, options: Optional[ReadOptions] = None
    ) -> Transaction:
        """Read one record by key."""
        pass

    @abstractmethod
    async def write_transaction(
        self, transaction: Transaction, options: Optional[WriteOptions] = None
    ) -> None:
        """Write one record."""
        pass

    @abstractmethod
    async def delete_transaction(self, account_id: str, uuid: str) -> None:
        """Delete one record by key."""
        pass

    @abstractmethod
    async def query_by_account(
        self, account_id: str, options: Optional[QueryOptions] = None
    ) -> List[Transaction]:
        """Return records for one account."""
        pass

    @abstractmethod
    async def query_by_time_range(
        self,
        account_id: str,
        start: datetime,
        end: datetime,
        options: Optional[QueryOptions] = None,
    ) -> List[Transaction]:
        """Return records for one account with start <= timestamp <= end."""
        pass

    @abstractmethod
    async def batch_read(
        self, keys: Sequence[TransactionKey], options: Optional[BatchOptions] = None
    ) -> List[Transaction]:
        """Read many records in as few backend requests as the backend allows."""
        pass

    @abstractmethod
    async def batch_write(
        self, transactions: Sequence[Transaction], options: Optional[BatchOptions] = None
    ) -> None:
        """Write many records in as few backend requests as the backend allows."""
        pass

    @abstractmethod
    async def transact_write(self, transactions: Sequence[Transaction]) -> None:
        """Write many records atomically."""
        pass

    @abstractmethod
    def get_metrics(self) -> Dict[str, Any]:
        """Backend-side counters (copy)."""
        pass

    @abstractmethod
    def reset_metrics(self) -> None:
        """Clear backend-side counters."""
        pass

    async def __aenter__(self) -> "StorageBackend":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self.backend_type})"

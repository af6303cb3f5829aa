"""
In-memory storage backend.

Dict-backed reference implementation of StorageBackend. Useful for local
runs and for exercising the operation strategies without a vendor SDK.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from dbbench.core.errors import RecordNotFoundError, StorageError
from dbbench.models.options import BatchOptions, QueryOptions, ReadOptions, WriteOptions
from dbbench.models.transaction import Transaction, TransactionKey
from dbbench.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class MemoryBackend(StorageBackend):
    """
    Stores transactions in a dict keyed by (account_id, uuid).

    Config keys:
        latencySeconds: simulated delay added to every call (default 0)

    There are no secondary indexes: reads naming ReadOptions.index_name fail
    and ReadOptions.limit is ignored.
    """

    backend_type = "memory"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.latency_seconds = float(self.config.get("latencySeconds", 0.0) or 0.0)
        self._store: Dict[TransactionKey, Transaction] = {}
        self._lock = asyncio.Lock()
        self._metrics: Dict[str, int] = {}

    async def initialize(self) -> None:
        self._initialized = True
        logger.debug("MemoryBackend initialized")

    async def close(self) -> None:
        self._initialized = False

    def __len__(self) -> int:
        return len(self._store)

    async def _simulate(self, counter: str, amount: int = 1) -> None:
        self._metrics[counter] = self._metrics.get(counter, 0) + amount
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)

    async def read_transaction(
        self, account_id: str, uuid: str, options: Optional[ReadOptions] = None
    ) -> Transaction:
        await self._simulate("reads")
        if options is not None and options.index_name:
            raise StorageError(f"memory backend has no index {options.index_name!r}")
        tx = self._store.get(TransactionKey(account_id, uuid))
        if tx is None:
            raise RecordNotFoundError(account_id, uuid)
        return tx

    async def write_transaction(
        self, transaction: Transaction, options: Optional[WriteOptions] = None
    ) -> None:
        await self._simulate("writes")
        async with self._lock:
            if options is not None and options.condition == "attribute_not_exists":
                if transaction.key in self._store:
                    raise StorageError(f"conditional check failed for {transaction.uuid}")
            self._store[transaction.key] = transaction

    async def delete_transaction(self, account_id: str, uuid: str) -> None:
        await self._simulate("deletes")
        async with self._lock:
            self._store.pop(TransactionKey(account_id, uuid), None)

    def _account_records(self, account_id: str, options: Optional[QueryOptions]) -> List[Transaction]:
        records = [tx for key, tx in self._store.items() if key.account_id == account_id]
        records.sort(
            key=lambda tx: tx.timestamp,
            reverse=bool(options and not options.scan_index_forward),
        )
        return records

    @staticmethod
    def _apply_limit(records: List[Transaction], options: Optional[QueryOptions]) -> List[Transaction]:
        if options is not None and options.limit:
            return records[: options.limit]
        return records

    async def query_by_account(
        self, account_id: str, options: Optional[QueryOptions] = None
    ) -> List[Transaction]:
        await self._simulate("queries")
        return self._apply_limit(self._account_records(account_id, options), options)

    async def query_by_time_range(
        self,
        account_id: str,
        start: datetime,
        end: datetime,
        options: Optional[QueryOptions] = None,
    ) -> List[Transaction]:
        await self._simulate("queries")
        records = [
            tx
            for tx in self._account_records(account_id, options)
            if start <= tx.timestamp <= end
        ]
        return self._apply_limit(records, options)

    async def batch_read(
        self, keys: Sequence[TransactionKey], options: Optional[BatchOptions] = None
    ) -> List[Transaction]:
        await self._simulate("batchReads")
        found: List[Transaction] = []
        for key in keys:
            tx = self._store.get(TransactionKey(*key))
            if tx is not None:
                found.append(tx)
        return found

    async def batch_write(
        self, transactions: Sequence[Transaction], options: Optional[BatchOptions] = None
    ) -> None:
        chunk = (options.max_batch_size if options else None) or len(transactions) or 1
        for i in range(0, len(transactions), chunk):
            await self._simulate("batchWrites")
            async with self._lock:
                for tx in transactions[i : i + chunk]:
                    self._store[tx.key] = tx

    async def transact_write(self, transactions: Sequence[Transaction]) -> None:
        await self._simulate("transactions")
        keys = [tx.key for tx in transactions]
        if len(set(keys)) != len(keys):
            raise StorageError("transaction contains duplicate keys")
        async with self._lock:
            for tx in transactions:
                self._store[tx.key] = tx

    def get_metrics(self) -> Dict[str, Any]:
        metrics: Dict[str, Any] = dict(self._metrics)
        metrics["storedRecords"] = len(self._store)
        return metrics

    def reset_metrics(self) -> None:
        self._metrics.clear()

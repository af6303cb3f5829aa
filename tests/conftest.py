"""
Shared pytest fixtures for dbbench tests.

This module provides:
- FakeBackend: a scriptable StorageBackend with per-key failure injection,
  simulated latency and in-flight tracking
- collector / backend fixtures
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import pytest

from dbbench.core.errors import RecordNotFoundError, StorageError
from dbbench.core.metrics_collector import MetricsCollector
from dbbench.models.options import BatchOptions, QueryOptions, ReadOptions, WriteOptions
from dbbench.models.transaction import Transaction, TransactionKey
from dbbench.storage.base import StorageBackend


class FakeBackend(StorageBackend):
    """
    In-test backend.

    Any call touching a uuid in `fail_keys` raises StorageError (batch calls
    fail as a whole). `fail_all` makes every call fail. `latency` is awaited
    on every call while `in_flight` / `max_in_flight` track concurrency.
    """

    backend_type = "fake"

    def __init__(
        self,
        fail_keys: Optional[set[str]] = None,
        fail_all: bool = False,
        latency: float = 0.0,
        error_message: str = "injected failure",
    ):
        super().__init__({})
        self.fail_keys = set(fail_keys or ())
        self.fail_all = fail_all
        self.latency = latency
        self.error_message = error_message
        self.store: Dict[TransactionKey, Transaction] = {}
        self.calls: List[tuple[str, Any]] = []
        self.read_options: List[Optional[ReadOptions]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _call(self, name: str, keys: Sequence[str], arg: Any = None) -> None:
        self.calls.append((name, arg))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.latency:
                await asyncio.sleep(self.latency)
            else:
                await asyncio.sleep(0)
            if self.fail_all or any(k in self.fail_keys for k in keys):
                raise StorageError(self.error_message)
        finally:
            self.in_flight -= 1

    def seed(self, transactions: Sequence[Transaction]) -> None:
        for tx in transactions:
            self.store[tx.key] = tx

    async def initialize(self) -> None:
        self._initialized = True

    async def close(self) -> None:
        self._initialized = False

    async def read_transaction(
        self, account_id: str, uuid: str, options: Optional[ReadOptions] = None
    ) -> Transaction:
        self.read_options.append(options)
        await self._call("read", [uuid], uuid)
        tx = self.store.get(TransactionKey(account_id, uuid))
        if tx is None:
            raise RecordNotFoundError(account_id, uuid)
        return tx

    async def write_transaction(
        self, transaction: Transaction, options: Optional[WriteOptions] = None
    ) -> None:
        await self._call("write", [transaction.uuid], transaction.uuid)
        self.store[transaction.key] = transaction

    async def delete_transaction(self, account_id: str, uuid: str) -> None:
        await self._call("delete", [uuid], uuid)
        self.store.pop(TransactionKey(account_id, uuid), None)

    async def query_by_account(
        self, account_id: str, options: Optional[QueryOptions] = None
    ) -> List[Transaction]:
        await self._call("query_by_account", [account_id], account_id)
        return [tx for k, tx in self.store.items() if k.account_id == account_id]

    async def query_by_time_range(
        self,
        account_id: str,
        start: datetime,
        end: datetime,
        options: Optional[QueryOptions] = None,
    ) -> List[Transaction]:
        await self._call("query_by_time_range", [account_id], (account_id, start, end))
        return [
            tx
            for k, tx in self.store.items()
            if k.account_id == account_id and start <= tx.timestamp <= end
        ]

    async def batch_read(
        self, keys: Sequence[TransactionKey], options: Optional[BatchOptions] = None
    ) -> List[Transaction]:
        await self._call("batch_read", [k.uuid for k in keys], len(keys))
        return [self.store[k] for k in keys if k in self.store]

    async def batch_write(
        self, transactions: Sequence[Transaction], options: Optional[BatchOptions] = None
    ) -> None:
        await self._call("batch_write", [tx.uuid for tx in transactions], len(transactions))
        self.seed(transactions)

    async def transact_write(self, transactions: Sequence[Transaction]) -> None:
        await self._call("transact_write", [tx.uuid for tx in transactions], len(transactions))
        self.seed(transactions)

    def get_metrics(self) -> Dict[str, Any]:
        return {"calls": len(self.calls)}

    def reset_metrics(self) -> None:
        self.calls.clear()

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def collector() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_backend():
    """Factory fixture: make_backend(fail_keys=..., latency=...) -> FakeBackend."""
    return FakeBackend

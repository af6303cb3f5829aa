"""
Ledger-store operation variants.

Same measurement logic as the generic strategies, routed through the batch
and verification primitives an immutable ledger store exposes.
"""

import logging
from typing import List

from dbbench.core.errors import CollectorError, OperationConfigError
from dbbench.core.operations.base import ExecutionContext, Operation
from dbbench.core.operations.helpers import generate_transaction, key_size, transaction_ids
from dbbench.core.operations.workers import run_bounded
from dbbench.models.metrics import OperationKind
from dbbench.models.operation_config import (
    LedgerQueryConfig,
    LedgerReadConfig,
    LedgerWriteConfig,
)
from dbbench.models.options import BatchOptions, QueryOptions, ReadOptions, WriteOptions
from dbbench.models.transaction import Transaction, TransactionKey

logger = logging.getLogger(__name__)

# Two timestamps in a time-range query predicate.
TIME_RANGE_QUERY_BYTES = 16


class LedgerWriteOperation(Operation):
    """
    Writes numTransactions records for one account.

    Parallel mode issues one measured write per record; otherwise all records
    go out as a single measured batch.
    """

    operation_name = "ledger_write"
    config_model = LedgerWriteConfig
    config: LedgerWriteConfig

    async def _run(self, ctx: ExecutionContext) -> int:
        cfg = self.config
        transactions = [
            generate_transaction(cfg, i, account_id=cfg.account_id)
            for i in range(cfg.num_transactions)
        ]

        ctx.result.items_attempted = len(transactions)
        ctx.result.data["uuids"] = transaction_ids(transactions)
        ctx.result.data["accountID"] = cfg.account_id

        if not transactions:
            return 0

        if cfg.parallel:
            options = WriteOptions()

            async def _write_one(index: int) -> None:
                tx = transactions[index]
                try:
                    await ctx.measure(
                        OperationKind.WRITE,
                        1,
                        tx.estimated_size(),
                        lambda: ctx.backend.write_transaction(tx, options),
                    )
                except CollectorError:
                    raise
                except Exception as e:
                    ctx.record_failure(f"failed to write transaction {tx.uuid}", tx.uuid, e)
                else:
                    ctx.result.items_processed += 1

            await run_bounded(len(transactions), _write_one, cfg.concurrency)
            return len(transactions)

        total_size = sum(tx.estimated_size() for tx in transactions)
        try:
            await ctx.measure(
                OperationKind.BATCH,
                len(transactions),
                total_size,
                lambda: ctx.backend.batch_write(transactions, BatchOptions()),
            )
        except CollectorError:
            raise
        except Exception as e:
            ctx.record_failure("failed to write batch", cfg.account_id, e)
        else:
            ctx.result.items_processed = len(transactions)
        return 1


class LedgerReadOperation(Operation):
    """
    Reads back previously written records by uuid.

    Parallel mode reads each uuid separately; otherwise a single batch read
    is issued. Byte counts are key sizes since the result size is unknown
    until the read returns.
    """

    operation_name = "ledger_read"
    config_model = LedgerReadConfig
    config: LedgerReadConfig

    async def _run(self, ctx: ExecutionContext) -> int:
        cfg = self.config
        if not cfg.uuids:
            raise OperationConfigError("no UUIDs provided for read operation")
        if not cfg.account_id:
            raise OperationConfigError("no account ID provided for read operation")

        ctx.result.items_attempted = len(cfg.uuids)
        found: List[Transaction] = []

        if cfg.parallel:
            options = ReadOptions(verified=cfg.verify)

            async def _read_one(index: int) -> None:
                txid = cfg.uuids[index]
                try:
                    tx = await ctx.measure(
                        OperationKind.READ,
                        1,
                        key_size(cfg.account_id, txid),
                        lambda: ctx.backend.read_transaction(cfg.account_id, txid, options),
                    )
                except CollectorError:
                    raise
                except Exception as e:
                    ctx.record_failure(f"failed to read transaction {txid}", txid, e)
                else:
                    if tx is not None:
                        found.append(tx)

            await run_bounded(len(cfg.uuids), _read_one, cfg.concurrency)
            dispatched = len(cfg.uuids)
        else:
            keys = [TransactionKey(cfg.account_id, txid) for txid in cfg.uuids]
            total_key_size = sum(key_size(cfg.account_id, txid) for txid in cfg.uuids)
            try:
                found = await ctx.measure(
                    OperationKind.BATCH,
                    len(keys),
                    total_key_size,
                    lambda: ctx.backend.batch_read(keys, BatchOptions()),
                )
            except CollectorError:
                raise
            except Exception as e:
                ctx.record_failure("failed to batch read transactions", cfg.account_id, e)
            dispatched = 1

        ctx.result.items_processed = len(found)
        ctx.result.data["transactions"] = found
        return dispatched


class LedgerQueryOperation(Operation):
    """
    Queries an account's records, optionally restricted to a time range.

    The collector gets an item count of 0 (unknown before the query returns)
    and the size of the query key as byte count.
    """

    operation_name = "ledger_query"
    config_model = LedgerQueryConfig
    config: LedgerQueryConfig

    async def _run(self, ctx: ExecutionContext) -> int:
        cfg = self.config
        if not cfg.account_id:
            raise OperationConfigError("no account ID provided for query operation")

        query_size = len(cfg.account_id)
        options = QueryOptions()

        if cfg.time_range:
            start, end = cfg.resolve_time_range()
            query_size += TIME_RANGE_QUERY_BYTES
            ctx.result.data["startTime"] = start.isoformat()
            ctx.result.data["endTime"] = end.isoformat()

            def _query():
                return ctx.backend.query_by_time_range(cfg.account_id, start, end, options)
        else:

            def _query():
                return ctx.backend.query_by_account(cfg.account_id, options)

        transactions: List[Transaction] = []
        try:
            transactions = await ctx.measure(OperationKind.QUERY, 0, query_size, _query)
        except CollectorError:
            raise
        except Exception as e:
            ctx.record_failure("failed to execute query", cfg.account_id, e)

        ctx.result.items_attempted = len(transactions)
        ctx.result.items_processed = len(transactions)
        ctx.result.data["transactions"] = transactions
        return 1

"""
Generic write operation.
"""

import logging

from dbbench.core.errors import CollectorError
from dbbench.core.operations.base import ExecutionContext, Operation
from dbbench.core.operations.helpers import chunked, generate_transaction, transaction_ids
from dbbench.core.operations.workers import run_bounded
from dbbench.models.metrics import OperationKind
from dbbench.models.operation_config import WriteConfig
from dbbench.models.options import BatchOptions, WriteOptions

logger = logging.getLogger(__name__)


class WriteOperation(Operation):
    """
    Writes synthetic records, one per call or in batches.

    Batch mode splits the records into chunks of batchSize and dispatches the
    chunks through a bounded worker pool. A failed chunk counts as one error
    and all of its records as unprocessed.
    """

    operation_name = "write"
    config_model = WriteConfig
    config: WriteConfig

    async def _run(self, ctx: ExecutionContext) -> int:
        cfg = self.config
        transactions = [generate_transaction(cfg, i) for i in range(cfg.item_count)]

        ctx.result.items_attempted = len(transactions)
        ctx.result.data["transactionIDs"] = transaction_ids(transactions)

        if not cfg.batch:
            options = WriteOptions()
            for tx in transactions:
                try:
                    await ctx.measure(
                        OperationKind.WRITE,
                        1,
                        cfg.data_size,
                        lambda: ctx.backend.write_transaction(tx, options),
                    )
                except CollectorError:
                    raise
                except Exception as e:
                    ctx.record_failure(f"failed to write transaction {tx.uuid}", tx.uuid, e)
                else:
                    ctx.result.items_processed += 1
            return len(transactions)

        batches = list(chunked(transactions, cfg.batch_size))
        batch_options = BatchOptions(max_batch_size=cfg.batch_size)
        ctx.result.data["batchCount"] = len(batches)

        async def _write_batch(index: int) -> None:
            batch = batches[index]
            try:
                await ctx.measure(
                    OperationKind.BATCH,
                    len(batch),
                    len(batch) * cfg.data_size,
                    lambda: ctx.backend.batch_write(batch, batch_options),
                )
            except CollectorError:
                raise
            except Exception as e:
                ctx.record_failure(f"failed to write batch {index}", index, e)
            else:
                ctx.result.items_processed += len(batch)

        await run_bounded(len(batches), _write_batch, cfg.concurrency)
        return len(batches)

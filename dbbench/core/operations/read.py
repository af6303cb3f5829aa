"""
Generic read operation.
"""

import logging
from typing import List

from dbbench.core.errors import CollectorError, OperationConfigError
from dbbench.core.operations.base import ExecutionContext, Operation
from dbbench.core.operations.helpers import deterministic_id
from dbbench.core.operations.workers import run_bounded
from dbbench.models.metrics import OperationKind
from dbbench.models.operation_config import ReadConfig
from dbbench.models.options import ReadOptions

logger = logging.getLogger(__name__)


class ReadOperation(Operation):
    """
    Reads records one at a time, sequentially or with a bounded worker pool.

    Ids come from transactionIDs when given, otherwise they are derived as
    {accountId}-tx-{index}. Random ids cannot be read back because they were
    never recorded, so useRandomIDs without transactionIDs is rejected.
    """

    operation_name = "read"
    config_model = ReadConfig
    config: ReadConfig

    def _transaction_ids(self) -> List[str]:
        cfg = self.config
        if cfg.transaction_ids is not None:
            return list(cfg.transaction_ids)
        if cfg.use_random_ids:
            raise OperationConfigError(
                "reading random IDs requires pre-generating transactions first"
            )
        return [deterministic_id(cfg.account_id, i) for i in range(cfg.item_count)]

    async def _run(self, ctx: ExecutionContext) -> int:
        cfg = self.config
        ids = self._transaction_ids()
        options = ReadOptions(consistent_read=cfg.consistent_read)

        ctx.result.items_attempted = len(ids)
        ctx.result.data["transactionIDs"] = ids

        async def _read_one(index: int) -> None:
            tx_id = ids[index]
            try:
                await ctx.measure(
                    OperationKind.READ,
                    1,
                    cfg.data_size,
                    lambda: ctx.backend.read_transaction(cfg.account_id, tx_id, options),
                )
            except CollectorError:
                raise
            except Exception as e:
                ctx.record_failure(f"failed to read transaction {tx_id}", tx_id, e)
            else:
                ctx.result.items_processed += 1

        if cfg.parallel:
            await run_bounded(len(ids), _read_one, cfg.concurrency)
        else:
            for index in range(len(ids)):
                await _read_one(index)

        return len(ids)

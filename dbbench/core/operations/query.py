"""
Generic time-range query operation.
"""

import logging

from dbbench.core.errors import CollectorError
from dbbench.core.operations.base import ExecutionContext, Operation
from dbbench.core.operations.helpers import transaction_ids
from dbbench.models.metrics import OperationKind
from dbbench.models.operation_config import QueryConfig
from dbbench.models.options import QueryOptions

logger = logging.getLogger(__name__)


class QueryOperation(Operation):
    """
    Runs a single time-range query for one account.

    NOTE: the item and byte counts handed to the collector are estimates
    (limit rows of dataSize bytes) fixed before the query runs, not the size
    of the returned result. Query throughput figures are therefore planned
    rather than measured; they are kept this way so results stay comparable
    with earlier benchmark data.
    """

    operation_name = "query"
    config_model = QueryConfig
    config: QueryConfig

    async def _run(self, ctx: ExecutionContext) -> int:
        cfg = self.config
        start, end = cfg.resolve_time_range()
        options = QueryOptions(limit=cfg.limit, consistent_read=cfg.consistent_read)

        ctx.result.data["startTime"] = start.isoformat()
        ctx.result.data["endTime"] = end.isoformat()

        estimated_items = cfg.limit
        estimated_bytes = estimated_items * cfg.data_size

        try:
            transactions = await ctx.measure(
                OperationKind.QUERY,
                estimated_items,
                estimated_bytes,
                lambda: ctx.backend.query_by_time_range(cfg.account_id, start, end, options),
            )
        except CollectorError:
            raise
        except Exception as e:
            ctx.record_failure("failed to execute query", cfg.account_id, e)
            return 1

        ctx.result.items_attempted = len(transactions)
        ctx.result.items_processed = len(transactions)
        ctx.result.data["transactionIDs"] = transaction_ids(transactions)
        return 1

"""
Bounded worker pool for parallel operation modes.
"""

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


async def run_bounded(
    count: int,
    handler: Callable[[int], Awaitable[None]],
    concurrency: int,
) -> None:
    """
    Call handler(i) for every i in range(count) with bounded concurrency.

    Spawns min(concurrency, count) workers that pull indices, in order, from
    one shared iterator, so dispatch order follows input order while
    completion order depends on the backend. Handlers are expected to record
    their own failures; an exception escaping a handler (including
    cancellation) propagates to the caller.

    Args:
        count: Number of tasks
        handler: Coroutine function receiving the task index
        concurrency: Maximum tasks in flight
    """
    if count <= 0:
        return

    worker_count = max(1, min(int(concurrency), count))
    indices = iter(range(count))

    async def _worker(worker_id: int) -> None:
        logger.debug("Worker %d started", worker_id)
        for index in indices:
            await handler(index)
        logger.debug("Worker %d stopped", worker_id)

    await asyncio.gather(*(_worker(w) for w in range(worker_count)))

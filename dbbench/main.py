"""
dbbench - local entry point

Runs a sample write-batch then parallel-read benchmark against the in-memory
backend and prints each response as JSON.
"""

import asyncio
import logging
from typing import Any, Dict

from dbbench.config import configure_logging, settings
from dbbench.core.orchestrator import BenchmarkRunner
from dbbench.models.benchmark import BenchmarkRequest
from dbbench.storage import create_backend

logger = logging.getLogger(__name__)

SAMPLE_PARAMETERS: Dict[str, Any] = {
    "concurrency": 10,
    "itemCount": 100,
    "dataSize": 1024,
    "accountId": "test-account",
    "batchSize": 25,
}


async def main() -> None:
    configure_logging()
    logger.info("Running in local mode")

    # One store shared by both requests so the read finds what the write stored.
    shared = create_backend(settings.DEFAULT_BACKEND, {"latencySeconds": 0.001})
    runner = BenchmarkRunner(backend_factory=lambda _type, _config: shared)

    for operation_type in ("write-batch", "read-parallel"):
        request = BenchmarkRequest(
            database_type=settings.DEFAULT_BACKEND,
            operation_type=operation_type,
            parameters=dict(SAMPLE_PARAMETERS),
        )
        response = await runner.run(request)
        print(response.to_json())


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()

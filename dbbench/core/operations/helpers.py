"""
Static helper functions for operation strategies.
"""

import random
from datetime import UTC, datetime
from typing import Iterator, List, Optional, Sequence, TypeVar
from uuid import uuid4

from dbbench.models.operation_config import OperationConfig
from dbbench.models.transaction import Transaction, TransactionType

T = TypeVar("T")


def deterministic_id(account_id: str, index: int) -> str:
    """Id used for records written without useRandomIDs."""
    return f"{account_id}-tx-{index}"


def generate_transaction(
    config: OperationConfig, index: int, account_id: Optional[str] = None
) -> Transaction:
    """
    Create a synthetic transaction for record `index`.

    The metadata payload is random bytes of config.data_size length; it
    exists only to control record size.
    """
    account = account_id or config.account_id
    tx_id = str(uuid4()) if config.use_random_ids else deterministic_id(account, index)
    return Transaction(
        account_id=account,
        uuid=tx_id,
        timestamp=datetime.now(UTC),
        amount=random.randint(0, 9999) / 100,
        transaction_type=TransactionType.DEPOSIT,
        metadata=random.randbytes(config.data_size),
    )


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most `size` items."""
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def key_size(account_id: str, uuid: str) -> int:
    """Bytes in a (partition key, id) pair, used as a read size estimate."""
    return len(uuid) + len(account_id)


def transaction_ids(transactions: Sequence[Transaction]) -> List[str]:
    return [tx.uuid for tx in transactions]

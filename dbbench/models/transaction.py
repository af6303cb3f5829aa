"""
Transaction Models

The domain record benchmarked against every storage backend.
"""

from enum import Enum
from datetime import UTC, datetime
from typing import NamedTuple

from pydantic import BaseModel, Field


class TransactionType(str, Enum):
    """Banking transaction categories."""

    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER = "TRANSFER"


class TransactionKey(NamedTuple):
    """Primary key of a stored transaction (partition key + unique id)."""

    account_id: str
    uuid: str


class Transaction(BaseModel):
    """
    A financial transaction record.

    The metadata payload carries no meaning; its length is chosen to control
    the size of the record being written or read.
    """

    account_id: str = Field(..., description="Owning account (partition key)")
    uuid: str = Field(..., description="Unique transaction id")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When it occurred"
    )
    amount: float = Field(0.0, description="Amount with two decimal places")
    transaction_type: TransactionType = Field(
        TransactionType.DEPOSIT, description="Transaction category"
    )
    metadata: bytes = Field(b"", description="Opaque payload sized for benchmarking")

    @property
    def key(self) -> TransactionKey:
        return TransactionKey(self.account_id, self.uuid)

    def estimated_size(self) -> int:
        """Approximate serialized size in bytes (8 bytes for timestamp and amount)."""
        return (
            len(self.uuid)
            + len(self.account_id)
            + len(self.transaction_type.value)
            + 8
            + len(self.metadata)
        )

"""
Storage Option Models

Backend-agnostic knobs passed alongside storage calls. Backends ignore the
options that do not apply to them.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ReadOptions(BaseModel):
    """
    Options for single-record reads.

    index_name and limit are passed through for backends that read via
    secondary indexes; a backend without indexes rejects index_name and
    ignores limit.
    """

    consistent_read: bool = Field(False, description="Request a strongly consistent read")
    index_name: Optional[str] = Field(None, description="Secondary index hint")
    limit: Optional[int] = Field(None, ge=1, description="Row limit")
    verified: bool = Field(
        False, description="Request a cryptographically verified read (ledger stores)"
    )


class WriteOptions(BaseModel):
    """Options for single-record writes."""

    condition: Optional[str] = Field(None, description="Conditional-write expression")
    return_old_item: bool = Field(False, description="Return the replaced record")


class QueryOptions(BaseModel):
    """Options for account and time-range queries."""

    scan_index_forward: bool = Field(True, description="Ascending sort order")
    limit: Optional[int] = Field(None, ge=1, description="Row limit")
    consistent_read: bool = Field(False, description="Request a strongly consistent read")


class BatchOptions(BaseModel):
    """Options for batch reads and writes."""

    max_batch_size: Optional[int] = Field(
        None, ge=1, description="Maximum records per backend batch request"
    )

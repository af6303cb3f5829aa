"""
Operation Configuration Models

Typed parameter sets for each operation strategy. They are built from the
untyped parameter maps that arrive with a benchmark request:

- unknown keys are ignored
- missing keys fall back to the defaults in dbbench.config.settings
- keys are accepted in the camelCase form used by request payloads
  (itemCount, dataSize, ...) as well as snake_case
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any, List, Mapping, Optional, Tuple
from uuid import uuid4

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from dbbench.config import settings
from dbbench.core.errors import OperationConfigError

logger = logging.getLogger(__name__)

DEFAULT_QUERY_WINDOW = timedelta(hours=24)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a datetime or RFC3339 string.

    Returns None for anything that cannot be parsed so the caller can apply
    its default window.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            logger.debug("Ignoring unparseable timestamp %r", value)
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


class OperationConfig(BaseModel):
    """Parameters shared by every operation strategy."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    account_id: str = Field(
        default_factory=lambda: settings.DEFAULT_ACCOUNT_ID,
        validation_alias=AliasChoices("accountId", "accountID", "account_id"),
    )
    data_size: int = Field(
        default_factory=lambda: settings.DEFAULT_DATA_SIZE,
        ge=0,
        validation_alias=AliasChoices("dataSize", "data_size"),
        description="Payload bytes per record",
    )
    concurrency: int = Field(
        default_factory=lambda: settings.DEFAULT_CONCURRENCY,
        ge=1,
        validation_alias=AliasChoices("concurrency"),
        description="Max in-flight storage calls in parallel modes",
    )
    is_cold_start: bool = Field(
        False, validation_alias=AliasChoices("isColdStart", "is_cold_start")
    )
    use_random_ids: bool = Field(
        False, validation_alias=AliasChoices("useRandomIDs", "use_random_ids")
    )

    @classmethod
    def from_params(cls, params: Optional[Mapping[str, Any]] = None):
        """Build a config from an untyped parameter map."""
        try:
            return cls.model_validate(dict(params or {}))
        except ValidationError as e:
            raise OperationConfigError(
                f"invalid parameters for {cls.__name__}: {e}"
            ) from e


class ReadConfig(OperationConfig):
    """Parameters for the generic read operation."""

    item_count: int = Field(
        default_factory=lambda: settings.DEFAULT_ITEM_COUNT,
        ge=0,
        validation_alias=AliasChoices("itemCount", "item_count"),
    )
    transaction_ids: Optional[List[str]] = Field(
        None, validation_alias=AliasChoices("transactionIDs", "transaction_ids")
    )
    consistent_read: bool = Field(
        True, validation_alias=AliasChoices("consistentRead", "consistent_read")
    )
    parallel: bool = Field(False, validation_alias=AliasChoices("parallel"))


class WriteConfig(OperationConfig):
    """Parameters for the generic write operation."""

    item_count: int = Field(
        default_factory=lambda: settings.DEFAULT_ITEM_COUNT,
        ge=0,
        validation_alias=AliasChoices("itemCount", "item_count"),
    )
    batch_size: int = Field(
        default_factory=lambda: settings.DEFAULT_BATCH_SIZE,
        ge=1,
        validation_alias=AliasChoices("batchSize", "batch_size"),
    )
    batch: bool = Field(False, validation_alias=AliasChoices("batch"))


class TimeRangeConfig(OperationConfig):
    """Start/end bounds that tolerate missing or malformed values."""

    start_time: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("startTime", "start_time")
    )
    end_time: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("endTime", "end_time")
    )

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def lenient_timestamp(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    def resolve_time_range(self, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
        """Return (start, end), defaulting to the last 24 hours."""
        now = now or datetime.now(UTC)
        start = self.start_time or now - DEFAULT_QUERY_WINDOW
        end = self.end_time or now
        return start, end


class QueryConfig(TimeRangeConfig):
    """Parameters for the generic time-range query operation."""

    limit: int = Field(
        default_factory=lambda: settings.DEFAULT_QUERY_LIMIT,
        ge=1,
        validation_alias=AliasChoices("limit"),
    )
    consistent_read: bool = Field(
        True, validation_alias=AliasChoices("consistentRead", "consistent_read")
    )


def _ledger_account_id() -> str:
    return f"acct-{uuid4().hex[:8]}"


class LedgerWriteConfig(OperationConfig):
    """Parameters for ledger-store writes."""

    account_id: str = Field(
        default_factory=_ledger_account_id,
        validation_alias=AliasChoices("accountID", "accountId", "account_id"),
    )
    num_transactions: int = Field(
        default_factory=lambda: settings.DEFAULT_LEDGER_TRANSACTIONS,
        ge=0,
        validation_alias=AliasChoices("numTransactions", "num_transactions"),
    )
    parallel: bool = Field(False, validation_alias=AliasChoices("parallel"))


class LedgerReadConfig(OperationConfig):
    """Parameters for ledger-store reads of previously written records."""

    account_id: str = Field(
        "", validation_alias=AliasChoices("accountID", "accountId", "account_id")
    )
    uuids: List[str] = Field(default_factory=list, validation_alias=AliasChoices("uuids"))
    parallel: bool = Field(False, validation_alias=AliasChoices("parallel"))
    verify: bool = Field(
        False,
        validation_alias=AliasChoices("verify", "verified"),
        description="Request verified reads",
    )


class LedgerQueryConfig(TimeRangeConfig):
    """Parameters for ledger-store account or time-range queries."""

    account_id: str = Field(
        "", validation_alias=AliasChoices("accountID", "accountId", "account_id")
    )
    time_range: bool = Field(False, validation_alias=AliasChoices("timeRange", "time_range"))

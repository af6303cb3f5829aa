"""
Tests for the typed operation parameter models.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from dbbench.config import settings
from dbbench.core.errors import OperationConfigError
from dbbench.models.operation_config import (
    LedgerReadConfig,
    LedgerWriteConfig,
    QueryConfig,
    ReadConfig,
    WriteConfig,
    parse_timestamp,
)


class TestParameterResolution:
    """Defaults, aliases and unknown keys."""

    def test_defaults_come_from_settings(self) -> None:
        cfg = ReadConfig.from_params({})

        assert cfg.item_count == settings.DEFAULT_ITEM_COUNT
        assert cfg.concurrency == settings.DEFAULT_CONCURRENCY
        assert cfg.data_size == settings.DEFAULT_DATA_SIZE
        assert cfg.account_id == settings.DEFAULT_ACCOUNT_ID
        assert cfg.consistent_read is True
        assert cfg.parallel is False
        assert cfg.is_cold_start is False
        assert cfg.transaction_ids is None

    def test_camel_and_snake_case_keys(self) -> None:
        camel = WriteConfig.from_params({"itemCount": 7, "batchSize": 3, "accountId": "a"})
        snake = WriteConfig.from_params({"item_count": 7, "batch_size": 3, "account_id": "a"})

        assert camel == snake
        assert camel.batch_size == 3

    def test_unknown_keys_ignored(self) -> None:
        cfg = ReadConfig.from_params({"itemCount": 2, "collectMetrics": False, "db.region": "x"})
        assert cfg.item_count == 2

    def test_none_params(self) -> None:
        assert WriteConfig.from_params(None).batch_size == settings.DEFAULT_BATCH_SIZE

    @pytest.mark.parametrize(
        "model, params",
        [
            (ReadConfig, {"itemCount": "lots"}),
            (ReadConfig, {"concurrency": 0}),
            (ReadConfig, {"transactionIDs": "not-a-list"}),
            (WriteConfig, {"batchSize": 0}),
        ],
    )
    def test_invalid_values_rejected(self, model, params) -> None:
        with pytest.raises(OperationConfigError):
            model.from_params(params)

    def test_config_error_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            ReadConfig.from_params({"itemCount": "lots"})


class TestTimeRange:
    """Lenient start/end parsing."""

    def test_parse_timestamp(self) -> None:
        assert parse_timestamp("2024-03-01T10:00:00Z") == datetime(2024, 3, 1, 10, tzinfo=UTC)
        assert parse_timestamp("garbage") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None
        assert parse_timestamp(42) is None
        naive = parse_timestamp(datetime(2024, 1, 1))
        assert naive.tzinfo is UTC

    def test_default_window_is_last_day(self) -> None:
        now = datetime(2024, 5, 1, tzinfo=UTC)
        start, end = QueryConfig.from_params({}).resolve_time_range(now=now)
        assert end == now
        assert start == now - timedelta(hours=24)

    def test_explicit_bounds(self) -> None:
        cfg = QueryConfig.from_params(
            {"startTime": "2024-01-01T00:00:00Z", "endTime": datetime(2024, 1, 3, tzinfo=UTC)}
        )
        start, end = cfg.resolve_time_range()
        assert start == datetime(2024, 1, 1, tzinfo=UTC)
        assert end == datetime(2024, 1, 3, tzinfo=UTC)

    def test_malformed_bound_falls_back(self) -> None:
        now = datetime(2024, 5, 1, tzinfo=UTC)
        cfg = QueryConfig.from_params({"startTime": "not a time"})
        assert cfg.start_time is None
        start, _ = cfg.resolve_time_range(now=now)
        assert start == now - timedelta(hours=24)


class TestLedgerConfigs:
    """Ledger parameter sets."""

    def test_generated_account_ids_differ(self) -> None:
        a = LedgerWriteConfig.from_params({})
        b = LedgerWriteConfig.from_params({})
        assert a.account_id != b.account_id
        assert a.num_transactions == settings.DEFAULT_LEDGER_TRANSACTIONS

    def test_read_accepts_verify_alias(self) -> None:
        assert LedgerReadConfig.from_params({"verified": True}).verify is True
        assert LedgerReadConfig.from_params({"verify": True}).verify is True
        assert LedgerReadConfig.from_params({}).uuids == []

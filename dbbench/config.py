"""
Application settings.

Values are read from the environment (or a local .env file) and fall back to
the defaults below.
"""

import logging
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for dbbench."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = None

    # Operation defaults (used when a parameter map omits a key)
    DEFAULT_ITEM_COUNT: int = 100
    DEFAULT_CONCURRENCY: int = 10
    DEFAULT_DATA_SIZE: int = 1024
    DEFAULT_BATCH_SIZE: int = 25
    DEFAULT_ACCOUNT_ID: str = "test-account"
    DEFAULT_QUERY_LIMIT: int = 100
    DEFAULT_LEDGER_TRANSACTIONS: int = 10

    # Summary statistics
    PERCENTILE_MIN_OPERATIONS: int = 10

    # Orchestrator
    DEFAULT_BACKEND: str = "memory"


settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(settings.LOG_FILE)
            if settings.LOG_FILE
            else logging.NullHandler(),
        ],
    )

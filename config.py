"""Application configuration with Pydantic validation.

All settings are loaded from .env file or environment variables.
Validation happens at import time - app fails fast with clear errors.

Usage:
    import config
    print(config.INDEX_TABLE)     # "graphite_index"
    print(config.CLICKHOUSE_URL)  # "http://localhost:8123/"
"""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from finder.types import Direction, QueryOptions, ReverseRule


class Settings(BaseSettings):
    """Validated application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars
    )

    # Where index queries go
    index_backend: str = Field(default="clickhouse")
    clickhouse_url: str = Field(default="http://localhost:8123/")
    duckdb_path: str = Field(default="data/index.duckdb")

    # Index table layout
    index_table: str = Field(default="graphite_index")
    index_use_daily: bool = Field(default=True)
    index_reverse: Direction = Field(default=Direction.AUTO)
    # JSON list, e.g. [{"suffix": ".count", "direction": "direct"}]
    index_reverses: list[ReverseRule] = Field(default_factory=list)

    # Executor timeouts, seconds
    connect_timeout: float = Field(default=1.0)
    query_timeout: float = Field(default=60.0)

    log_level: str = Field(default="INFO")

    @field_validator("index_backend")
    @classmethod
    def validate_index_backend(cls, v: str) -> str:
        if v not in ("clickhouse", "duckdb"):
            raise ValueError("INDEX_BACKEND must be 'clickhouse' or 'duckdb'")
        return v

    @field_validator("connect_timeout", "query_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL '{v}' is not a logging level")
        return level


# Validate at import time - fail fast with clear errors
settings = Settings()

# =============================================================================
# Module-level exports
# =============================================================================

# Paths
ROOT_DIR = Path(__file__).parent
DATA_DIR = ROOT_DIR / "data"

# Backend
INDEX_BACKEND = settings.index_backend
CLICKHOUSE_URL = settings.clickhouse_url
DUCKDB_PATH = settings.duckdb_path

# Index
INDEX_TABLE = settings.index_table
INDEX_USE_DAILY = settings.index_use_daily
INDEX_REVERSE = settings.index_reverse
INDEX_REVERSES = settings.index_reverses

# Executor
QUERY_OPTIONS = QueryOptions(
    connect_timeout=settings.connect_timeout,
    timeout=settings.query_timeout,
)

LOG_LEVEL = settings.log_level

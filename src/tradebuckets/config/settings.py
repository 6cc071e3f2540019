# SPDX-License-Identifier: Apache-2.0
"""Runtime settings for Trade Buckets.

Settings load from ``TB_``-prefixed environment variables and may be
overridden by a YAML file (see ``tradebuckets.config.loader``).

Environment Variables:
    TB_STRICT_RESOLUTION_FILTERING: Only accept the enumerated resolutions (default true)
    TB_DATABASE_PATH: DuckDB database file holding assets and trades
    TB_DEFAULT_PAGE_LIMIT: Records per page when ``limit`` is not given
    TB_MAX_PAGE_LIMIT: Largest accepted ``limit``
    TB_LOG_LEVEL: Logging level for the CLI
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Configuration versioning constants
CURRENT_CONFIG_VERSION = "1"
MIN_SUPPORTED_VERSION = "1"


class TradeBucketsSettings(BaseSettings):
    """Deployment settings for the aggregation service."""

    model_config = SettingsConfigDict(env_prefix="TB_", extra="forbid")

    config_version: str = Field(
        default=CURRENT_CONFIG_VERSION, description="Configuration schema version"
    )
    strict_resolution_filtering: bool = Field(
        default=True, description="Reject resolutions outside the allowed bucket sizes"
    )
    database_path: str = Field(
        default="data/trades.duckdb", description="DuckDB file holding assets and trades"
    )
    default_page_limit: int = Field(default=10, ge=1, description="Default records per page")
    max_page_limit: int = Field(default=200, ge=1, description="Maximum records per page")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def validate_page_limits(self) -> TradeBucketsSettings:
        if self.default_page_limit > self.max_page_limit:
            raise ValueError("default_page_limit cannot exceed max_page_limit")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()

"""Configuration management for the config store client."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSpec(BaseModel):
    """A logical database in the store."""

    id: int = Field(ge=0, le=15, description="Numeric database index")
    separator: str = Field(description="Table/key separator used by every writer")

    @field_validator("separator")
    @classmethod
    def _single_character(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError(f"separator must be a single character, got {value!r}")
        return value


def _default_databases() -> dict[str, DatabaseSpec]:
    return {
        "APPL_DB": DatabaseSpec(id=0, separator=":"),
        "ASIC_DB": DatabaseSpec(id=1, separator=":"),
        "COUNTERS_DB": DatabaseSpec(id=2, separator=":"),
        "LOGLEVEL_DB": DatabaseSpec(id=3, separator=":"),
        "CONFIG_DB": DatabaseSpec(id=4, separator="|"),
        "PFC_WD_DB": DatabaseSpec(id=5, separator=":"),
        "FLEX_COUNTER_DB": DatabaseSpec(id=5, separator=":"),
        "STATE_DB": DatabaseSpec(id=6, separator="|"),
        "SNMP_OVERLAY_DB": DatabaseSpec(id=7, separator="|"),
    }


class RedisConfig(BaseModel):
    """Backing store connection configuration."""

    host: str = Field(default="127.0.0.1", description="Redis host")
    port: int = Field(default=6379, ge=1, le=65535, description="Redis port")
    unix_socket_path: Path = Field(
        default=Path("/var/run/redis/redis.sock"), description="Redis unix socket"
    )
    use_unix_socket_path: bool = Field(
        default=False, description="Connect through the unix socket instead of TCP"
    )
    password: str | None = Field(default=None, description="Redis password")


class ConnectorConfig(BaseModel):
    """Config store client behaviour."""

    default_db_name: str = Field(default="CONFIG_DB", description="Database opened by connect()")
    init_indicator: str = Field(
        default="CONFIG_DB_INITIALIZED", description="Sentinel key marking a populated database"
    )
    scan_batch_size: int = Field(default=30, ge=1, description="SCAN page size hint")
    strategy: Literal["direct", "pipelined"] = Field(
        default="direct", description="Execution strategy for whole-config operations"
    )
    connect_max_attempts: int = Field(
        default=5, ge=1, description="Connection attempts when retry is enabled"
    )
    connect_base_delay_seconds: float = Field(
        default=1.0, ge=0, description="Initial delay between connection attempts"
    )
    connect_max_delay_seconds: float = Field(
        default=30.0, ge=0, description="Upper bound on the delay between attempts"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="config_db", description="Service name for tracing")
    metrics_port: int = Field(default=8001, ge=1, le=65535, description="Prometheus metrics port")


class Config(BaseSettings):
    """Main configuration for the config store client."""

    model_config = SettingsConfigDict(
        env_prefix="CONFIG_DB_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    redis: RedisConfig = Field(default_factory=RedisConfig)
    connector: ConnectorConfig = Field(default_factory=ConnectorConfig)
    databases: dict[str, DatabaseSpec] = Field(default_factory=_default_databases)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def get_database(self, db_name: str) -> DatabaseSpec | None:
        """Look up a logical database by name."""
        return self.databases.get(db_name)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()

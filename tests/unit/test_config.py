"""Unit tests for configuration module."""

from __future__ import annotations

import pytest

from config_db.infrastructure.config import (
    Config,
    ConnectorConfig,
    DatabaseSpec,
    RedisConfig,
    get_config,
)


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = Config()

        assert config.redis.host == "127.0.0.1"
        assert config.redis.port == 6379
        assert config.redis.use_unix_socket_path is False
        assert config.connector.default_db_name == "CONFIG_DB"
        assert config.connector.init_indicator == "CONFIG_DB_INITIALIZED"
        assert config.connector.scan_batch_size == 30
        assert config.connector.strategy == "direct"

    def test_default_database_registry(self) -> None:
        """Config databases use '|', runtime databases use ':'."""
        config = Config()

        assert config.get_database("CONFIG_DB") == DatabaseSpec(id=4, separator="|")
        assert config.get_database("STATE_DB") == DatabaseSpec(id=6, separator="|")
        assert config.get_database("APPL_DB") == DatabaseSpec(id=0, separator=":")
        assert config.get_database("NO_SUCH_DB") is None

    def test_separator_must_be_single_character(self) -> None:
        """Multi-character separators are rejected."""
        with pytest.raises(ValueError):
            DatabaseSpec(id=4, separator="||")
        with pytest.raises(ValueError):
            DatabaseSpec(id=4, separator="")

    def test_invalid_scan_batch_size(self) -> None:
        """SCAN page size must be positive."""
        with pytest.raises(ValueError):
            ConnectorConfig(scan_batch_size=0)

    def test_invalid_strategy(self) -> None:
        """Only the known strategies are accepted."""
        with pytest.raises(ValueError):
            ConnectorConfig(strategy="parallel")  # type: ignore

    def test_invalid_port(self) -> None:
        """Port must be in range."""
        with pytest.raises(ValueError):
            RedisConfig(port=70000)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested settings can be set from the environment."""
        monkeypatch.setenv("CONFIG_DB_REDIS__HOST", "10.0.0.1")
        monkeypatch.setenv("CONFIG_DB_CONNECTOR__STRATEGY", "pipelined")
        monkeypatch.setenv("CONFIG_DB_CONNECTOR__SCAN_BATCH_SIZE", "500")

        config = Config()

        assert config.redis.host == "10.0.0.1"
        assert config.connector.strategy == "pipelined"
        assert config.connector.scan_batch_size == 500


@pytest.mark.unit
class TestConfigSingleton:
    """Tests for get_config singleton."""

    def test_get_config_returns_same_instance(self) -> None:
        """Test that get_config returns the same instance."""
        config1 = get_config()
        config2 = get_config()
        assert config1 is config2

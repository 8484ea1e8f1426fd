"""Unit tests for the dependency injection container."""

from __future__ import annotations

from typing import Iterator

import pytest

from config_db.adapters.outbound import InMemoryStoreClient
from config_db.application import ConfigDB
from config_db.infrastructure.config import Config, ConnectorConfig
from config_db.infrastructure import metrics as metrics_module
from config_db.infrastructure.container import (
    Container,
    build_container,
    get_container,
    reset_container,
)
from config_db.infrastructure.metrics import MetricsRegistry
from config_db.ports.inbound import AccessStrategy


@pytest.mark.unit
class TestContainer:
    """Test cases for Container."""

    def test_singleton(self, container: Container) -> None:
        config = Config()
        container.register_singleton(Config, config)

        assert container.has(Config)
        assert container.resolve(Config) is config

    def test_factory_is_lazy_and_cached(self, container: Container) -> None:
        calls: list[int] = []

        def factory(c: Container) -> Config:
            calls.append(1)
            return Config()

        container.register_factory(Config, factory)
        assert calls == []

        first = container.resolve(Config)
        second = container.resolve(Config)

        assert first is second
        assert len(calls) == 1

    def test_missing_registration(self, container: Container) -> None:
        assert not container.has(Config)
        with pytest.raises(KeyError):
            container.resolve(Config)

    def test_clear(self, container: Container) -> None:
        container.register_singleton(Config, Config())
        container.clear()
        assert not container.has(Config)


@pytest.mark.unit
class TestBuildContainer:
    """Test cases for build_container wiring."""

    def test_wires_config_db(self, metrics_registry: MetricsRegistry) -> None:
        """The ConfigDB gets the registered config, metrics and strategy."""
        config = Config(connector=ConnectorConfig(strategy="pipelined"))
        store = InMemoryStoreClient(db_id=4)
        container = build_container(
            config=config,
            client_factory=lambda db_name, spec: store,
            metrics=metrics_registry,
        )

        handle = container.resolve(ConfigDB)

        assert container.resolve(Config) is config
        assert container.resolve(MetricsRegistry) is metrics_registry
        assert handle.strategy is AccessStrategy.PIPELINED
        assert not handle.is_connected
        assert container.resolve(ConfigDB) is handle

        handle.db_connect("CONFIG_DB")
        assert handle.client is store
        handle.close()


@pytest.mark.unit
class TestGlobalContainer:
    """Test cases for the process-wide container."""

    @pytest.fixture(autouse=True)
    def isolated(self, monkeypatch: pytest.MonkeyPatch, metrics_registry: MetricsRegistry) -> Iterator[None]:
        """Point the global metrics at a fresh registry and reset afterwards."""
        monkeypatch.setattr(metrics_module, "_metrics", metrics_registry)
        reset_container()
        yield
        reset_container()

    def test_built_once(self, metrics_registry: MetricsRegistry) -> None:
        container = get_container()

        assert get_container() is container
        assert container.has(ConfigDB)
        assert container.resolve(MetricsRegistry) is metrics_registry

    def test_reset_builds_a_new_container(self) -> None:
        first = get_container()
        handle = first.resolve(ConfigDB)

        reset_container()

        assert not first.has(ConfigDB)
        second = get_container()
        assert second is not first
        assert second.resolve(ConfigDB) is not handle

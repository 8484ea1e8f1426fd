"""Pytest configuration and fixtures for config_db tests."""

from __future__ import annotations

from typing import Callable, Generator

import pytest
from prometheus_client import CollectorRegistry

from config_db.adapters.outbound import InMemoryStoreClient
from config_db.application import ConfigDB
from config_db.infrastructure.config import Config, ConnectorConfig, DatabaseSpec
from config_db.infrastructure.container import Container, reset_container
from config_db.infrastructure.metrics import MetricsRegistry
from config_db.ports.inbound import AccessStrategy


@pytest.fixture
def test_config() -> Config:
    """Provide a test configuration with a small SCAN page size."""
    return Config(
        connector=ConnectorConfig(
            scan_batch_size=3,  # Force several pages in tests
            connect_base_delay_seconds=0,
            connect_max_delay_seconds=0,
        ),
    )


@pytest.fixture
def container() -> Generator[Container, None, None]:
    """Provide a fresh DI container for each test."""
    reset_container()
    c = Container()
    yield c
    c.clear()


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def store() -> InMemoryStoreClient:
    """Provide an empty in-memory store for CONFIG_DB (db 4)."""
    return InMemoryStoreClient(db_id=4)


@pytest.fixture
def store_factory(store: InMemoryStoreClient) -> Callable[[str, DatabaseSpec], InMemoryStoreClient]:
    """Client factory handing out the shared in-memory store."""

    def factory(db_name: str, spec: DatabaseSpec) -> InMemoryStoreClient:
        return store

    return factory


@pytest.fixture(params=[AccessStrategy.DIRECT, AccessStrategy.PIPELINED], ids=["direct", "pipelined"])
def db(
    request: pytest.FixtureRequest,
    test_config: Config,
    store_factory: Callable[[str, DatabaseSpec], InMemoryStoreClient],
    metrics_registry: MetricsRegistry,
) -> Generator[ConfigDB, None, None]:
    """Provide a connected CONFIG_DB handle, once per access strategy."""
    handle = ConfigDB(
        config=test_config,
        client_factory=store_factory,
        strategy=request.param,
        metrics=metrics_registry,
    )
    handle.db_connect("CONFIG_DB")
    yield handle
    handle.close()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")

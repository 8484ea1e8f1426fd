"""ConfigDB - database handle for structured configuration access.

This module provides the ConfigDB class that ties the config store
together: it resolves a logical database from configuration, opens the
store client, optionally waits for the database to be populated, and
dispatches table/entry operations.

Usage:
    from config_db.application import ConfigDB

    with ConfigDB() as db:
        db.connect()                      # CONFIG_DB, waits for init
        db.set_entry("PORT", "Ethernet0", {"speed": "100000"})
        ports = db.get_table("PORT")
        snapshot = db.get_config()

Whole-config reads and writes (get_config, mod_config, delete_table) run
through the strategy chosen at construction:

    AccessStrategy.DIRECT      one round trip per key
    AccessStrategy.PIPELINED   SCAN pages + MULTI/EXEC batches

Single-entry operations always go straight to the store.
"""

from __future__ import annotations

import random
import time
from contextlib import contextmanager
from typing import Callable, Generator, Mapping

from config_db.adapters.outbound.redis_store_client import RedisStoreClient
from config_db.domain.services import BatchEngine, DirectAccessor, ReadinessGate
from config_db.domain.value_objects import (
    ConfigInput,
    ConfigSnapshot,
    Entry,
    RowKey,
    TableData,
)
from config_db.infrastructure.config import Config, DatabaseSpec, RedisConfig, get_config
from config_db.infrastructure.logging import get_logger
from config_db.infrastructure.metrics import MetricsRegistry, get_metrics
from config_db.infrastructure.tracing import trace_span
from config_db.ports.inbound import AccessStrategy, NotConnectedError, UnknownDatabaseError
from config_db.ports.outbound import StoreClient, StoreError

logger = get_logger(__name__)

ClientFactory = Callable[[str, DatabaseSpec], StoreClient]
"""Opens a store client for (db_name, database spec)."""


def redis_client_factory(redis_config: RedisConfig) -> ClientFactory:
    """Build a ClientFactory that connects to Redis."""

    def factory(db_name: str, spec: DatabaseSpec) -> StoreClient:
        return RedisStoreClient.connect(
            db_id=spec.id,
            host=redis_config.host,
            port=redis_config.port,
            unix_socket_path=(
                str(redis_config.unix_socket_path)
                if redis_config.use_unix_socket_path
                else None
            ),
            password=redis_config.password,
        )

    return factory


class ConfigDB:
    """Handle on one logical configuration database.

    The handle owns its store client from connect until close. The
    separator is fixed by the database registry when connecting and stays
    the same until the next connect.

    Thread Safety:
        Not thread-safe. Use one handle per thread or serialize access.
    """

    def __init__(
        self,
        config: Config | None = None,
        client_factory: ClientFactory | None = None,
        strategy: AccessStrategy | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the handle (no connection is opened yet).

        Args:
            config: Client configuration (global config if None).
            client_factory: Opens store clients (Redis if None).
            strategy: Whole-config execution strategy (from config if None).
            metrics: Metrics registry (global registry if None).
        """
        self._config = config or get_config()
        self._client_factory = client_factory or redis_client_factory(self._config.redis)
        self._strategy = strategy or AccessStrategy(self._config.connector.strategy)
        self._metrics = metrics or get_metrics()

        self._db_name: str | None = None
        self._spec: DatabaseSpec | None = None
        self._client: StoreClient | None = None
        self._accessor: DirectAccessor | None = None
        self._engine: BatchEngine | None = None
        self._gate: ReadinessGate | None = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def strategy(self) -> AccessStrategy:
        return self._strategy

    @property
    def db_name(self) -> str | None:
        return self._db_name

    @property
    def db_id(self) -> int | None:
        return self._spec.id if self._spec else None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def key_separator(self) -> str:
        """Separator between composite row-key components."""
        return self._require_spec().separator

    @property
    def table_name_separator(self) -> str:
        """Separator between the table name and the row key."""
        return self._require_spec().separator

    def get_key_separator(self) -> str:
        return self.key_separator

    @property
    def client(self) -> StoreClient:
        """The connected store client."""
        return self._require_client()

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    def db_connect(self, db_name: str, wait_for_init: bool = False, retry_on: bool = False) -> None:
        """Connect to a logical database.

        Args:
            db_name: Name from the database registry (e.g. "CONFIG_DB").
            wait_for_init: Block until the initialization sentinel is set.
            retry_on: Retry failed connection attempts with backoff.

        Raises:
            UnknownDatabaseError: If db_name is not in the registry.
            StoreError: If connecting (or waiting) fails.
        """
        spec = self._config.get_database(db_name)
        if spec is None:
            raise UnknownDatabaseError(f"Unknown database: {db_name}")

        if self._client is not None:
            self.close()

        client = self._open_client(db_name, spec, retry_on)
        connector = self._config.connector

        self._db_name = db_name
        self._spec = spec
        self._client = client
        self._accessor = DirectAccessor(client, spec.separator, connector.init_indicator)
        self._engine = BatchEngine(
            client,
            spec.separator,
            init_indicator=connector.init_indicator,
            scan_batch_size=connector.scan_batch_size,
        )
        self._gate = ReadinessGate(client, spec.id, connector.init_indicator)
        self._metrics.connected.labels(db_name=db_name).set(1)
        logger.info(
            "config_db_connected",
            db_name=db_name,
            db_id=spec.id,
            separator=spec.separator,
            strategy=self._strategy.value,
        )

        if wait_for_init:
            self.wait_until_ready()

    def connect(self, wait_for_init: bool = True, retry_on: bool = False) -> None:
        """Connect to the default configuration database (CONFIG_DB)."""
        self.db_connect(self._config.connector.default_db_name, wait_for_init, retry_on)

    def _open_client(self, db_name: str, spec: DatabaseSpec, retry_on: bool) -> StoreClient:
        connector = self._config.connector
        attempts = connector.connect_max_attempts if retry_on else 1
        attempt = 0
        while True:
            attempt += 1
            try:
                client = self._client_factory(db_name, spec)
            except StoreError as e:
                self._metrics.connect_attempts_total.labels(db_name=db_name, status="error").inc()
                if attempt >= attempts:
                    raise
                delay = min(
                    connector.connect_base_delay_seconds * (2 ** (attempt - 1)),
                    connector.connect_max_delay_seconds,
                )
                delay = delay * random.uniform(0.5, 1.5)
                logger.warning(
                    "config_db_connect_retry",
                    db_name=db_name,
                    attempt=attempt,
                    delay_seconds=round(delay, 2),
                    error=str(e),
                )
                time.sleep(delay)
                continue
            self._metrics.connect_attempts_total.labels(db_name=db_name, status="success").inc()
            return client

    def wait_until_ready(self) -> None:
        """Block until the database's initialization sentinel is set.

        Raises:
            NotConnectedError: If not connected.
            StoreError: If the store or the subscription fails.
        """
        gate = self._gate
        if gate is None:
            raise NotConnectedError("Not connected to a database")

        start = time.monotonic()
        with trace_span("config_db.wait_until_ready", {"db_name": self._db_name or ""}):
            gate.wait()
        self._metrics.readiness_wait_seconds.labels(db_name=self._db_name).observe(
            time.monotonic() - start
        )

    def close(self) -> None:
        """Close the store client. The handle can be connected again."""
        if self._client is None:
            return
        try:
            self._client.close()
        finally:
            self._metrics.connected.labels(db_name=self._db_name).set(0)
            logger.info("config_db_closed", db_name=self._db_name)
            self._client = None
            self._accessor = None
            self._engine = None
            self._gate = None

    def __enter__(self) -> ConfigDB:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Entry operations
    # =========================================================================

    def set_entry(self, table: str, key: RowKey, data: Mapping[str, str]) -> None:
        """Write a table entry, removing stored columns not in data.

        Args:
            table: Table name.
            key: Row key, or a tuple of keys for a multi-key table.
            data: {'column': 'value', ...}. {} deletes the entry.
        """
        with self._operation("set_entry"):
            self._require_accessor().set_entry(table, key, data)

    def mod_entry(self, table: str, key: RowKey, data: Mapping[str, str]) -> None:
        """Merge columns into a table entry. {} deletes the entry."""
        with self._operation("mod_entry"):
            self._require_accessor().mod_entry(table, key, data)

    def get_entry(self, table: str, key: RowKey) -> Entry:
        """Read a table entry. Returns {} if it does not exist."""
        with self._operation("get_entry"):
            return self._require_accessor().get_entry(table, key)

    # =========================================================================
    # Table operations
    # =========================================================================

    def get_keys(self, table: str, split: bool = True) -> list[str]:
        """List a table's keys.

        Args:
            table: Table name.
            split: Strip the "TABLE<sep>" prefix and return row keys only.
        """
        with self._operation("get_keys"):
            return self._require_accessor().get_keys(table, split)

    def get_table(self, table: str) -> TableData:
        """Read a whole table as {'row_key': {'column': 'value', ...}, ...}."""
        with self._operation("get_table"):
            return self._require_accessor().get_table(table)

    def delete_table(self, table: str) -> None:
        """Delete every entry of a table."""
        with self._operation("delete_table"):
            if self._strategy is AccessStrategy.PIPELINED:
                self._run_batch(lambda engine: engine.delete_table(table))
            else:
                self._require_accessor().delete_table(table)

    # =========================================================================
    # Whole-config operations
    # =========================================================================

    def mod_config(self, data: ConfigInput) -> None:
        """Write several tables.

        Tables given with no rows are deleted. Entries and columns not
        named in data are kept. With the pipelined strategy every write
        lands in a single MULTI/EXEC batch.

        Args:
            data: {'TABLE': {'row_key': {'column': 'value', ...}, ...}, ...}
        """
        with self._operation("mod_config"), trace_span(
            "config_db.mod_config",
            {"db_name": self._db_name or "", "tables": len(data), "strategy": self._strategy.value},
        ):
            if self._strategy is AccessStrategy.PIPELINED:
                self._run_batch(lambda engine: engine.mod_config(data))
            else:
                self._require_accessor().mod_config(data)

    def get_config(self) -> ConfigSnapshot:
        """Read every table: {'TABLE': {'row_key': {...}, ...}, ...}."""
        with self._operation("get_config"), trace_span(
            "config_db.get_config",
            {"db_name": self._db_name or "", "strategy": self._strategy.value},
        ) as span:
            if self._strategy is AccessStrategy.PIPELINED:
                data = self._run_batch(lambda engine: engine.get_config())
            else:
                data = self._require_accessor().get_config()
            span.set_attribute("tables", len(data))
            return data

    # =========================================================================
    # Helpers
    # =========================================================================

    def _run_batch(self, operation: Callable[[BatchEngine], object]):
        """Run a batch engine operation and export its batch counters."""
        engine = self._require_engine()
        before = engine.get_stats()
        try:
            return operation(engine)
        finally:
            after = engine.get_stats()
            self._metrics.scan_pages_total.inc(after.pages_scanned - before.pages_scanned)
            self._metrics.batch_commits_total.inc(after.commits - before.commits)
            self._metrics.batch_commands_total.inc(
                after.commands_enqueued - before.commands_enqueued
            )

    @contextmanager
    def _operation(self, name: str) -> Generator[None, None, None]:
        strategy = self._strategy.value
        start = time.perf_counter()
        try:
            yield
        except StoreError:
            self._metrics.operations_total.labels(
                operation=name, strategy=strategy, status="error"
            ).inc()
            logger.error("config_db_operation_failed", operation=name, db_name=self._db_name)
            raise
        self._metrics.operations_total.labels(
            operation=name, strategy=strategy, status="success"
        ).inc()
        self._metrics.operation_latency_seconds.labels(
            operation=name, strategy=strategy
        ).observe(time.perf_counter() - start)

    def _require_spec(self) -> DatabaseSpec:
        if self._spec is None:
            raise NotConnectedError("Not connected to a database")
        return self._spec

    def _require_client(self) -> StoreClient:
        if self._client is None:
            raise NotConnectedError("Not connected to a database")
        return self._client

    def _require_accessor(self) -> DirectAccessor:
        if self._accessor is None:
            raise NotConnectedError("Not connected to a database")
        return self._accessor

    def _require_engine(self) -> BatchEngine:
        if self._engine is None:
            raise NotConnectedError("Not connected to a database")
        return self._engine

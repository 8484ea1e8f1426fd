"""Paginated, pipelined execution of whole-table and whole-database operations.

Walking a large database one key per round trip costs O(keys) round trips.
The batch engine instead pages through the key space with SCAN and queues
the per-key commands of each page into a MULTI/EXEC batch:

    get_config:   per page, 1 SCAN + 1 batch of HGETALLs
    mod_config:   1 batch for the whole call (plus 1 SCAN per page of
                  every table being deleted)

Batch replies are matched to keys by position. The engine records the
decoded key of every queued read in an ordered list before dispatch and
walks that list while draining replies, so it relies on the store
returning replies in enqueue order.

Atomicity:
    mod_config commits exactly once, so all its deletes and writes land
    as a single unit. get_config uses a separate batch per page and gives
    no cross-page snapshot isolation.

References:
    - https://redis.io/docs/latest/develop/interact/transactions/
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from config_db.domain.value_objects import (
    ConfigInput,
    ConfigSnapshot,
    decode_key,
    encode_key,
    table_pattern,
)
from config_db.ports.outbound import StoreBatch, StoreClient, StoreCommand

logger = logging.getLogger(__name__)

# Page size hint passed to SCAN
DEFAULT_SCAN_BATCH_SIZE = 30


@dataclass
class BatchStats:
    """Cumulative counters for batch engine monitoring."""

    pages_scanned: int = 0
    commands_enqueued: int = 0
    commits: int = 0


@dataclass
class _BatchContext:
    """Per-call transaction state.

    Created at the start of a batch operation and dropped at its end; never
    shared between calls.
    """

    batch: StoreBatch
    # (table, row) of each queued read, in enqueue order
    reads: list[tuple[str, str]] = field(default_factory=list)

    def enqueue(self, command: StoreCommand, target: tuple[str, str] | None = None) -> None:
        self.batch.enqueue(command)
        if target is not None:
            self.reads.append(target)


class BatchEngine:
    """Whole-config operations over SCAN pagination and MULTI/EXEC batches.

    Thread Safety:
        Not thread-safe. Each call builds its own batch context, but the
        underlying client is shared.
    """

    def __init__(
        self,
        client: StoreClient,
        separator: str,
        init_indicator: str | None = None,
        scan_batch_size: int = DEFAULT_SCAN_BATCH_SIZE,
    ) -> None:
        """Initialize the batch engine.

        Args:
            client: Connected store client.
            separator: Table/key separator of the logical database.
            init_indicator: Readiness sentinel key, excluded from get_config.
            scan_batch_size: Page size hint for SCAN (must be >= 1).

        Raises:
            ValueError: If scan_batch_size < 1.
        """
        if scan_batch_size < 1:
            raise ValueError(f"scan_batch_size must be >= 1, got {scan_batch_size}")

        self._client = client
        self._separator = separator
        self._init_indicator = init_indicator
        self._scan_batch_size = scan_batch_size
        self._stats = BatchStats()

    @property
    def scan_batch_size(self) -> int:
        return self._scan_batch_size

    def get_stats(self) -> BatchStats:
        """Return a copy of the cumulative counters."""
        return BatchStats(
            pages_scanned=self._stats.pages_scanned,
            commands_enqueued=self._stats.commands_enqueued,
            commits=self._stats.commits,
        )

    # =========================================================================
    # Writes
    # =========================================================================

    def delete_table(self, table: str) -> None:
        """Delete every row of a table in a single batch."""
        context = self._open()
        self._enqueue_table_delete(context, table)
        self._commit(context)

    def mod_config(self, data: ConfigInput) -> None:
        """Write several tables in one all-or-nothing batch.

        A table given with no rows has every one of its keys deleted. A
        row given with no columns is deleted. Other rows are merged with
        HSET, leaving stored columns not named in data untouched.
        """
        context = self._open()
        for table, rows in data.items():
            if not rows:
                self._enqueue_table_delete(context, table)
                continue
            for key, fields in rows.items():
                flat_key = encode_key(table, key, self._separator)
                if fields:
                    context.enqueue(StoreCommand.hash_set(flat_key, fields))
                else:
                    context.enqueue(StoreCommand.delete(flat_key))
        committed = self._commit(context)
        logger.debug(f"mod_config committed {committed} commands for {len(data)} tables")

    def _enqueue_table_delete(self, context: _BatchContext, table: str) -> None:
        pattern = table_pattern(table, self._separator)
        cursor = 0
        while True:
            cursor, keys = self._scan(cursor, pattern)
            for key in keys:
                context.enqueue(StoreCommand.delete(key))
            if cursor == 0:
                break

    # =========================================================================
    # Reads
    # =========================================================================

    def get_config(self) -> ConfigSnapshot:
        """Read every configuration key, one batch per SCAN page.

        Keys without a separator and the readiness sentinel are skipped.
        A key that disappears between SCAN and HGETALL reads as an empty
        hash and is left out of the result.
        """
        data: ConfigSnapshot = {}
        cursor = self._get_config_page(data, 0)
        while cursor != 0:
            cursor = self._get_config_page(data, cursor)
        return data

    def _get_config_page(self, data: ConfigSnapshot, cursor: int) -> int:
        """Read one SCAN page into data and return the next cursor."""
        next_cursor, keys = self._scan(cursor, "*")

        context = self._open()
        for key in keys:
            if key == self._init_indicator:
                continue
            decoded = decode_key(key, self._separator)
            if decoded is None:
                continue
            context.enqueue(StoreCommand.hash_get_all(key), decoded)
        self._commit(context)

        for table, row in context.reads:
            entry = context.batch.next_reply()
            if entry:
                data.setdefault(table, {})[row] = dict(entry)

        return next_cursor

    # =========================================================================
    # Helpers
    # =========================================================================

    def _scan(self, cursor: int, pattern: str) -> tuple[int, list[str]]:
        next_cursor, keys = self._client.scan(cursor, pattern, self._scan_batch_size)
        self._stats.pages_scanned += 1
        return next_cursor, keys

    def _open(self) -> _BatchContext:
        return _BatchContext(batch=self._client.transaction())

    def _commit(self, context: _BatchContext) -> int:
        """Commit the batch and return the number of commands it carried."""
        queued = context.batch.pending
        context.batch.commit()
        self._stats.commits += 1
        self._stats.commands_enqueued += queued
        return queued

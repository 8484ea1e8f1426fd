"""Single-key access to configuration tables.

Every logical operation maps onto one store round trip per key touched.
This is the correctness baseline: simple, and slow only for whole-table or
whole-database operations on large stores, which BatchEngine covers.
"""

from __future__ import annotations

import logging
from typing import Mapping

from config_db.domain.value_objects import (
    ConfigInput,
    ConfigSnapshot,
    Entry,
    RowKey,
    TableData,
    decode_key,
    encode_key,
    strip_table,
    table_pattern,
)
from config_db.ports.outbound import StoreClient

logger = logging.getLogger(__name__)


class DirectAccessor:
    """Table/entry operations issued one command at a time.

    Store errors propagate unmodified as StoreError; nothing is retried.
    """

    def __init__(
        self,
        client: StoreClient,
        separator: str,
        init_indicator: str | None = None,
    ) -> None:
        """Initialize the accessor.

        Args:
            client: Connected store client.
            separator: Table/key separator of the logical database.
            init_indicator: Readiness sentinel key, excluded from get_config.
        """
        self._client = client
        self._separator = separator
        self._init_indicator = init_indicator

    @property
    def separator(self) -> str:
        return self._separator

    def get_entry(self, table: str, key: RowKey) -> Entry:
        return self._client.hgetall(encode_key(table, key, self._separator))

    def set_entry(self, table: str, key: RowKey, data: Mapping[str, str]) -> None:
        """Replace a row, pruning columns that are not in data.

        The pre-image is read before the write and stale columns are
        deleted after it. A column added by another writer in between is
        pruned too.
        """
        flat_key = encode_key(table, key, self._separator)
        if not data:
            self._client.delete(flat_key)
            return

        original = self._client.hgetall(flat_key)
        self._client.hset_many(flat_key, data)
        stale = [column for column in original if column not in data]
        if stale:
            self._client.hdel(flat_key, *stale)

    def mod_entry(self, table: str, key: RowKey, data: Mapping[str, str]) -> None:
        """Merge columns into a row. Empty data deletes the row."""
        flat_key = encode_key(table, key, self._separator)
        if not data:
            self._client.delete(flat_key)
        else:
            self._client.hset_many(flat_key, data)

    def get_keys(self, table: str, split: bool = True) -> list[str]:
        keys = self._client.keys(table_pattern(table, self._separator))
        if not split:
            return list(keys)
        return [strip_table(key, self._separator) for key in keys]

    def get_table(self, table: str) -> TableData:
        data: TableData = {}
        for key in self._client.keys(table_pattern(table, self._separator)):
            data[strip_table(key, self._separator)] = self._client.hgetall(key)
        return data

    def delete_table(self, table: str) -> None:
        keys = self._client.keys(table_pattern(table, self._separator))
        for key in keys:
            self._client.delete(key)
        logger.debug(f"Deleted {len(keys)} keys of table {table.upper()}")

    def mod_config(self, data: ConfigInput) -> None:
        """Write several tables; a table with no rows is deleted."""
        for table, rows in data.items():
            if not rows:
                self.delete_table(table)
                continue
            for key, fields in rows.items():
                self.mod_entry(table, key, fields)

    def get_config(self) -> ConfigSnapshot:
        """Read every configuration key, skipping keys without a separator."""
        data: ConfigSnapshot = {}
        for key in self._client.keys("*"):
            if key == self._init_indicator:
                continue
            decoded = decode_key(key, self._separator)
            if decoded is None:
                continue
            table, row = decoded
            entry = self._client.hgetall(key)
            if entry:
                data.setdefault(table, {})[row] = entry
        return data

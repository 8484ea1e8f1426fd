"""Config store port - the API offered to configuration consumers.

Configuration is presented as tables of entries. Each entry is a mapping
of column names to string values keyed by a row key (or a tuple of keys
for multi-key tables).

Example:
    db.set_entry("PORT", "Ethernet0", {"speed": "100000", "mtu": "9100"})
    db.get_table("PORT")
    # {'Ethernet0': {'speed': '100000', 'mtu': '9100'}}
"""

from __future__ import annotations

from abc import abstractmethod
from enum import Enum
from typing import Mapping, Protocol, runtime_checkable

from config_db.domain.value_objects import ConfigInput, ConfigSnapshot, Entry, RowKey, TableData
from config_db.ports.outbound.store_client import ConfigDBError


class AccessStrategy(Enum):
    """How whole-config reads and writes are executed.

    DIRECT issues one store round trip per key. PIPELINED paginates with
    SCAN and batches the per-key commands into MULTI/EXEC transactions.
    """
    DIRECT = "direct"
    PIPELINED = "pipelined"


@runtime_checkable
class ConfigStore(Protocol):
    """Protocol for table/entry access to a configuration database."""

    @abstractmethod
    def set_entry(self, table: str, key: RowKey, data: Mapping[str, str]) -> None:
        """Write a row, removing stored columns that are not in data.

        Passing {} deletes the row.
        """
        ...

    @abstractmethod
    def mod_entry(self, table: str, key: RowKey, data: Mapping[str, str]) -> None:
        """Write a row's columns, keeping stored columns not in data.

        Passing {} deletes the row.
        """
        ...

    @abstractmethod
    def get_entry(self, table: str, key: RowKey) -> Entry:
        """Read a row. Returns {} if it does not exist."""
        ...

    @abstractmethod
    def get_keys(self, table: str, split: bool = True) -> list[str]:
        """List a table's keys, as row keys (split) or flat store keys."""
        ...

    @abstractmethod
    def get_table(self, table: str) -> TableData:
        """Read every row of a table. Returns {} if the table is empty."""
        ...

    @abstractmethod
    def delete_table(self, table: str) -> None:
        """Delete every row of a table."""
        ...

    @abstractmethod
    def mod_config(self, data: ConfigInput) -> None:
        """Write several tables.

        A table given with no rows is deleted. Rows and columns not named
        in data are left untouched.
        """
        ...

    @abstractmethod
    def get_config(self) -> ConfigSnapshot:
        """Read every table of the database."""
        ...


class NotConnectedError(ConfigDBError):
    """Operation attempted on a handle that is not connected."""
    pass


class UnknownDatabaseError(ConfigDBError):
    """Logical database name missing from the database registry."""
    pass

"""Table/row key encoding for the flat store key space.

A configuration entry lives under a single flat key built from the
upper-cased table name, the database separator and the row key:

    PORT|Ethernet0
    VLAN_MEMBER|Vlan100|Ethernet4     (multi-key row)

Decoding splits at the *first* separator only, so multi-key rows come back
as one flattened row key ("Vlan100|Ethernet4"). Splitting that back into a
tuple needs the table's key arity, which only the caller knows.
"""

from __future__ import annotations

from typing import Mapping, Tuple, Union

Entry = dict[str, str]
"""Column name -> value mapping for one row."""

RowKey = Union[str, Tuple[str, ...]]
"""A single row key, or a tuple of keys for multi-key tables."""

TableData = dict[str, Entry]
"""Row key -> entry mapping for one table."""

ConfigSnapshot = dict[str, TableData]
"""Table name -> table data mapping for a whole database."""

ConfigInput = Mapping[str, Mapping[RowKey, Mapping[str, str]]]
"""Accepted shape for whole-config writes (tuple row keys allowed)."""


def serialize_key(key: RowKey, separator: str) -> str:
    """Flatten a row key, joining tuple components with the separator."""
    if isinstance(key, tuple):
        return separator.join(key)
    return key


def encode_key(table: str, key: RowKey, separator: str) -> str:
    """Build the flat store key for a table row.

    Example:
        >>> encode_key("port", "Ethernet0", "|")
        'PORT|Ethernet0'
        >>> encode_key("vlan_member", ("Vlan100", "Ethernet4"), "|")
        'VLAN_MEMBER|Vlan100|Ethernet4'
    """
    return table.upper() + separator + serialize_key(key, separator)


def decode_key(flat_key: str, separator: str) -> tuple[str, str] | None:
    """Split a flat key into (table, row_key) at the first separator.

    Returns:
        The (table, row_key) pair, or None when the key has no separator
        and therefore is not a configuration key.
    """
    table, sep, row = flat_key.partition(separator)
    if not sep:
        return None
    return table, row


def strip_table(flat_key: str, separator: str) -> str:
    """Return the row part of a flat key ("" if it has no separator)."""
    _, _, row = flat_key.partition(separator)
    return row


def table_pattern(table: str, separator: str) -> str:
    """Glob pattern matching every key of a table."""
    return table.upper() + separator + "*"

"""Value objects for the config store.

Exports:
    KeyCodec:
        - encode_key / decode_key: (table, row) <-> flat store key
        - table_pattern: enumeration pattern for a table
        - strip_table: row part of a flat key
        - serialize_key: flatten tuple row keys
    Types:
        - Entry, RowKey, TableData, ConfigSnapshot, ConfigInput
"""

from config_db.domain.value_objects.key_codec import (
    ConfigInput,
    ConfigSnapshot,
    Entry,
    RowKey,
    TableData,
    decode_key,
    encode_key,
    serialize_key,
    strip_table,
    table_pattern,
)

__all__ = [
    "ConfigInput",
    "ConfigSnapshot",
    "Entry",
    "RowKey",
    "TableData",
    "decode_key",
    "encode_key",
    "serialize_key",
    "strip_table",
    "table_pattern",
]

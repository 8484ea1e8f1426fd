"""Unit tests for table/row key encoding."""

from __future__ import annotations

import pytest

from config_db.domain.value_objects import (
    decode_key,
    encode_key,
    serialize_key,
    strip_table,
    table_pattern,
)


@pytest.mark.unit
class TestEncodeKey:
    """Tests for encode_key and serialize_key."""

    def test_table_is_upper_cased(self) -> None:
        """Table names are upper-cased, row keys are kept as-is."""
        assert encode_key("port", "Ethernet0", "|") == "PORT|Ethernet0"

    def test_tuple_row_key(self) -> None:
        """Multi-key rows are joined with the separator."""
        key = encode_key("VLAN_MEMBER", ("Vlan100", "Ethernet4"), "|")
        assert key == "VLAN_MEMBER|Vlan100|Ethernet4"

    def test_colon_separator(self) -> None:
        """The database separator is used throughout."""
        assert encode_key("route_table", ("default", "10.0.0.0/8"), ":") == "ROUTE_TABLE:default:10.0.0.0/8"

    def test_serialize_plain_key(self) -> None:
        """String keys pass through untouched."""
        assert serialize_key("Ethernet0", "|") == "Ethernet0"


@pytest.mark.unit
class TestDecodeKey:
    """Tests for decode_key and strip_table."""

    def test_split_at_first_separator(self) -> None:
        """Only the first separator splits table from row."""
        assert decode_key("VLAN_MEMBER|Vlan100|Ethernet4", "|") == ("VLAN_MEMBER", "Vlan100|Ethernet4")

    def test_no_separator_is_not_decodable(self) -> None:
        """Keys without a separator decode to None."""
        assert decode_key("CONFIG_DB_INITIALIZED", "|") is None

    def test_empty_row(self) -> None:
        """A trailing separator gives an empty row key."""
        assert decode_key("PORT|", "|") == ("PORT", "")

    def test_decode_reverses_encode(self) -> None:
        """Decoding an encoded single key gives back the upper-cased table and row."""
        assert decode_key(encode_key("port", "Ethernet0", "|"), "|") == ("PORT", "Ethernet0")

    def test_strip_table(self) -> None:
        """strip_table keeps everything after the first separator."""
        assert strip_table("VLAN_MEMBER|Vlan100|Ethernet4", "|") == "Vlan100|Ethernet4"
        assert strip_table("STRAY", "|") == ""


@pytest.mark.unit
def test_table_pattern() -> None:
    """Enumeration pattern matches every row of a table."""
    assert table_pattern("port", "|") == "PORT|*"

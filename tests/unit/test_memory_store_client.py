"""Unit tests for InMemoryStoreClient."""

from __future__ import annotations

import pytest

from config_db.adapters.outbound import InMemoryStoreClient
from config_db.ports.outbound import StoreCommand, StoreError


def scan_all(client: InMemoryStoreClient, pattern: str, count: int) -> list[str]:
    """Collect every key of a full SCAN pass."""
    keys: list[str] = []
    cursor, page = client.scan(0, pattern, count)
    keys.extend(page)
    while cursor != 0:
        cursor, page = client.scan(cursor, pattern, count)
        keys.extend(page)
    return keys


@pytest.mark.unit
class TestInMemoryCommands:
    """Tests for single commands."""

    def test_hash_round_trip(self, store: InMemoryStoreClient) -> None:
        """Hash fields written can be read back."""
        store.hset_many("PORT|Ethernet0", {"speed": "100", "mtu": "9100"})
        assert store.hgetall("PORT|Ethernet0") == {"speed": "100", "mtu": "9100"}

    def test_hgetall_missing_key(self, store: InMemoryStoreClient) -> None:
        """Missing hashes read as empty."""
        assert store.hgetall("PORT|Ethernet0") == {}

    def test_hdel_last_field_removes_key(self, store: InMemoryStoreClient) -> None:
        """Deleting the last field removes the key."""
        store.hset_many("PORT|Ethernet0", {"speed": "100"})
        assert store.hdel("PORT|Ethernet0", "speed") == 1
        assert store.keys("*") == []

    def test_wrong_type(self, store: InMemoryStoreClient) -> None:
        """Reading a string key as a hash is an error."""
        store.set("CONFIG_DB_INITIALIZED", "1")
        with pytest.raises(StoreError, match="WRONGTYPE"):
            store.hgetall("CONFIG_DB_INITIALIZED")

    def test_delete_counts(self, store: InMemoryStoreClient) -> None:
        """delete returns the number of removed keys."""
        store.set("a", "1")
        assert store.delete("a") == 1
        assert store.delete("a") == 0

    def test_injected_failure(self, store: InMemoryStoreClient) -> None:
        """fail_on makes an operation raise StoreError."""
        store.fail_on("hgetall")
        with pytest.raises(StoreError):
            store.hgetall("PORT|Ethernet0")

    def test_closed_client(self, store: InMemoryStoreClient) -> None:
        """Commands fail after close."""
        store.close()
        with pytest.raises(StoreError, match="closed"):
            store.get("a")


@pytest.mark.unit
class TestInMemoryScan:
    """Tests for SCAN pagination."""

    def test_pages_cover_key_space(self, store: InMemoryStoreClient) -> None:
        """A full pass returns the same keys as KEYS."""
        for i in range(10):
            store.hset_many(f"PORT|Ethernet{i}", {"speed": "100"})
            store.hset_many(f"VLAN|Vlan{i}", {"vlanid": str(i)})

        for count in (1, 3, 7, 50):
            assert sorted(scan_all(store, "PORT|*", count)) == store.keys("PORT|*")
            assert sorted(scan_all(store, "*", count)) == store.keys("*")

    def test_pages_can_be_empty(self, store: InMemoryStoreClient) -> None:
        """Pages with no matching keys still advance the cursor."""
        for i in range(4):
            store.hset_many(f"ACL|rule{i}", {"a": "b"})
        store.hset_many("PORT|Ethernet0", {"speed": "100"})

        cursor, page = store.scan(0, "PORT|*", 2)

        assert cursor != 0
        assert page == []

    def test_empty_store(self, store: InMemoryStoreClient) -> None:
        """Scanning an empty store ends immediately."""
        assert store.scan(0, "*", 10) == (0, [])


@pytest.mark.unit
class TestInMemoryBatch:
    """Tests for MULTI/EXEC batches."""

    def test_replies_in_enqueue_order(self, store: InMemoryStoreClient) -> None:
        """Replies come back in the order commands were queued."""
        store.hset_many("A|1", {"x": "1"})
        store.hset_many("B|2", {"y": "2"})

        batch = store.transaction()
        batch.enqueue(StoreCommand.hash_get_all("B|2"))
        batch.enqueue(StoreCommand.hash_get_all("A|1"))
        batch.enqueue(StoreCommand.delete("A|1"))
        assert batch.pending == 3
        batch.commit()

        assert batch.next_reply() == {"y": "2"}
        assert batch.next_reply() == {"x": "1"}
        assert batch.next_reply() == 1
        assert batch.next_reply() is None
        assert batch.pending == 0

    def test_failed_batch_applies_nothing(self, store: InMemoryStoreClient) -> None:
        """A batch with an invalid command leaves the store unchanged."""
        store.set("CONFIG_DB_INITIALIZED", "1")
        store.hset_many("A|1", {"x": "1"})

        batch = store.transaction()
        batch.enqueue(StoreCommand.delete("A|1"))
        batch.enqueue(StoreCommand.hash_get_all("CONFIG_DB_INITIALIZED"))

        with pytest.raises(StoreError):
            batch.commit()
        assert store.hgetall("A|1") == {"x": "1"}


@pytest.mark.unit
class TestInMemoryNotifications:
    """Tests for keyspace notifications."""

    def test_subscription_receives_matching_events(self, store: InMemoryStoreClient) -> None:
        """Writes to a matching key are delivered as pmessage events."""
        subscription = store.psubscribe("__keyspace@4__:CONFIG_DB_INITIALIZED")
        store.hset_many("PORT|Ethernet0", {"speed": "100"})
        store.set("CONFIG_DB_INITIALIZED", "1")

        confirmation = subscription.next_event()
        event = subscription.next_event()

        assert confirmation.kind == "psubscribe"
        assert event.kind == "pmessage"
        assert event.channel == "__keyspace@4__:CONFIG_DB_INITIALIZED"
        assert event.data == "set"

    def test_unsubscribe(self, store: InMemoryStoreClient) -> None:
        """Unsubscribed subscriptions stop receiving events."""
        subscription = store.psubscribe("__keyspace@4__:*")
        assert store.subscriber_count == 1

        subscription.unsubscribe()

        assert store.subscriber_count == 0
        with pytest.raises(StoreError):
            subscription.next_event()

"""In-memory store client for testing and development.

This adapter provides an in-process implementation of the StoreClient
protocol. It keeps the behaviours the config store depends on:

- SCAN pagination over the whole key space with a real cursor (pages can
  be empty when nothing in them matches the pattern)
- Batches that validate every queued command before applying any, and
  return replies in enqueue order
- Keyspace notifications ("__keyspace@<db>__:<key>") published on every
  write, delivered through blocking queues so another thread can wake a
  waiting subscriber

Example:
    client = InMemoryStoreClient(db_id=4)
    client.hset_many("PORT|Ethernet0", {"speed": "100000"})
    client.scan(0, "PORT|*", 10)
    # (0, ['PORT|Ethernet0'])
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from fnmatch import fnmatchcase
from typing import Any, Mapping

from config_db.ports.outbound import (
    CommandKind,
    KeyspaceEvent,
    StoreCommand,
    StoreError,
)


logger = logging.getLogger(__name__)


class InMemoryStoreClient:
    """In-memory implementation of StoreClient.

    String keys hold str values; hash keys hold dict[str, str] values.
    Reading a key as the wrong type raises StoreError, like the real
    store's WRONGTYPE reply.

    Failures can be injected per operation name with fail_on(), e.g.
    fail_on("scan") makes every later scan() raise StoreError.
    """

    def __init__(self, db_id: int = 0) -> None:
        """Initialize an empty store.

        Args:
            db_id: Database id used in keyspace notification channels.
        """
        self._db_id = db_id
        self._data: dict[str, str | dict[str, str]] = {}
        self._lock = threading.RLock()
        self._subscriptions: list[InMemorySubscription] = []
        self._failing: set[str] = set()
        self._closed = False
        self.commits = 0

    @property
    def db_id(self) -> int:
        return self._db_id

    @property
    def closed(self) -> bool:
        return self._closed

    def fail_on(self, *operations: str) -> None:
        """Make the named operations raise StoreError from now on."""
        self._failing.update(operations)

    def fail_subscriptions(self, error: StoreError) -> None:
        """Break every open subscription, as a dropped connection would."""
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription.fail(error)

    def _check(self, operation: str) -> None:
        if self._closed:
            raise StoreError("Connection closed")
        if operation in self._failing:
            raise StoreError(f"Injected failure for {operation}")

    def _hash(self, key: str) -> dict[str, str] | None:
        value = self._data.get(key)
        if value is None:
            return None
        if not isinstance(value, dict):
            raise StoreError(f"WRONGTYPE Operation against a key holding the wrong kind of value: {key}")
        return value

    # =========================================================================
    # Commands
    # =========================================================================

    def get(self, key: str) -> str | None:
        self._check("get")
        with self._lock:
            value = self._data.get(key)
            if isinstance(value, dict):
                raise StoreError(f"WRONGTYPE Operation against a key holding the wrong kind of value: {key}")
            return value

    def set(self, key: str, value: str) -> None:
        self._check("set")
        with self._lock:
            self._data[key] = value
        self._notify(key, "set")

    def delete(self, key: str) -> int:
        self._check("delete")
        return self._delete(key)

    def _delete(self, key: str) -> int:
        with self._lock:
            removed = self._data.pop(key, None) is not None
        if removed:
            self._notify(key, "del")
        return int(removed)

    def hset_many(self, key: str, fields: Mapping[str, str]) -> None:
        self._check("hset_many")
        self._hset(key, fields)

    def _hset(self, key: str, fields: Mapping[str, str]) -> int:
        with self._lock:
            current = self._hash(key)
            if current is None:
                current = self._data[key] = {}
            added = sum(1 for name in fields if name not in current)
            current.update(fields)
        self._notify(key, "hset")
        return added

    def hgetall(self, key: str) -> dict[str, str]:
        self._check("hgetall")
        with self._lock:
            return dict(self._hash(key) or {})

    def hdel(self, key: str, *fields: str) -> int:
        self._check("hdel")
        with self._lock:
            current = self._hash(key)
            if not current:
                return 0
            removed = 0
            for name in fields:
                if current.pop(name, None) is not None:
                    removed += 1
            if not current:
                del self._data[key]
        if removed:
            self._notify(key, "hdel")
        return removed

    def keys(self, pattern: str) -> list[str]:
        self._check("keys")
        with self._lock:
            return sorted(key for key in self._data if fnmatchcase(key, pattern))

    def scan(self, cursor: int, pattern: str, count: int) -> tuple[int, list[str]]:
        """Return one page of the sorted key space, filtered by pattern.

        The cursor is an offset into the sorted key space; pattern
        filtering is applied after paging, as the real store does.
        """
        self._check("scan")
        if cursor < 0:
            raise StoreError(f"Invalid cursor: {cursor}")
        with self._lock:
            ordered = sorted(self._data)
        page = ordered[cursor:cursor + count]
        next_cursor = cursor + count
        if next_cursor >= len(ordered):
            next_cursor = 0
        return next_cursor, [key for key in page if fnmatchcase(key, pattern)]

    def transaction(self) -> InMemoryBatch:
        self._check("transaction")
        return InMemoryBatch(self)

    def psubscribe(self, pattern: str) -> InMemorySubscription:
        self._check("psubscribe")
        subscription = InMemorySubscription(self, pattern)
        with self._lock:
            self._subscriptions.append(subscription)
        subscription.deliver(KeyspaceEvent(kind="psubscribe", channel=pattern, data="1"))
        return subscription

    def close(self) -> None:
        self._closed = True

    # =========================================================================
    # Batches and notifications
    # =========================================================================

    def _execute(self, commands: list[StoreCommand]) -> list[Any]:
        """Apply queued commands atomically, returning replies in order."""
        self._check("commit")
        with self._lock:
            for command in commands:
                if command.kind is not CommandKind.DELETE:
                    self._hash(command.key)
            replies: list[Any] = []
            for command in commands:
                if command.kind is CommandKind.DELETE:
                    replies.append(self._delete(command.key))
                elif command.kind is CommandKind.HASH_SET:
                    replies.append(self._hset(command.key, command.fields))
                else:
                    replies.append(dict(self._hash(command.key) or {}))
            self.commits += 1
        return replies

    def _notify(self, key: str, operation: str) -> None:
        channel = f"__keyspace@{self._db_id}__:{key}"
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            if fnmatchcase(channel, subscription.pattern):
                subscription.deliver(
                    KeyspaceEvent(kind="pmessage", channel=channel, data=operation)
                )

    def _remove_subscription(self, subscription: InMemorySubscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)


class InMemoryBatch:
    """MULTI/EXEC batch over an InMemoryStoreClient."""

    def __init__(self, client: InMemoryStoreClient) -> None:
        self._client = client
        self._queued: list[StoreCommand] = []
        self._replies: deque[Any] = deque()

    @property
    def pending(self) -> int:
        return len(self._queued)

    def enqueue(self, command: StoreCommand) -> None:
        self._queued.append(command)

    def commit(self) -> None:
        commands, self._queued = self._queued, []
        self._replies = deque(self._client._execute(commands))

    def next_reply(self) -> Any:
        if not self._replies:
            return None
        return self._replies.popleft()


class InMemorySubscription:
    """Pattern subscription fed by the owning client's notifications."""

    def __init__(self, client: InMemoryStoreClient, pattern: str) -> None:
        self._client = client
        self.pattern = pattern
        self._events: queue.Queue[KeyspaceEvent | StoreError] = queue.Queue()
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def deliver(self, event: KeyspaceEvent) -> None:
        self._events.put(event)

    def fail(self, error: StoreError) -> None:
        """Make the next next_event() call raise error."""
        self._events.put(error)

    def next_event(self) -> KeyspaceEvent:
        if not self._active:
            raise StoreError("Subscription closed")
        item = self._events.get()
        if isinstance(item, StoreError):
            raise item
        return item

    def unsubscribe(self) -> None:
        self._active = False
        self._client._remove_subscription(self)
        logger.debug(f"Unsubscribed from {self.pattern}")

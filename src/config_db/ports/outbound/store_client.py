"""Store client port for the backing key/hash database.

This outbound port defines the contract for the key-value store the
configuration client is layered on. Implementations own connection
management, raw command execution and reply parsing; the config store
only relies on the operations below.

The store is expected to offer:
- Plain string keys (used for the readiness sentinel)
- Hash keys with string fields (used for table entries)
- Cursor-based pattern enumeration (SCAN semantics: cursor 0 starts and
  ends a full pass)
- MULTI/EXEC style batches that execute atomically and return replies in
  the order commands were queued
- Pattern subscriptions to keyspace notifications

References:
    - https://redis.io/docs/latest/commands/scan/
    - https://redis.io/docs/latest/develop/use/keyspace-notifications/
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Protocol


class ConfigDBError(Exception):
    """Base class for config store errors."""
    pass


class StoreError(ConfigDBError):
    """Connection or command failure reported by the backing store.

    Never retried locally; surfaced to the caller as-is.
    """
    pass


class CommandKind(Enum):
    """Commands that can be queued into a batch."""
    DELETE = "DEL"
    HASH_SET = "HSET"
    HASH_GET_ALL = "HGETALL"


class ReplyShape(Enum):
    """Expected shape of a queued command's reply."""
    INTEGER = "integer"
    MAPPING = "mapping"


@dataclass(frozen=True)
class StoreCommand:
    """A single command queued into a batch."""

    kind: CommandKind
    key: str
    fields: Mapping[str, str] = field(default_factory=dict)

    @property
    def expected_reply(self) -> ReplyShape:
        """Reply shape the store returns for this command."""
        if self.kind is CommandKind.HASH_GET_ALL:
            return ReplyShape.MAPPING
        return ReplyShape.INTEGER

    @classmethod
    def delete(cls, key: str) -> StoreCommand:
        return cls(CommandKind.DELETE, key)

    @classmethod
    def hash_set(cls, key: str, fields: Mapping[str, str]) -> StoreCommand:
        return cls(CommandKind.HASH_SET, key, dict(fields))

    @classmethod
    def hash_get_all(cls, key: str) -> StoreCommand:
        return cls(CommandKind.HASH_GET_ALL, key)


@dataclass(frozen=True)
class KeyspaceEvent:
    """A message received on a pattern subscription.

    Attributes:
        kind: Message type ("pmessage" for notifications, "psubscribe" /
            "punsubscribe" for subscription confirmations).
        channel: Channel name, e.g. "__keyspace@4__:CONFIG_DB_INITIALIZED".
        data: Payload; for keyspace notifications, the command name.
    """

    kind: str
    channel: str
    data: str | None = None


class StoreBatch(Protocol):
    """Protocol for a buffered, atomically committed group of commands.

    Commands are executed in enqueue order and their replies come back in
    the same order. Callers correlate replies to commands positionally.
    """

    @abstractmethod
    def enqueue(self, command: StoreCommand) -> None:
        """Queue a command for the next commit."""
        ...

    @abstractmethod
    def commit(self) -> None:
        """Execute every queued command as one all-or-nothing unit.

        Raises:
            StoreError: If the store rejects the batch.
        """
        ...

    @abstractmethod
    def next_reply(self) -> Any:
        """Pop the next reply of the last commit, in enqueue order.

        Returns:
            The reply, or None once every reply has been consumed.
        """
        ...

    @property
    @abstractmethod
    def pending(self) -> int:
        """Number of commands queued and not yet committed."""
        ...


class StoreSubscription(Protocol):
    """Protocol for a pattern subscription on store notifications."""

    @abstractmethod
    def next_event(self) -> KeyspaceEvent:
        """Block until the next message arrives (no timeout).

        Raises:
            StoreError: If the subscription connection fails.
        """
        ...

    @abstractmethod
    def unsubscribe(self) -> None:
        """Drop the subscription and release its connection."""
        ...


class StoreClient(Protocol):
    """Protocol for the key/hash store client.

    Thread Safety:
        Implementations are not required to support concurrent command
        issuance. Callers serialize access or use separate clients.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Read a string key; None if absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Write a string key."""
        ...

    @abstractmethod
    def delete(self, key: str) -> int:
        """Delete a key of any type. Returns the number of keys removed."""
        ...

    @abstractmethod
    def hset_many(self, key: str, fields: Mapping[str, str]) -> None:
        """Write several hash fields at once."""
        ...

    @abstractmethod
    def hgetall(self, key: str) -> dict[str, str]:
        """Read every field of a hash; empty dict if the key is absent."""
        ...

    @abstractmethod
    def hdel(self, key: str, *fields: str) -> int:
        """Delete hash fields. Returns the number of fields removed."""
        ...

    @abstractmethod
    def keys(self, pattern: str) -> list[str]:
        """Return every key matching a glob pattern in one call."""
        ...

    @abstractmethod
    def scan(self, cursor: int, pattern: str, count: int) -> tuple[int, list[str]]:
        """Return one page of keys matching a pattern.

        Args:
            cursor: 0 to start a pass, otherwise the cursor of the previous page.
            pattern: Glob pattern.
            count: Page size hint.

        Returns:
            (next_cursor, keys). next_cursor is 0 when the pass is complete.
        """
        ...

    @abstractmethod
    def transaction(self) -> StoreBatch:
        """Open a new MULTI/EXEC batch."""
        ...

    @abstractmethod
    def psubscribe(self, pattern: str) -> StoreSubscription:
        """Subscribe to channels matching a pattern."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the connection."""
        ...

"""Redis implementation of the StoreClient port.

Wraps a redis-py client configured with decode_responses=True so every
key, field and value crosses the port as str. Driver exceptions are
re-raised as StoreError with the original exception chained.

Batches map onto redis-py transactional pipelines (MULTI/EXEC); their
replies come back from EXEC in queue order. Subscriptions map onto
redis-py PubSub objects and block in listen() without a timeout.

Keyspace notifications must be enabled on the server (for example
"notify-keyspace-events KA") for the readiness wait to wake up.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Iterator, Mapping

import redis

from config_db.ports.outbound import (
    CommandKind,
    KeyspaceEvent,
    StoreCommand,
    StoreError,
)


logger = logging.getLogger(__name__)


class RedisStoreClient:
    """StoreClient backed by a single Redis logical database."""

    def __init__(self, client: redis.Redis) -> None:
        """Wrap an existing redis-py client.

        Args:
            client: redis.Redis created with decode_responses=True.
        """
        self._client = client

    @classmethod
    def connect(
        cls,
        db_id: int,
        host: str = "127.0.0.1",
        port: int = 6379,
        unix_socket_path: str | None = None,
        password: str | None = None,
    ) -> RedisStoreClient:
        """Open a connection to a logical database and verify it with PING.

        Raises:
            StoreError: If the server cannot be reached.
        """
        if unix_socket_path:
            client = redis.Redis(
                unix_socket_path=unix_socket_path,
                db=db_id,
                password=password,
                decode_responses=True,
            )
        else:
            client = redis.Redis(
                host=host,
                port=port,
                db=db_id,
                password=password,
                decode_responses=True,
            )
        try:
            client.ping()
        except redis.RedisError as e:
            client.close()
            raise StoreError(f"Cannot connect to database {db_id}: {e}") from e
        logger.debug(f"Connected to redis database {db_id}")
        return cls(client)

    @property
    def redis(self) -> redis.Redis:
        """The underlying redis-py client."""
        return self._client

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(key)
        except redis.RedisError as e:
            raise StoreError(f"GET {key} failed: {e}") from e

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(key, value)
        except redis.RedisError as e:
            raise StoreError(f"SET {key} failed: {e}") from e

    def delete(self, key: str) -> int:
        try:
            return self._client.delete(key)
        except redis.RedisError as e:
            raise StoreError(f"DEL {key} failed: {e}") from e

    def hset_many(self, key: str, fields: Mapping[str, str]) -> None:
        try:
            self._client.hset(key, mapping=dict(fields))
        except redis.RedisError as e:
            raise StoreError(f"HSET {key} failed: {e}") from e

    def hgetall(self, key: str) -> dict[str, str]:
        try:
            return self._client.hgetall(key)
        except redis.RedisError as e:
            raise StoreError(f"HGETALL {key} failed: {e}") from e

    def hdel(self, key: str, *fields: str) -> int:
        try:
            return self._client.hdel(key, *fields)
        except redis.RedisError as e:
            raise StoreError(f"HDEL {key} failed: {e}") from e

    def keys(self, pattern: str) -> list[str]:
        try:
            return self._client.keys(pattern)
        except redis.RedisError as e:
            raise StoreError(f"KEYS {pattern} failed: {e}") from e

    def scan(self, cursor: int, pattern: str, count: int) -> tuple[int, list[str]]:
        try:
            next_cursor, keys = self._client.scan(cursor=cursor, match=pattern, count=count)
        except redis.RedisError as e:
            raise StoreError(f"SCAN {cursor} {pattern} failed: {e}") from e
        return int(next_cursor), list(keys)

    def transaction(self) -> RedisBatch:
        return RedisBatch(self._client.pipeline(transaction=True))

    def psubscribe(self, pattern: str) -> RedisSubscription:
        pubsub = self._client.pubsub()
        try:
            pubsub.psubscribe(pattern)
        except redis.RedisError as e:
            pubsub.close()
            raise StoreError(f"PSUBSCRIBE {pattern} failed: {e}") from e
        return RedisSubscription(pubsub, pattern)

    def close(self) -> None:
        self._client.close()


class RedisBatch:
    """MULTI/EXEC batch over a redis-py transactional pipeline."""

    def __init__(self, pipeline: redis.client.Pipeline) -> None:
        self._pipeline = pipeline
        self._pending = 0
        self._replies: deque[Any] = deque()

    @property
    def pending(self) -> int:
        return self._pending

    def enqueue(self, command: StoreCommand) -> None:
        if command.kind is CommandKind.DELETE:
            self._pipeline.delete(command.key)
        elif command.kind is CommandKind.HASH_SET:
            self._pipeline.hset(command.key, mapping=dict(command.fields))
        else:
            self._pipeline.hgetall(command.key)
        self._pending += 1

    def commit(self) -> None:
        try:
            replies = self._pipeline.execute()
        except redis.RedisError as e:
            raise StoreError(f"EXEC of {self._pending} commands failed: {e}") from e
        finally:
            self._pending = 0
            self._pipeline.reset()
        self._replies = deque(replies)

    def next_reply(self) -> Any:
        if not self._replies:
            return None
        return self._replies.popleft()


class RedisSubscription:
    """Pattern subscription over a redis-py PubSub connection."""

    def __init__(self, pubsub: redis.client.PubSub, pattern: str) -> None:
        self._pubsub = pubsub
        self._pattern = pattern
        self._messages: Iterator[dict[str, Any]] = pubsub.listen()

    def next_event(self) -> KeyspaceEvent:
        try:
            message = next(self._messages)
        except (redis.RedisError, StopIteration) as e:
            raise StoreError(f"Subscription to {self._pattern} failed: {e}") from e
        data = message.get("data")
        return KeyspaceEvent(
            kind=message["type"],
            channel=message["channel"],
            data=data if isinstance(data, str) else None,
        )

    def unsubscribe(self) -> None:
        try:
            self._pubsub.punsubscribe(self._pattern)
        except redis.RedisError as e:
            raise StoreError(f"PUNSUBSCRIBE {self._pattern} failed: {e}") from e
        finally:
            self._pubsub.close()

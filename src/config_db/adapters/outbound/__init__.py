"""Outbound adapters - implementations of outbound ports.

These adapters implement the StoreClient port over a real Redis server
and over an in-process store for tests and development.
"""

from config_db.adapters.outbound.memory_store_client import (
    InMemoryBatch,
    InMemoryStoreClient,
    InMemorySubscription,
)
from config_db.adapters.outbound.redis_store_client import (
    RedisBatch,
    RedisStoreClient,
    RedisSubscription,
)

__all__ = [
    "InMemoryBatch",
    "InMemoryStoreClient",
    "InMemorySubscription",
    "RedisBatch",
    "RedisStoreClient",
    "RedisSubscription",
]

"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Outbound adapters: Implement the store client (Redis, in-memory)
"""

from config_db.adapters.outbound import (
    InMemoryStoreClient,
    RedisStoreClient,
)

__all__ = [
    # Outbound adapters
    "InMemoryStoreClient",
    "RedisStoreClient",
]

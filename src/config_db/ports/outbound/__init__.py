"""Outbound ports - interfaces for external dependencies.

Outbound ports define the contract for the key/hash store that the
config store depends on.
"""

from config_db.ports.outbound.store_client import (
    CommandKind,
    ConfigDBError,
    KeyspaceEvent,
    ReplyShape,
    StoreBatch,
    StoreClient,
    StoreCommand,
    StoreError,
    StoreSubscription,
)

__all__ = [
    "CommandKind",
    "ConfigDBError",
    "KeyspaceEvent",
    "ReplyShape",
    "StoreBatch",
    "StoreClient",
    "StoreCommand",
    "StoreError",
    "StoreSubscription",
]

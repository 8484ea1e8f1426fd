"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: APIs offered to clients (ConfigStore)
- Outbound ports: Dependencies on external systems (StoreClient)

Adapters implement these ports with concrete functionality.
"""

from config_db.ports.inbound import (
    AccessStrategy,
    ConfigStore,
    NotConnectedError,
    UnknownDatabaseError,
)
from config_db.ports.outbound import (
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
    # Inbound ports
    "AccessStrategy",
    "ConfigStore",
    "NotConnectedError",
    "UnknownDatabaseError",
    # Outbound ports
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

"""Inbound ports - APIs offered to configuration consumers."""

from config_db.ports.inbound.config_store import (
    AccessStrategy,
    ConfigStore,
    NotConnectedError,
    UnknownDatabaseError,
)

__all__ = [
    "AccessStrategy",
    "ConfigStore",
    "NotConnectedError",
    "UnknownDatabaseError",
]

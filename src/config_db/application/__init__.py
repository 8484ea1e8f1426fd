"""Application layer for the config store client.

Exports:
    ConfigDB:
        - ConfigDB: Handle on one logical configuration database
        - ClientFactory: Callable opening a store client for a database
        - redis_client_factory: ClientFactory backed by Redis
"""

from config_db.application.config_db import ClientFactory, ConfigDB, redis_client_factory

__all__ = [
    "ClientFactory",
    "ConfigDB",
    "redis_client_factory",
]

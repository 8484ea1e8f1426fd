"""Domain services for configuration access.

Services implement the table/entry operations on top of the store client
port: single-key access, paginated batch access, and the startup
readiness wait.
"""

from config_db.domain.services.batch_engine import (
    DEFAULT_SCAN_BATCH_SIZE,
    BatchEngine,
    BatchStats,
)
from config_db.domain.services.direct_accessor import DirectAccessor
from config_db.domain.services.readiness_gate import (
    INIT_INDICATOR,
    ReadinessGate,
    ReadinessState,
    channel_key,
    keyspace_channel,
)

__all__ = [
    "DEFAULT_SCAN_BATCH_SIZE",
    "INIT_INDICATOR",
    "BatchEngine",
    "BatchStats",
    "DirectAccessor",
    "ReadinessGate",
    "ReadinessState",
    "channel_key",
    "keyspace_channel",
]

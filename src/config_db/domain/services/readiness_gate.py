"""Startup readiness wait on the database's initialization sentinel.

Whoever populates the database at boot writes a sentinel key once it is
done. Readers that start earlier block here until that happens:

    WAITING --(sentinel present and non-empty)--> READY

The gate checks the sentinel once, and if it is missing subscribes to the
keyspace notification channel of exactly that key. Each notification for
the key triggers a re-check; notifications that arrive before the value
is usable (or unrelated messages such as subscribe confirmations) are
ignored.

There is no timeout and no cancellation: the call returns when the store
reports the sentinel, or raises StoreError when the subscription fails.
"""

from __future__ import annotations

import logging
from enum import Enum

from config_db.ports.outbound import StoreClient, StoreError, StoreSubscription

logger = logging.getLogger(__name__)

# Default sentinel written when CONFIG_DB has been fully populated
INIT_INDICATOR = "CONFIG_DB_INITIALIZED"


class ReadinessState(Enum):
    """Readiness gate state. READY is terminal."""
    WAITING = "waiting"
    READY = "ready"


def keyspace_channel(db_id: int, key: str) -> str:
    """Keyspace notification channel of a key in a logical database."""
    return f"__keyspace@{db_id}__:{key}"


def channel_key(channel: str) -> str:
    """Key named by a keyspace channel (text after the first ':')."""
    _, _, key = channel.partition(":")
    return key


class ReadinessGate:
    """Blocks until the store's initialization sentinel is set."""

    def __init__(
        self,
        client: StoreClient,
        db_id: int,
        init_indicator: str = INIT_INDICATOR,
    ) -> None:
        """Initialize the gate.

        Args:
            client: Connected store client.
            db_id: Numeric id of the logical database (keyspace channels
                are scoped per database id).
            init_indicator: Sentinel key name.
        """
        self._client = client
        self._db_id = db_id
        self._init_indicator = init_indicator
        self._state = ReadinessState.WAITING

    @property
    def state(self) -> ReadinessState:
        return self._state

    @property
    def pattern(self) -> str:
        """Subscription pattern for the sentinel's keyspace channel."""
        return keyspace_channel(self._db_id, self._init_indicator)

    def is_initialized(self) -> bool:
        """Check the sentinel once."""
        return bool(self._client.get(self._init_indicator))

    def wait(self) -> None:
        """Block until the sentinel is present and non-empty.

        The subscription is released on every exit path.

        Raises:
            StoreError: If the store or the subscription fails.
        """
        if self._state is ReadinessState.READY:
            return

        if self.is_initialized():
            self._state = ReadinessState.READY
            return

        logger.info(f"Waiting for {self._init_indicator} on database {self._db_id}")
        subscription = self._client.psubscribe(self.pattern)
        try:
            # Notifications only cover writes after psubscribe; re-check once
            if not self.is_initialized():
                self._listen(subscription)
        except StoreError:
            self._release(subscription)
            raise
        subscription.unsubscribe()

        self._state = ReadinessState.READY
        logger.info(f"Database {self._db_id} initialized")

    def _listen(self, subscription: StoreSubscription) -> None:
        """Consume events until a sentinel notification finds it set."""
        while True:
            event = subscription.next_event()
            if event.kind != "pmessage":
                continue
            if channel_key(event.channel) != self._init_indicator:
                continue
            if self.is_initialized():
                return

    def _release(self, subscription: StoreSubscription) -> None:
        try:
            subscription.unsubscribe()
        except StoreError as e:
            logger.warning(f"Failed to release subscription {self.pattern}: {e}")

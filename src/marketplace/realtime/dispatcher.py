"""Dispatcher: process-wide registry of live channels, keyed by user.

Each user has at most one channel; registering again replaces the previous
one. Delivery is best-effort: a message for a user without a channel is
dropped and logged, and a channel that fails to send is logged and skipped.
Nothing is queued for later.
"""

import threading
from dataclasses import dataclass

import structlog

from marketplace.realtime.channels import Channel

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Connection:
    user_id: str
    role: str | None
    channel: Channel


class Dispatcher:
    def __init__(self):
        self._lock = threading.RLock()
        self._by_user: dict[str, Connection] = {}
        self._by_channel: dict[str, Connection] = {}

    # -------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------
    def register(self, user_id, role: str | None, channel: Channel) -> None:
        user_id = str(user_id)
        connection = Connection(user_id=user_id, role=role, channel=channel)
        with self._lock:
            previous = self._by_user.get(user_id)
            if previous is not None:
                self._by_channel.pop(previous.channel.channel_id, None)
            holder = self._by_channel.get(channel.channel_id)
            if holder is not None and holder.user_id != user_id:
                self._by_user.pop(holder.user_id, None)
            self._by_user[user_id] = connection
            self._by_channel[channel.channel_id] = connection
        logger.info(
            "realtime_user_registered",
            user_id=user_id,
            role=role,
            channel_id=channel.channel_id,
            replaced=previous is not None,
        )

    def unregister_channel(self, channel_id: str) -> str | None:
        """Forget a channel. Returns the user it belonged to, if any."""
        with self._lock:
            connection = self._by_channel.pop(channel_id, None)
            if connection is None:
                return None
            current = self._by_user.get(connection.user_id)
            if current is not None and current.channel.channel_id == channel_id:
                del self._by_user[connection.user_id]
        logger.info("realtime_channel_unregistered", user_id=connection.user_id, channel_id=channel_id)
        return connection.user_id

    def unregister_user(self, user_id) -> bool:
        with self._lock:
            connection = self._by_user.pop(str(user_id), None)
            if connection is None:
                return False
            self._by_channel.pop(connection.channel.channel_id, None)
        logger.info("realtime_user_unregistered", user_id=str(user_id))
        return True

    def connected_count(self) -> int:
        with self._lock:
            return len(self._by_user)

    def user_for_channel(self, channel_id: str) -> str | None:
        with self._lock:
            connection = self._by_channel.get(channel_id)
            return connection.user_id if connection else None

    def channel_for_user(self, user_id) -> Channel | None:
        with self._lock:
            connection = self._by_user.get(str(user_id))
            return connection.channel if connection else None

    def is_connected(self, user_id) -> bool:
        with self._lock:
            return str(user_id) in self._by_user

    # -------------------------------------------------------------------
    # Emission
    # -------------------------------------------------------------------
    def emit_to_user(self, user_id, event: str, payload: dict) -> bool:
        """Send to one user. Returns False when the message was dropped."""
        with self._lock:
            connection = self._by_user.get(str(user_id))
        if connection is None:
            logger.info("realtime_user_not_connected", user_id=str(user_id), event_name=event)
            return False
        return self._deliver(connection, event, payload)

    def emit_to_role(self, role: str, event: str, payload: dict) -> int:
        """Broadcast to every channel tagged with the role. Returns the delivered count."""
        with self._lock:
            targets = [c for c in self._by_user.values() if c.role == role]
        return sum(self._deliver(connection, event, payload) for connection in targets)

    def emit_to_all(self, event: str, payload: dict) -> int:
        with self._lock:
            targets = list(self._by_user.values())
        return sum(self._deliver(connection, event, payload) for connection in targets)

    def _deliver(self, connection: Connection, event: str, payload: dict) -> bool:
        try:
            connection.channel.send(event, payload)
        except Exception as exc:
            logger.warning(
                "realtime_send_failed",
                user_id=connection.user_id,
                channel_id=connection.channel.channel_id,
                event_name=event,
                error=str(exc),
            )
            return False
        logger.debug("realtime_event_sent", user_id=connection.user_id, event_name=event)
        return True

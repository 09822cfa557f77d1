"""Notifier: shapes domain facts into real-time payloads.

Every payload carries ``type``, ``entity_id``, ``actor_id``, ``timestamp``
and ``message``; order payloads also carry ``order_id``.
"""

from datetime import UTC, datetime

from marketplace.realtime.dispatcher import Dispatcher


def _timestamp(value) -> str:
    value = value or datetime.now(UTC)
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


class Notifier:
    def __init__(self, dispatcher: Dispatcher):
        self.dispatcher = dispatcher

    def payload(self, event: str, entity_id, actor_id, message: str, timestamp=None, **fields) -> dict:
        payload = {
            "type": event,
            "entity_id": str(entity_id),
            "actor_id": str(actor_id) if actor_id is not None else None,
            "timestamp": _timestamp(timestamp),
            "message": message,
        }
        payload.update(fields)
        return payload

    def notify(self, user_id, event: str, entity_id, actor_id, message: str, timestamp=None, **fields) -> bool:
        return self.dispatcher.emit_to_user(
            user_id, event, self.payload(event, entity_id, actor_id, message, timestamp, **fields)
        )

    def notify_order(self, user_id, event: str, order_id, actor_id, message: str, timestamp=None, **fields) -> bool:
        return self.notify(
            user_id, event, order_id, actor_id, message, timestamp, order_id=str(order_id), **fields
        )

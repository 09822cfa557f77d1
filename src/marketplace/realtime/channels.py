"""Live channels the dispatcher writes to.

A channel is one open connection to one client. ``send`` must never block
the caller: domain event handlers run on request threads and only hand the
message over.
"""

import asyncio
from abc import ABC, abstractmethod
from uuid import uuid4

import structlog

logger = structlog.get_logger(__name__)

_CLOSE = object()


class Channel(ABC):
    """Port for a single live connection."""

    channel_id: str

    @abstractmethod
    def send(self, event: str, payload: dict) -> None:
        """Hand a message to the connection. Raises if the channel is unusable."""


class RecordingChannel(Channel):
    """Channel that keeps every message it was sent, for tests and diagnostics."""

    def __init__(self, channel_id: str | None = None):
        self.channel_id = channel_id or f"rec-{uuid4().hex[:12]}"
        self.sent: list[dict] = []
        self.should_fail = False

    def configure(self, should_fail: bool = False):
        self.should_fail = should_fail

    def send(self, event: str, payload: dict) -> None:
        if self.should_fail:
            raise ConnectionError(f"Channel {self.channel_id} is closed")
        self.sent.append({"event": event, "payload": payload})

    def events(self) -> list[str]:
        return [message["event"] for message in self.sent]

    def last(self, event: str) -> dict | None:
        """Payload of the most recent message with this event name."""
        for message in reversed(self.sent):
            if message["event"] == event:
                return message["payload"]
        return None

    def reset(self):
        self.sent.clear()
        self.should_fail = False


class WebSocketChannel(Channel):
    """Channel backed by a WebSocket connection.

    Messages are queued onto the connection's event loop from any thread;
    ``pump`` drains the queue and writes to the socket until ``close``.
    """

    def __init__(self, websocket, loop: asyncio.AbstractEventLoop | None = None):
        self.channel_id = f"ws-{uuid4().hex[:12]}"
        self.websocket = websocket
        self.loop = loop or asyncio.get_running_loop()
        self.queue: asyncio.Queue = asyncio.Queue()

    def send(self, event: str, payload: dict) -> None:
        self.loop.call_soon_threadsafe(self.queue.put_nowait, {"event": event, "data": payload})

    def close(self) -> None:
        self.loop.call_soon_threadsafe(self.queue.put_nowait, _CLOSE)

    async def pump(self) -> None:
        while True:
            message = await self.queue.get()
            if message is _CLOSE:
                return
            try:
                await self.websocket.send_json(message)
            except Exception as exc:
                logger.warning("websocket_send_failed", channel_id=self.channel_id, error=str(exc))
                return

"""WebSocket endpoint for live notifications.

Protocol (JSON text frames):
    client → {"type": "register", "user_id": "...", "role": "requester"|"fulfiller"}
    server → {"event": "registered", "data": {"user_id": ..., "role": ...}}
    client → {"type": "ping"}
    server → {"event": "pong", "data": {}}

Domain notifications arrive as {"event": <name>, "data": <payload>}.
The registration ends when the socket closes.
"""

import asyncio
import contextlib
import json

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from marketplace.realtime import get_dispatcher
from marketplace.realtime.channels import WebSocketChannel

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def live_channel(websocket: WebSocket) -> None:
    await websocket.accept()
    dispatcher = get_dispatcher()
    channel = WebSocketChannel(websocket, asyncio.get_running_loop())
    sender = asyncio.create_task(channel.pump())
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                channel.send("error", {"message": "Messages must be JSON objects"})
                continue
            if not isinstance(message, dict):
                channel.send("error", {"message": "Messages must be JSON objects"})
                continue

            kind = message.get("type")
            if kind == "register":
                user_id = message.get("user_id")
                if not user_id:
                    channel.send("error", {"message": "user_id is required"})
                    continue
                role = message.get("role")
                dispatcher.register(str(user_id), role, channel)
                channel.send("registered", {"user_id": str(user_id), "role": role})
            elif kind == "ping":
                channel.send("pong", {})
            else:
                channel.send("error", {"message": f"Unknown message type: {kind}"})
    except WebSocketDisconnect:
        logger.debug("websocket_disconnected", channel_id=channel.channel_id)
    finally:
        dispatcher.unregister_channel(channel.channel_id)
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender

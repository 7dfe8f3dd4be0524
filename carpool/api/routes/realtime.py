"""
Chat relay (WebSocket)
======================

WS /ws

Client frames are ``{"event": ..., "data": ...}``:

* ``join-ride``    -- data is a ride id (number or string); the connection
  joins that room and gets ``{"event": "joined", "data": {"ride_id": ...}}`` back.
* ``send-message`` -- data is an object with ``ride_id``; it is relayed as
  ``{"event": "receive-message", "data": <data>}`` to every *other* member
  of the room.

Binary frames, invalid JSON and bad ride ids get an ``error`` frame back;
the connection stays open.

The relay neither authenticates nor persists; ``POST /api/chat/{ride_id}``
is the authoritative write path.
"""

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from carpool.api.schemas import RelayFrame

logger = logging.getLogger(__name__)

router = APIRouter(tags=["relay"])

JOIN_EVENT = "join-ride"
SEND_EVENT = "send-message"
RECEIVE_EVENT = "receive-message"


async def _error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"event": "error", "data": {"message": message}})


async def _receive_frame(websocket: WebSocket) -> RelayFrame:
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000))
    text = message.get("text")
    if text is None:
        raise ValueError("binary frames are not accepted")
    return RelayFrame.model_validate(json.loads(text))


def _room_id(value: Any) -> Optional[str]:
    """Room name for a ride id given as a number or a non-empty string."""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        return None
    return str(value) if value != "" else None


@router.websocket("/ws")
async def relay_socket(websocket: WebSocket):
    rooms = websocket.app.state.rooms
    relay = websocket.app.state.relay

    await websocket.accept()
    connection_id = rooms.connect(websocket)
    logger.info("User connected: %s", connection_id)

    try:
        while True:
            try:
                frame = await _receive_frame(websocket)
            except (ValueError, ValidationError):
                await _error(websocket, "Malformed frame")
                continue

            if frame.event == JOIN_EVENT:
                room = _room_id(frame.data)
                if room is None:
                    await _error(websocket, "join-ride requires a ride id")
                    continue
                rooms.join(connection_id, room)
                logger.info("User %s joined ride %s", connection_id, room)
                await websocket.send_json({"event": "joined", "data": {"ride_id": room}})

            elif frame.event == SEND_EVENT:
                room = _room_id(frame.data.get("ride_id")) if isinstance(frame.data, dict) else None
                if room is None:
                    await _error(websocket, "send-message requires data.ride_id")
                    continue
                await relay.publish(
                    room,
                    {"event": RECEIVE_EVENT, "data": frame.data},
                    sender=connection_id,
                )

            else:
                await _error(websocket, f"Unknown event: {frame.event}")
    except WebSocketDisconnect:
        pass
    finally:
        rooms.disconnect(connection_id)
        logger.info("User disconnected: %s", connection_id)

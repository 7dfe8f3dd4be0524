"""
In-process room registry for the chat relay.

A room is named by a ride id.  Connections get a random id on connect and
may sit in any number of rooms; disconnecting removes them from all.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from typing import Any, Optional

from starlette.websockets import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


class RoomManager:
    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}
        self._rooms: dict[str, set[str]] = defaultdict(set)

    def connect(self, websocket: WebSocket) -> str:
        connection_id = uuid.uuid4().hex
        self._connections[connection_id] = websocket
        return connection_id

    def join(self, connection_id: str, room: str) -> None:
        if connection_id not in self._connections:
            raise KeyError(f"Unknown connection: {connection_id}")
        self._rooms[room].add(connection_id)

    def members(self, room: str) -> set[str]:
        return set(self._rooms.get(room, ()))

    def rooms_of(self, connection_id: str) -> set[str]:
        return {room for room, ids in self._rooms.items() if connection_id in ids}

    def disconnect(self, connection_id: str) -> None:
        self._connections.pop(connection_id, None)
        for room in list(self._rooms):
            self._rooms[room].discard(connection_id)
            if not self._rooms[room]:
                del self._rooms[room]

    async def broadcast(
        self, room: str, message: Any, exclude: Optional[str] = None
    ) -> int:
        """Send *message* to every member of *room* except *exclude*.

        Returns the number of sockets written to.  A socket that fails on
        send is dropped from the registry.
        """
        delivered = 0
        for connection_id in self.members(room):
            if connection_id == exclude:
                continue
            websocket = self._connections.get(connection_id)
            if websocket is None:
                continue
            try:
                await websocket.send_json(message)
                delivered += 1
            except (WebSocketDisconnect, RuntimeError):
                logger.warning("Dropping dead connection %s", connection_id)
                self.disconnect(connection_id)
        return delivered

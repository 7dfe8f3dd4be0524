"""
Chat Relay Fan-out
==================

``LocalRelay`` delivers straight into this process's ``RoomManager``.

``RedisRelay`` publishes every payload to the Redis channel
``ride:<room>`` and runs a background listener (started / stopped with
the application lifespan) that pattern-subscribes to ``ride:*`` and
delivers whatever arrives to local room members.  Every API process runs
its own listener, so a message sent to one process reaches sockets held
by all of them.  Connection ids are UUIDs, so excluding the sender works
across processes.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

import redis.asyncio as aioredis

from carpool.infrastructure.redis_client import create_redis
from carpool.realtime.rooms import RoomManager

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "ride:"


class LocalRelay:
    def __init__(self, rooms: RoomManager):
        self.rooms = rooms

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    async def publish(self, room: str, message: Any, sender: Optional[str] = None) -> None:
        await self.rooms.broadcast(room, message, exclude=sender)


class RedisRelay:
    def __init__(self, rooms: RoomManager, client: aioredis.Redis):
        self.rooms = rooms
        self.redis = client
        self._task: asyncio.Task | None = None
        self._stop_event: asyncio.Event | None = None

    # ── Public API ────────────────────────────────────────────────

    async def start(self) -> None:
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._loop())
        logger.info("Relay listener started")

    async def stop(self) -> None:
        if self._stop_event:
            self._stop_event.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        await self.redis.aclose()
        logger.info("Relay listener stopped")

    async def publish(self, room: str, message: Any, sender: Optional[str] = None) -> None:
        envelope = {"room": room, "sender": sender, "message": message}
        await self.redis.publish(f"{CHANNEL_PREFIX}{room}", json.dumps(envelope))

    async def deliver(self, raw: str) -> int:
        """Hand one published envelope to local room members."""
        try:
            envelope = json.loads(raw)
            room = envelope["room"]
        except (ValueError, KeyError, TypeError):
            logger.warning("Discarding malformed relay envelope: %r", raw)
            return 0
        return await self.rooms.broadcast(
            room, envelope.get("message"), exclude=envelope.get("sender")
        )

    # ── Internals ─────────────────────────────────────────────────

    async def _loop(self) -> None:
        assert self._stop_event is not None
        while not self._stop_event.is_set():
            try:
                await self._listen()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Relay listener failed; reconnecting")
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=1)
                except asyncio.TimeoutError:
                    pass  # retry

    async def _listen(self) -> None:
        pubsub = self.redis.pubsub()
        await pubsub.psubscribe(f"{CHANNEL_PREFIX}*")
        try:
            async for item in pubsub.listen():
                if item.get("type") == "pmessage":
                    await self.deliver(item["data"])
        finally:
            await pubsub.aclose()


def build_relay(rooms: RoomManager, redis_url: Optional[str]):
    if not redis_url:
        return LocalRelay(rooms)
    return RedisRelay(rooms, create_redis(redis_url))

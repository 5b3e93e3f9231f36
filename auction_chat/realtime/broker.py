from __future__ import annotations

import asyncio
import itertools
import json
import logging
from dataclasses import dataclass, field

from starlette.websockets import WebSocket

from . import stomp

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Connection:
    websocket: WebSocket
    session_id: str
    subscriptions: dict[str, str] = field(default_factory=dict)

    async def send(self, frame: stomp.Frame) -> None:
        await self.websocket.send_text(stomp.encode(frame))


class TopicBroker:
    """In-process destination -> subscriber table for /topic broadcasts."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._subscribers: dict[str, dict[tuple[Connection, str], None]] = {}
        self._message_ids = itertools.count(1)
        self._session_ids = itertools.count(1)

    def new_session_id(self) -> str:
        return f"session-{next(self._session_ids)}"

    async def subscribe(self, conn: Connection, subscription_id: str, destination: str) -> None:
        async with self._lock:
            previous = conn.subscriptions.get(subscription_id)
            if previous is not None:
                self._subscribers.get(previous, {}).pop((conn, subscription_id), None)
            conn.subscriptions[subscription_id] = destination
            self._subscribers.setdefault(destination, {})[(conn, subscription_id)] = None

    async def unsubscribe(self, conn: Connection, subscription_id: str) -> None:
        async with self._lock:
            destination = conn.subscriptions.pop(subscription_id, None)
            if destination is None:
                return
            subscribers = self._subscribers.get(destination, {})
            subscribers.pop((conn, subscription_id), None)
            if not subscribers:
                self._subscribers.pop(destination, None)

    async def drop(self, conn: Connection) -> None:
        for subscription_id in list(conn.subscriptions):
            await self.unsubscribe(conn, subscription_id)

    async def subscriber_count(self, destination: str) -> int:
        async with self._lock:
            return len(self._subscribers.get(destination, {}))

    async def publish(self, destination: str, payload: dict) -> int:
        async with self._lock:
            targets = list(self._subscribers.get(destination, {}))
        body = json.dumps(payload, default=str, ensure_ascii=False)
        delivered = 0
        for conn, subscription_id in targets:
            frame = stomp.Frame(
                "MESSAGE",
                {
                    "destination": destination,
                    "subscription": subscription_id,
                    "message-id": str(next(self._message_ids)),
                    "content-type": "application/json",
                },
                body,
            )
            try:
                await conn.send(frame)
                delivered += 1
            except Exception:
                logger.warning("Dropping subscriber %s on %s after send failure", conn.session_id, destination)
                await self.drop(conn)
        return delivered

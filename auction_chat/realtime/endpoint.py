from __future__ import annotations

import json
import logging
from typing import Callable

from fastapi import APIRouter, Depends
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.websockets import WebSocket, WebSocketDisconnect

from ..config import get_settings
from ..constants import CHAT_TOPIC_PREFIX
from ..db import SessionLocal
from ..errors import AppError, ErrorStatus
from ..schemas.chat import ChatMessagePayload
from ..services import chats as chat_service
from ..services import messages as message_service
from . import stomp
from .broker import Connection, TopicBroker
from .identity import Principal, bind_identity

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()

TOPIC_PREFIX = "/topic"
APP_CHAT_PREFIX = "/app/chats/"
SUPPORTED_SUBPROTOCOLS = ("v12.stomp", "v11.stomp", "v10.stomp")
# ids are stored in 32-bit INTEGER columns
MAX_ROW_ID = 2**31 - 1


def get_session_factory() -> Callable[[], Session]:
    return SessionLocal


def get_broker(websocket: WebSocket) -> TopicBroker:
    return websocket.app.state.broker


def _run_with_session(session_factory: Callable[[], Session], fn, *args):
    db = session_factory()
    try:
        return fn(db, *args)
    finally:
        db.close()


def _parse_row_id(segment: str) -> int | None:
    try:
        value = int(segment)
    except ValueError:
        return None
    return value if 0 < value <= MAX_ROW_ID else None


def parse_chat_topic(destination: str) -> int | None:
    """``/topic/chats/12`` (optionally with a trailing path or query) -> 12."""
    path = destination.split("?", 1)[0]
    if not path.startswith(CHAT_TOPIC_PREFIX):
        return None
    return _parse_row_id(path[len(CHAT_TOPIC_PREFIX):].split("/", 1)[0].strip())


def parse_send_destination(destination: str) -> int | None:
    """``/app/chats/12/send`` -> 12."""
    if not destination.startswith(APP_CHAT_PREFIX) or not destination.endswith("/send"):
        return None
    return _parse_row_id(destination[len(APP_CHAT_PREFIX):-len("/send")])


def _user_id(principal: Principal | None) -> int:
    if principal is None:
        raise AppError(ErrorStatus.UNAUTHORIZED)
    user_id = _parse_row_id(principal.name)
    if user_id is None:
        raise AppError(ErrorStatus.BAD_REQUEST, f"Invalid user id {principal.name!r}")
    return user_id


class StompSession:
    """Per-connection frame pipeline; frames are handled strictly one at a time."""

    def __init__(self, conn: Connection, broker: TopicBroker, session_factory: Callable[[], Session]):
        self.conn = conn
        self.broker = broker
        self.session_factory = session_factory
        self.principal: Principal | None = None
        self.closed = False

    async def handle_text(self, text: str) -> None:
        try:
            frame = stomp.decode(text)
        except stomp.FrameError as exc:
            await self.conn.send(stomp.error_frame(ErrorStatus.BAD_REQUEST.code, str(exc)))
            return
        if frame is None:
            return

        self.principal = bind_identity(frame.headers, self.principal, settings.realtime_user_header)
        receipt = frame.headers.get("receipt")
        try:
            await self.dispatch(frame)
        except AppError as exc:
            await self.conn.send(stomp.error_frame(exc.code, exc.message, receipt))
            return
        except WebSocketDisconnect:
            raise
        except Exception:
            logger.exception("Realtime %s frame failed on %s", frame.command, self.conn.session_id)
            status = ErrorStatus.INTERNAL_SERVER_ERROR
            await self.conn.send(stomp.error_frame(status.code, status.message, receipt))
            return
        if receipt and frame.command not in {"CONNECT", "STOMP"}:
            await self.conn.send(stomp.Frame("RECEIPT", {"receipt-id": receipt}))

    async def dispatch(self, frame: stomp.Frame) -> None:
        command = frame.command
        if command in {"CONNECT", "STOMP"}:
            await self.on_connect(frame)
        elif command == "SUBSCRIBE":
            await self.on_subscribe(frame)
        elif command == "UNSUBSCRIBE":
            await self.broker.unsubscribe(self.conn, frame.headers.get("id", ""))
        elif command == "SEND":
            await self.on_send(frame)
        elif command == "DISCONNECT":
            self.closed = True
        elif command in {"ACK", "NACK", "BEGIN", "COMMIT", "ABORT"}:
            return
        else:
            raise AppError(ErrorStatus.BAD_REQUEST, f"Unexpected command {command}")

    async def on_connect(self, frame: stomp.Frame) -> None:
        headers = {"version": "1.2", "heart-beat": "0,0", "session": self.conn.session_id}
        if self.principal is not None:
            headers["user-name"] = self.principal.name
        await self.conn.send(stomp.Frame("CONNECTED", headers))

    async def on_subscribe(self, frame: stomp.Frame) -> None:
        destination = frame.headers.get("destination")
        subscription_id = frame.headers.get("id")
        if not destination or not subscription_id:
            raise AppError(ErrorStatus.BAD_REQUEST, "SUBSCRIBE requires destination and id headers")
        if not destination.startswith(TOPIC_PREFIX):
            raise AppError(ErrorStatus.BAD_REQUEST, f"Cannot subscribe to {destination}")
        await self.broker.subscribe(self.conn, subscription_id, destination)
        logger.debug(
            "%s subscribed to %s (%s subscribers)",
            self.conn.session_id,
            destination,
            await self.broker.subscriber_count(destination),
        )

        chat_id = parse_chat_topic(destination)
        if chat_id is None or self.principal is None:
            return
        # mark-read is best effort; the subscription stands whatever happens here
        try:
            reader_id = _user_id(self.principal)
            await run_in_threadpool(_run_with_session, self.session_factory, chat_service.mark_room_read, reader_id, chat_id)
            logger.debug("User %s subscribed to %s; marked unread as read", reader_id, destination)
        except AppError as exc:
            logger.info("Mark-read on subscribe skipped for %s: %s", destination, exc.message)
        except Exception:
            logger.warning("Mark-read on subscribe failed for %s", destination, exc_info=True)

    async def on_send(self, frame: stomp.Frame) -> None:
        destination = frame.headers.get("destination", "")
        chat_id = parse_send_destination(destination)
        if chat_id is None:
            raise AppError(ErrorStatus.NOT_FOUND, f"No handler for {destination}")
        sender_id = _user_id(self.principal)
        try:
            payload = ChatMessagePayload.model_validate(json.loads(frame.body or "{}"))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise AppError(ErrorStatus.BAD_REQUEST, "Invalid message payload") from exc

        saved = await run_in_threadpool(
            _run_with_session,
            self.session_factory,
            message_service.send_message,
            sender_id,
            chat_id,
            payload.content,
            payload.type,
        )
        if saved.ignored:
            return
        await self.broker.publish(f"{CHAT_TOPIC_PREFIX}{chat_id}", saved.model_dump(mode="json"))


@router.websocket(settings.realtime_endpoint)
async def stomp_endpoint(
    websocket: WebSocket,
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    broker = get_broker(websocket)
    offered = websocket.scope.get("subprotocols") or []
    subprotocol = next((proto for proto in SUPPORTED_SUBPROTOCOLS if proto in offered), None)
    await websocket.accept(subprotocol=subprotocol)

    conn = Connection(websocket=websocket, session_id=broker.new_session_id())
    session = StompSession(conn, broker, session_factory)
    try:
        while not session.closed:
            text = await websocket.receive_text()
            await session.handle_text(text)
    except WebSocketDisconnect:
        logger.info("Realtime connection %s disconnected", conn.session_id)
    except Exception:
        logger.exception("Realtime connection %s failed", conn.session_id)
    finally:
        await broker.drop(conn)
    if session.closed:
        await websocket.close()

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..config import get_settings
from ..constants import NEW_MESSAGE_ALARM_PREFIX, MessageType
from ..errors import Conflict, ErrorStatus
from ..models import Message
from ..models._time import utcnow
from ..schemas.chat import MessageResponse
from . import alarms as alarm_service
from . import blocks as block_service
from .chats import require_participant

logger = logging.getLogger(__name__)


def alarm_preview(content: str | None, limit: int | None = None) -> str:
    limit = limit if limit is not None else get_settings().message_preview_length
    content = content or ""
    return content[:limit] + "..." if len(content) > limit else content


def to_response(message: Message) -> MessageResponse:
    return MessageResponse(
        message_id=message.id,
        chat_id=message.chat_id,
        sender_id=message.sender_id,
        content=message.content,
        type=message.type,
        read=message.is_read,
        sent_at=message.sent_at,
    )


def send_message(
    db: Session,
    sender_id: int,
    room_id: int,
    content: str,
    message_type: MessageType = MessageType.TEXT,
) -> MessageResponse:
    """Store a message, bump the room's activity and alarm the recipient in one transaction."""
    room = require_participant(db, sender_id, room_id)
    if room.is_closed:
        raise Conflict(ErrorStatus.CHAT_CLOSED)

    receiver_id = room.partner_of(sender_id)
    if block_service.either_blocked(db, sender_id, receiver_id):
        logger.info("Dropping message in chat %s: block between %s and %s", room_id, sender_id, receiver_id)
        return MessageResponse(chat_id=room_id, sender_id=sender_id, ignored=True)

    sent_at = utcnow()
    message = Message(
        chat_id=room.id,
        sender_id=sender_id,
        content=content,
        type=message_type,
        sent_at=sent_at,
        is_read=False,
        is_deleted=False,
    )
    db.add(message)
    room.last_message_at = sent_at
    if receiver_id != sender_id:
        alarm_service.create_alarm(
            db,
            receiver_id,
            NEW_MESSAGE_ALARM_PREFIX + alarm_preview(content),
            commit=False,
        )
    db.flush()
    db.commit()
    return to_response(message)

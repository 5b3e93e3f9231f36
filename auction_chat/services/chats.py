from __future__ import annotations

import logging
from math import ceil

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ErrorStatus, Forbidden, NotFound, ValidationFailed
from ..models import ChatRoom, Item
from ..models._time import utcnow
from ..schemas.chat import (
    BlockResponse,
    BlockStatusResponse,
    ChatEnterResponse,
    MessageBrief,
    ReadAllResponse,
)
from . import blocks as block_service
from . import chat_store

logger = logging.getLogger(__name__)


def get_or_create_room(db: Session, item_id: int, seller_id: int, buyer_id: int) -> tuple[ChatRoom, bool]:
    """Return the room for the triple, creating it when absent.

    The unique constraint on (item, seller, buyer) is the arbiter: if another
    transaction inserts the same triple between our lookup and our insert, the
    savepoint is rolled back and the winner's room is returned instead.
    """
    existing = chat_store.find_room(db, item_id, seller_id, buyer_id)
    if existing:
        return existing, False

    room = ChatRoom(item_id=item_id, seller_id=seller_id, buyer_id=buyer_id, last_message_at=utcnow())
    try:
        with db.begin_nested():
            db.add(room)
    except IntegrityError:
        logger.info("Chat for item=%s seller=%s buyer=%s created concurrently; reusing", item_id, seller_id, buyer_id)
        existing = chat_store.find_room(db, item_id, seller_id, buyer_id)
        if existing is None:
            raise
        return existing, False
    db.commit()
    logger.info("Created chat %s for item=%s seller=%s buyer=%s", room.id, item_id, seller_id, buyer_id)
    return room, True


def create_room_for_item_winner(db: Session, item_id: int) -> tuple[ChatRoom, bool]:
    item = db.query(Item).filter(Item.id == item_id).one_or_none()
    if not item:
        raise NotFound(ErrorStatus.ITEM_NOT_FOUND)
    if item.seller_id is None or item.winner_id is None:
        raise ValidationFailed(ErrorStatus.CHAT_NO_WINNER)
    return get_or_create_room(db, item.id, item.seller_id, item.winner_id)


def require_participant(db: Session, actor_id: int, room_id: int) -> ChatRoom:
    room = chat_store.get_room(db, room_id)
    if not room:
        raise NotFound(ErrorStatus.CHAT_NOT_FOUND)
    if not room.is_participant(actor_id):
        raise Forbidden(ErrorStatus.CHAT_NOT_PARTICIPANT)
    return room


def exit_room(db: Session, actor_id: int, room_id: int) -> ChatRoom:
    room = require_participant(db, actor_id, room_id)
    now = utcnow()
    if room.seller_id == actor_id:
        room.seller_deleted_at = now
    else:
        room.buyer_deleted_at = now
    db.commit()
    return room


def mark_room_read(db: Session, actor_id: int, room_id: int) -> ReadAllResponse:
    require_participant(db, actor_id, room_id)
    updated = chat_store.mark_room_read(db, room_id, actor_id)
    db.commit()
    return ReadAllResponse(
        chat_id=room_id,
        reader_id=actor_id,
        updated_count=updated,
        unread_count_after=chat_store.unread_count_for_viewer(db, room_id, actor_id),
    )


def enter_room(db: Session, actor_id: int, room_id: int, page: int, size: int) -> ChatEnterResponse:
    room = require_participant(db, actor_id, room_id)
    can_send = not room.is_closed
    read_state = mark_room_read(db, actor_id, room_id)

    page, size = chat_store.clamp_page(page, size)
    messages, total = chat_store.page_messages(db, room_id, page, size)
    return ChatEnterResponse(
        **read_state.model_dump(),
        page=page,
        size=size,
        total_elements=total,
        total_pages=ceil(total / size) if total else 0,
        messages=[
            MessageBrief(
                message_id=message.id,
                sender_id=message.sender_id,
                content=message.content,
                type=message.type,
                read=message.is_read,
                sent_at=message.sent_at,
            )
            for message in messages
        ],
        can_send=can_send,
    )


def block_partner(db: Session, actor_id: int, room_id: int) -> BlockResponse:
    room = require_participant(db, actor_id, room_id)
    partner_id = room.partner_of(actor_id)
    if block_service.block(db, actor_id, partner_id):
        db.commit()
    return BlockResponse(blocked_user_id=partner_id, blocked=True)


def unblock_partner(db: Session, actor_id: int, room_id: int) -> BlockResponse:
    room = require_participant(db, actor_id, room_id)
    partner_id = room.partner_of(actor_id)
    if block_service.unblock(db, actor_id, partner_id):
        db.commit()
    return BlockResponse(blocked_user_id=partner_id, blocked=False)


def block_status(db: Session, actor_id: int, room_id: int) -> BlockStatusResponse:
    room = require_participant(db, actor_id, room_id)
    partner_id = room.partner_of(actor_id)
    return BlockStatusResponse(
        i_blocked_partner=block_service.is_blocked(db, actor_id, partner_id),
        partner_blocked_me=block_service.is_blocked(db, partner_id, actor_id),
    )

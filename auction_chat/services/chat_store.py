"""Query helpers over chat rooms and their messages.

Every function takes the caller's ``Session`` and never commits; transaction
boundaries belong to the service layer.
"""

from __future__ import annotations

from sqlalchemy import and_, case, func, or_
from sqlalchemy.orm import Session

from ..models import ChatRoom, Message


def clamp_page(page: int, size: int, max_size: int = 100) -> tuple[int, int]:
    return max(page, 0), max(1, min(size, max_size))


def find_room(db: Session, item_id: int, seller_id: int, buyer_id: int) -> ChatRoom | None:
    return (
        db.query(ChatRoom)
        .filter(
            ChatRoom.item_id == item_id,
            ChatRoom.seller_id == seller_id,
            ChatRoom.buyer_id == buyer_id,
        )
        .one_or_none()
    )


def get_room(db: Session, room_id: int) -> ChatRoom | None:
    return db.query(ChatRoom).filter(ChatRoom.id == room_id).one_or_none()


def _visible_to(user_id: int):
    return or_(
        and_(ChatRoom.seller_id == user_id, ChatRoom.seller_deleted_at.is_(None)),
        and_(ChatRoom.buyer_id == user_id, ChatRoom.buyer_deleted_at.is_(None)),
    )


def list_room_ids_for_user(db: Session, user_id: int, page: int, size: int) -> list[int]:
    page, size = clamp_page(page, size)
    rows = (
        db.query(ChatRoom.id)
        .filter(_visible_to(user_id))
        .order_by(ChatRoom.last_message_at.desc(), ChatRoom.id.desc())
        .offset(page * size)
        .limit(size)
        .all()
    )
    return [room_id for (room_id,) in rows]


def latest_messages(db: Session, room_ids: list[int]) -> dict[int, Message]:
    if not room_ids:
        return {}
    activity_subq = (
        db.query(
            Message.chat_id.label("chat_id"),
            func.max(Message.sent_at).label("last_sent_at"),
        )
        .filter(Message.chat_id.in_(room_ids))
        .group_by(Message.chat_id)
        .subquery()
    )
    rows = (
        db.query(Message)
        .join(
            activity_subq,
            (Message.chat_id == activity_subq.c.chat_id) & (Message.sent_at == activity_subq.c.last_sent_at),
        )
        .all()
    )
    latest: dict[int, Message] = {}
    for message in rows:
        # several messages can share the newest sent_at; keep the last inserted
        current = latest.get(message.chat_id)
        if current is None or message.id > current.id:
            latest[message.chat_id] = message
    return latest


def latest_message(db: Session, room_id: int) -> Message | None:
    return (
        db.query(Message)
        .filter(Message.chat_id == room_id)
        .order_by(Message.sent_at.desc(), Message.id.desc())
        .first()
    )


def _unread_filter(viewer_id: int):
    return and_(Message.is_read.is_(False), Message.sender_id != viewer_id)


def unread_counts(db: Session, room_ids: list[int], viewer_id: int) -> dict[int, int]:
    if not room_ids:
        return {}
    rows = (
        db.query(
            Message.chat_id,
            func.sum(case((_unread_filter(viewer_id), 1), else_=0)),
        )
        .filter(Message.chat_id.in_(room_ids))
        .group_by(Message.chat_id)
        .all()
    )
    return {chat_id: int(count or 0) for chat_id, count in rows}


def unread_count_for_viewer(db: Session, room_id: int, viewer_id: int) -> int:
    return (
        db.query(func.count(Message.id))
        .filter(Message.chat_id == room_id, _unread_filter(viewer_id))
        .scalar()
        or 0
    )


def mark_room_read(db: Session, room_id: int, reader_id: int) -> int:
    """Flag every unread message the reader received in the room; returns rows changed."""
    return (
        db.query(Message)
        .filter(Message.chat_id == room_id, _unread_filter(reader_id))
        .update({Message.is_read: True}, synchronize_session="fetch")
    )


def page_messages(db: Session, room_id: int, page: int, size: int) -> tuple[list[Message], int]:
    page, size = clamp_page(page, size)
    query = db.query(Message).filter(Message.chat_id == room_id)
    total = query.count()
    messages = (
        query.order_by(Message.sent_at.asc(), Message.id.asc())
        .offset(page * size)
        .limit(size)
        .all()
    )
    return messages, total

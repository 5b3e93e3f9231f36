"""Chat-list aggregation.

One page of rooms is summarised with a fixed number of queries regardless of
page size: room ids, latest messages, unread counts, partners, items and the
viewer's block list are each fetched once for the whole page.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from ..constants import IMAGE_PREVIEW_TEXT, URL_PREVIEW_TEXT, MessageType
from ..models import ChatRoom, Item, Message, User
from ..schemas.chat import ChatSummaryRow, ItemSummary, LastMessageSummary, PartnerSummary
from . import blocks as block_service
from . import chat_store


def preview_text(message: Message) -> str:
    if message.type == MessageType.IMAGE:
        return IMAGE_PREVIEW_TEXT
    if message.type == MessageType.URL:
        return URL_PREVIEW_TEXT
    return message.content


def build_chat_summaries(db: Session, viewer_id: int, page: int, size: int) -> list[ChatSummaryRow]:
    room_ids = chat_store.list_room_ids_for_user(db, viewer_id, page, size)
    if not room_ids:
        return []

    rooms = {room.id: room for room in db.query(ChatRoom).filter(ChatRoom.id.in_(room_ids)).all()}
    last_message_map = chat_store.latest_messages(db, room_ids)
    unread_map = chat_store.unread_counts(db, room_ids, viewer_id)

    partner_ids = {room.partner_of(viewer_id) for room in rooms.values()}
    item_ids = {room.item_id for room in rooms.values()}
    partners = {user.id: user for user in db.query(User).filter(User.id.in_(partner_ids)).all()}
    items = {item.id: item for item in db.query(Item).filter(Item.id.in_(item_ids)).all()}
    blocked = block_service.blocked_user_ids(db, viewer_id)

    rows: list[ChatSummaryRow] = []
    for room_id in room_ids:
        room = rooms[room_id]
        partner_id = room.partner_of(viewer_id)
        partner = partners.get(partner_id)
        item = items.get(room.item_id)
        last = last_message_map.get(room_id)
        rows.append(
            ChatSummaryRow(
                chat_id=room_id,
                partner=PartnerSummary(
                    id=partner_id,
                    nickname=partner.nickname if partner else None,
                    profile_image=partner.profile_image if partner else None,
                ),
                last_message=LastMessageSummary(
                    content=preview_text(last),
                    type=last.type,
                    sent_at=last.sent_at,
                )
                if last
                else None,
                unread_count=unread_map.get(room_id, 0),
                item=ItemSummary(
                    item_id=item.id,
                    title=item.title,
                    image=item.image_url,
                    winning_price=item.current_price,
                )
                if item
                else None,
                i_blocked_partner=partner_id in blocked,
            )
        )
    return rows

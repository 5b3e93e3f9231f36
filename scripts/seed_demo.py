"""Seed two users, a closed auction item and its chat into the configured database."""

from auction_chat.constants import Category, TradeMethod
from auction_chat.db import SessionLocal
from auction_chat.models import Item, User
from auction_chat.services.chats import get_or_create_room
from auction_chat.services.messages import send_message

SELLER_NICKNAME = "demo-seller"
BUYER_NICKNAME = "demo-buyer"
ITEM_TITLE = "Demo vintage camera"


def ensure_user(session, nickname: str) -> User:
    user = session.query(User).filter(User.nickname == nickname).one_or_none()
    if user:
        return user
    user = User(nickname=nickname)
    session.add(user)
    session.flush()
    return user


def ensure_item(session, seller: User, winner: User) -> Item:
    item = session.query(Item).filter(Item.title == ITEM_TITLE, Item.seller_id == seller.id).one_or_none()
    if item is None:
        item = Item(
            seller_id=seller.id,
            winner_id=winner.id,
            title=ITEM_TITLE,
            current_price=42000,
            category=Category.DIGITAL,
            trade_method=TradeMethod.IN_PERSON,
        )
        session.add(item)
        session.flush()
    return item


def main() -> None:
    session = SessionLocal()
    try:
        seller = ensure_user(session, SELLER_NICKNAME)
        buyer = ensure_user(session, BUYER_NICKNAME)
        item = ensure_item(session, seller, buyer)
        session.commit()
        room, created = get_or_create_room(session, item.id, seller.id, buyer.id)
        if created:
            send_message(session, seller.id, room.id, "Thanks for the winning bid!")
        print("Demo data ready:")
        print(f"  Seller user-id: {seller.id}")
        print(f"  Buyer user-id: {buyer.id}")
        print(f"  Chat id: {room.id}")
    finally:
        session.close()


if __name__ == "__main__":
    main()

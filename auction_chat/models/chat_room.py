from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from . import Base
from ._time import utcnow


class ChatRoom(Base):
    __tablename__ = "chat"
    __table_args__ = (
        UniqueConstraint("item_id", "seller_id", "buyer_id", name="uk_chat_item_seller_buyer"),
    )

    id = Column(Integer, primary_key=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    buyer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    last_message_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    seller_deleted_at = Column(DateTime, nullable=True)
    buyer_deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=True, onupdate=utcnow)

    seller = relationship("User", foreign_keys=[seller_id])
    buyer = relationship("User", foreign_keys=[buyer_id])
    item = relationship("Item")
    messages = relationship("Message", back_populates="room", cascade="all, delete-orphan", passive_deletes=True)

    def is_participant(self, user_id: int) -> bool:
        return user_id in (self.seller_id, self.buyer_id)

    def partner_of(self, user_id: int) -> int:
        return self.buyer_id if user_id == self.seller_id else self.seller_id

    @property
    def is_closed(self) -> bool:
        return self.seller_deleted_at is not None or self.buyer_deleted_at is not None

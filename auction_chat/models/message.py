from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from ..constants import MessageType
from . import Base
from ._time import utcnow


class Message(Base):
    __tablename__ = "message"
    __table_args__ = (Index("ix_message_chat_sent", "chat_id", "sent_at"),)

    id = Column(Integer, primary_key=True)
    chat_id = Column(Integer, ForeignKey("chat.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(String(300), nullable=False)
    type = Column(Enum(MessageType, name="message_type"), nullable=False, default=MessageType.TEXT)
    sent_at = Column(DateTime, nullable=False, default=utcnow)
    is_read = Column(Boolean, nullable=False, default=False)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    room = relationship("ChatRoom", back_populates="messages")

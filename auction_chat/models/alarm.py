from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Text

from . import Base
from ._time import utcnow


class Alarm(Base):
    __tablename__ = "alarm"
    __table_args__ = (Index("ix_alarm_user_read", "user_id", "is_read"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=True, onupdate=utcnow)
    deleted_at = Column(DateTime, nullable=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

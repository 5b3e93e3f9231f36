from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint

from . import Base
from ._time import utcnow


class BlockList(Base):
    __tablename__ = "block_list"
    __table_args__ = (UniqueConstraint("blocker_id", "blocked_id", name="uq_block_list_pair"),)

    id = Column(Integer, primary_key=True)
    blocker_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    blocked_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

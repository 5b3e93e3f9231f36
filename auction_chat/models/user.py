from sqlalchemy import Column, DateTime, Integer, String

from . import Base
from ._time import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    nickname = Column(String(60), nullable=False)
    profile_image = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

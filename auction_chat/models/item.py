from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from ..constants import Category, TradeMethod
from . import Base
from ._time import utcnow


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    winner_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    title = Column(String(200), nullable=False)
    image_url = Column(String(500), nullable=True)
    current_price = Column(Integer, nullable=False, default=0)
    category = Column(Enum(Category, name="item_category"), nullable=False, default=Category.ETC)
    trade_method = Column(Enum(TradeMethod, name="trade_method"), nullable=False, default=TradeMethod.OTHER)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    seller = relationship("User", foreign_keys=[seller_id])
    winner = relationship("User", foreign_keys=[winner_id])

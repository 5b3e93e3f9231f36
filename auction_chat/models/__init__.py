from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .alarm import Alarm  # noqa: E402,F401
from .block_list import BlockList  # noqa: E402,F401
from .chat_room import ChatRoom  # noqa: E402,F401
from .item import Item  # noqa: E402,F401
from .message import Message  # noqa: E402,F401
from .user import User  # noqa: E402,F401

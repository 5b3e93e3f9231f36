import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")

from datetime import datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from auction_chat.constants import MessageType  # noqa: E402
from auction_chat.db import get_db  # noqa: E402
from auction_chat.main import app  # noqa: E402
from auction_chat.models import Alarm, Base, ChatRoom, Item, Message, User  # noqa: E402
from auction_chat.realtime.broker import TopicBroker  # noqa: E402
from auction_chat.realtime.endpoint import get_session_factory  # noqa: E402

BASE_TIME = datetime(2025, 3, 1, 12, 0, 0)


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so separate sessions get separate connections."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy drive it
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


class Factory:
    """Small builders for collaborator rows and chat fixtures."""

    def __init__(self, session):
        self.session = session

    def user(self, nickname="user", profile_image=None) -> User:
        user = User(nickname=nickname, profile_image=profile_image)
        self.session.add(user)
        self.session.commit()
        return user

    def item(self, seller, winner=None, title="Camera", price=1000, image_url=None) -> Item:
        item = Item(
            seller_id=seller.id if seller else None,
            winner_id=winner.id if winner else None,
            title=title,
            current_price=price,
            image_url=image_url,
        )
        self.session.add(item)
        self.session.commit()
        return item

    def room(self, seller, buyer, item=None, last_message_at=BASE_TIME) -> ChatRoom:
        item = item or self.item(seller, buyer)
        room = ChatRoom(item_id=item.id, seller_id=seller.id, buyer_id=buyer.id, last_message_at=last_message_at)
        self.session.add(room)
        self.session.commit()
        return room

    def message(self, room, sender, content="hi", minutes=0, is_read=False, type=MessageType.TEXT) -> Message:
        sent_at = BASE_TIME + timedelta(minutes=minutes)
        message = Message(
            chat_id=room.id,
            sender_id=sender.id,
            content=content,
            type=type,
            sent_at=sent_at,
            is_read=is_read,
        )
        self.session.add(message)
        room.last_message_at = max(room.last_message_at, sent_at)
        self.session.commit()
        return message

    def alarm(self, user, content="ping", is_read=False, deleted_at=None) -> Alarm:
        alarm = Alarm(user_id=user.id, content=content, is_read=is_read, deleted_at=deleted_at)
        self.session.add(alarm)
        self.session.commit()
        return alarm


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
def seller(factory):
    return factory.user("seller")


@pytest.fixture
def buyer(factory):
    return factory.user("buyer", profile_image="https://img.example/buyer.png")


@pytest.fixture
def room(factory, seller, buyer):
    return factory.room(seller, buyer)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.state.broker = TopicBroker()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth(user) -> dict:
    return {"user-id": str(user.id)}

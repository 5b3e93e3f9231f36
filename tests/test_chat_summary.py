from auction_chat.constants import IMAGE_PREVIEW_TEXT, URL_PREVIEW_TEXT, MessageType
from auction_chat.services import chats as chat_service
from auction_chat.services.chat_summary import build_chat_summaries


class TestChatSummaries:
    def test_room_without_messages_is_listed(self, db, room, buyer):
        """A freshly created room shows up with no last message and nothing unread."""
        rows = build_chat_summaries(db, buyer.id, 0, 20)

        assert len(rows) == 1
        assert rows[0].chat_id == room.id
        assert rows[0].last_message is None
        assert rows[0].unread_count == 0

    def test_unread_count_and_partner(self, factory, room, seller, buyer):
        factory.message(room, seller, "one", minutes=1)
        factory.message(room, seller, "two", minutes=2)
        factory.message(room, buyer, "three", minutes=3)

        row = build_chat_summaries(factory.session, buyer.id, 0, 20)[0]

        assert row.unread_count == 2
        assert row.partner.id == seller.id
        assert row.partner.nickname == "seller"
        assert row.last_message.content == "three"
        assert row.item.title == "Camera"
        assert row.item.winning_price == 1000

    def test_preview_text_for_media(self, factory, seller, buyer):
        image_room = factory.room(seller, buyer)
        url_room = factory.room(seller, buyer)
        factory.message(image_room, seller, "https://img.example/1.png", minutes=1, type=MessageType.IMAGE)
        factory.message(url_room, seller, "https://example.com", minutes=2, type=MessageType.URL)

        rows = {row.chat_id: row for row in build_chat_summaries(factory.session, buyer.id, 0, 20)}

        assert rows[image_room.id].last_message.content == IMAGE_PREVIEW_TEXT
        assert rows[url_room.id].last_message.content == URL_PREVIEW_TEXT

    def test_rows_follow_last_activity(self, factory, seller, buyer):
        quiet = factory.room(seller, buyer)
        busy = factory.room(seller, buyer)
        factory.message(quiet, seller, "old", minutes=1)
        factory.message(busy, seller, "new", minutes=30)

        rows = build_chat_summaries(factory.session, seller.id, 0, 20)

        assert [row.chat_id for row in rows] == [busy.id, quiet.id]

    def test_blocked_flag(self, db, room, seller, buyer):
        chat_service.block_partner(db, buyer.id, room.id)

        assert build_chat_summaries(db, buyer.id, 0, 20)[0].i_blocked_partner is True
        assert build_chat_summaries(db, seller.id, 0, 20)[0].i_blocked_partner is False

    def test_exit_hides_room_for_leaver_only(self, db, room, seller, buyer):
        chat_service.exit_room(db, seller.id, room.id)

        assert build_chat_summaries(db, seller.id, 0, 20) == []
        assert [row.chat_id for row in build_chat_summaries(db, buyer.id, 0, 20)] == [room.id]

    def test_outsider_sees_nothing(self, factory, room):
        stranger = factory.user("stranger")

        assert build_chat_summaries(factory.session, stranger.id, 0, 20) == []

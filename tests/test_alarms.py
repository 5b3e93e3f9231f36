from datetime import datetime

import pytest

from auction_chat.errors import Forbidden, NotFound
from auction_chat.models import Alarm
from auction_chat.services import alarms as alarm_service


@pytest.fixture
def owner(factory):
    return factory.user("owner")


@pytest.fixture
def other(factory):
    return factory.user("other")


class TestCreate:
    def test_create_alarm(self, db, owner):
        alarm = alarm_service.create_alarm(db, owner.id, "Outbid on Camera")

        assert alarm.id is not None
        assert alarm.is_read is False
        assert alarm_service.unread_count(db, owner.id) == 1

    def test_unknown_user(self, db):
        with pytest.raises(NotFound) as exc_info:
            alarm_service.create_alarm(db, 12345, "nobody home")
        assert exc_info.value.code == "USER4041"


class TestMarkRead:
    def test_mark_read_sets_timestamp(self, db, factory, owner):
        alarm = factory.alarm(owner)
        now = datetime(2025, 3, 2, 8, 30)

        assert alarm_service.mark_read(db, alarm.id, owner.id, now=now) is True

        db.refresh(alarm)
        assert alarm.is_read is True
        assert alarm.read_at == now

    def test_already_read_is_noop(self, db, factory, owner):
        alarm = factory.alarm(owner, is_read=True)

        assert alarm_service.mark_read(db, alarm.id, owner.id) is False

    def test_foreign_alarm_is_forbidden_and_untouched(self, db, factory, owner, other):
        alarm = factory.alarm(owner)

        with pytest.raises(Forbidden) as exc_info:
            alarm_service.mark_read(db, alarm.id, other.id)

        assert exc_info.value.code == "ALARM4031"
        db.refresh(alarm)
        assert alarm.is_read is False
        assert alarm.read_at is None

    def test_missing_or_deleted_alarm(self, db, factory, owner):
        deleted = factory.alarm(owner, deleted_at=datetime(2025, 3, 1))

        with pytest.raises(NotFound):
            alarm_service.mark_read(db, 999, owner.id)
        with pytest.raises(NotFound):
            alarm_service.mark_read(db, deleted.id, owner.id)


class TestMarkAllRead:
    def test_second_call_changes_nothing(self, db, factory, owner, other):
        factory.alarm(owner)
        factory.alarm(owner)
        factory.alarm(owner, is_read=True)
        factory.alarm(other)

        assert alarm_service.mark_all_read(db, owner.id) == 2
        assert alarm_service.mark_all_read(db, owner.id) == 0
        assert alarm_service.unread_count(db, owner.id) == 0
        assert alarm_service.unread_count(db, other.id) == 1

    def test_skips_deleted(self, db, factory, owner):
        factory.alarm(owner, deleted_at=datetime(2025, 3, 1))

        assert alarm_service.mark_all_read(db, owner.id) == 0


class TestSoftDelete:
    def test_delete_one_hides_alarm(self, db, factory, owner):
        kept = factory.alarm(owner, content="keep")
        gone = factory.alarm(owner, content="drop")

        alarm_service.soft_delete_one(db, owner.id, gone.id)

        assert [alarm.id for alarm in alarm_service.list_alarms(db, owner.id)] == [kept.id]
        assert db.query(Alarm).count() == 2

    def test_delete_one_requires_ownership(self, db, factory, owner, other):
        alarm = factory.alarm(owner)

        with pytest.raises(NotFound):
            alarm_service.soft_delete_one(db, other.id, alarm.id)

    def test_delete_many_ignores_foreign_ids(self, db, factory, owner, other):
        mine = [factory.alarm(owner) for _ in range(2)]
        theirs = factory.alarm(other)

        removed = alarm_service.soft_delete_many(db, owner.id, [alarm.id for alarm in mine] + [theirs.id])

        assert removed == 2
        assert alarm_service.list_alarms(db, owner.id) == []
        assert len(alarm_service.list_alarms(db, other.id)) == 1
        assert alarm_service.soft_delete_many(db, owner.id, []) == 0

    def test_delete_all(self, db, factory, owner):
        factory.alarm(owner)
        factory.alarm(owner, is_read=True)

        assert alarm_service.soft_delete_all(db, owner.id) == 2
        assert alarm_service.unread_count(db, owner.id) == 0
        assert alarm_service.soft_delete_all(db, owner.id) == 0

    def test_list_is_newest_first(self, db, factory, owner):
        first = factory.alarm(owner, content="first")
        second = factory.alarm(owner, content="second")

        listed = alarm_service.list_alarms(db, owner.id)

        assert [alarm.id for alarm in listed] == [second.id, first.id]

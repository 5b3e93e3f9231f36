from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..errors import ErrorStatus, Forbidden, NotFound
from ..models import Alarm, User
from ..models._time import utcnow

logger = logging.getLogger(__name__)


def create_alarm(db: Session, user_id: int, content: str, *, commit: bool = True) -> Alarm:
    if db.query(User.id).filter(User.id == user_id).first() is None:
        raise NotFound(ErrorStatus.USER_NOT_FOUND)
    alarm = Alarm(user_id=user_id, content=content, is_read=False)
    db.add(alarm)
    db.flush()
    if commit:
        db.commit()
    return alarm


def _active(user_id: int):
    return (Alarm.user_id == user_id) & Alarm.deleted_at.is_(None)


def list_alarms(db: Session, user_id: int) -> list[Alarm]:
    return (
        db.query(Alarm)
        .filter(_active(user_id))
        .order_by(Alarm.created_at.desc(), Alarm.id.desc())
        .all()
    )


def unread_count(db: Session, user_id: int) -> int:
    return (
        db.query(func.count(Alarm.id))
        .filter(_active(user_id), Alarm.is_read.is_(False))
        .scalar()
        or 0
    )


def mark_read(db: Session, alarm_id: int, reader_id: int, now: datetime | None = None) -> bool:
    """Flip one alarm to read if it belongs to the reader.

    The update is conditional on ownership, so an alarm owned by someone else
    is never touched. When nothing changed, the cause is reported: a missing or
    soft-deleted alarm raises NotFound, a foreign one raises Forbidden, and an
    alarm that was already read is a silent no-op returning False.
    """
    now = now or utcnow()
    changed = (
        db.query(Alarm)
        .filter(
            Alarm.id == alarm_id,
            Alarm.user_id == reader_id,
            Alarm.deleted_at.is_(None),
            Alarm.is_read.is_(False),
        )
        .update({Alarm.is_read: True, Alarm.read_at: now}, synchronize_session="fetch")
    )
    db.commit()
    if changed:
        return True

    alarm = db.query(Alarm).filter(Alarm.id == alarm_id).one_or_none()
    if alarm is None or alarm.is_deleted:
        raise NotFound(ErrorStatus.ALARM_NOT_FOUND)
    if alarm.user_id != reader_id:
        logger.warning("User %s tried to read alarm %s owned by %s", reader_id, alarm_id, alarm.user_id)
        raise Forbidden(ErrorStatus.ALARM_NOT_OWNER)
    return False


def mark_all_read(db: Session, user_id: int, now: datetime | None = None) -> int:
    now = now or utcnow()
    changed = (
        db.query(Alarm)
        .filter(_active(user_id), Alarm.is_read.is_(False))
        .update({Alarm.is_read: True, Alarm.read_at: now}, synchronize_session="fetch")
    )
    db.commit()
    logger.debug("Marked %s alarms read for user %s", changed, user_id)
    return changed


def soft_delete_one(db: Session, user_id: int, alarm_id: int, now: datetime | None = None) -> None:
    changed = (
        db.query(Alarm)
        .filter(Alarm.id == alarm_id, _active(user_id))
        .update({Alarm.deleted_at: now or utcnow()}, synchronize_session="fetch")
    )
    if not changed:
        db.rollback()
        raise NotFound(ErrorStatus.ALARM_NOT_FOUND)
    db.commit()


def soft_delete_many(db: Session, user_id: int, alarm_ids: list[int], now: datetime | None = None) -> int:
    if not alarm_ids:
        return 0
    changed = (
        db.query(Alarm)
        .filter(Alarm.id.in_(alarm_ids), _active(user_id))
        .update({Alarm.deleted_at: now or utcnow()}, synchronize_session="fetch")
    )
    db.commit()
    return changed


def soft_delete_all(db: Session, user_id: int, now: datetime | None = None) -> int:
    changed = (
        db.query(Alarm)
        .filter(_active(user_id))
        .update({Alarm.deleted_at: now or utcnow()}, synchronize_session="fetch")
    )
    db.commit()
    return changed

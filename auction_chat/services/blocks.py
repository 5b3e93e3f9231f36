from __future__ import annotations

from sqlalchemy.orm import Session

from ..models import BlockList


def is_blocked(db: Session, blocker_id: int, blocked_id: int) -> bool:
    return (
        db.query(BlockList.id)
        .filter(BlockList.blocker_id == blocker_id, BlockList.blocked_id == blocked_id)
        .first()
        is not None
    )


def either_blocked(db: Session, first_id: int, second_id: int) -> bool:
    return is_blocked(db, first_id, second_id) or is_blocked(db, second_id, first_id)


def blocked_user_ids(db: Session, blocker_id: int) -> set[int]:
    rows = db.query(BlockList.blocked_id).filter(BlockList.blocker_id == blocker_id).all()
    return {blocked_id for (blocked_id,) in rows}


def block(db: Session, blocker_id: int, blocked_id: int) -> bool:
    """Returns True when a new block row was written."""
    if is_blocked(db, blocker_id, blocked_id):
        return False
    db.add(BlockList(blocker_id=blocker_id, blocked_id=blocked_id))
    db.flush()
    return True


def unblock(db: Session, blocker_id: int, blocked_id: int) -> bool:
    removed = (
        db.query(BlockList)
        .filter(BlockList.blocker_id == blocker_id, BlockList.blocked_id == blocked_id)
        .delete(synchronize_session=False)
    )
    return removed > 0

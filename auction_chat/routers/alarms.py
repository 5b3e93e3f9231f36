from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas.alarm import AlarmResponse, CreateAlarmRequest, DeleteManyRequest
from ..services import alarms as alarm_service
from .deps import ok, require_user_id

router = APIRouter(prefix="/alarms", tags=["alarms"])


@router.post("")
async def create_alarm(payload: CreateAlarmRequest, db: Session = Depends(get_db)):
    alarm = alarm_service.create_alarm(db, payload.user_id, payload.content)
    return ok(AlarmResponse.model_validate(alarm), status_code=201)


@router.get("")
async def list_alarms(me: int = Depends(require_user_id), db: Session = Depends(get_db)):
    return ok([AlarmResponse.model_validate(alarm) for alarm in alarm_service.list_alarms(db, me)])


@router.get("/unread-count")
async def unread_count(me: int = Depends(require_user_id), db: Session = Depends(get_db)):
    return ok(alarm_service.unread_count(db, me))


@router.patch("/read-all")
async def read_all(me: int = Depends(require_user_id), db: Session = Depends(get_db)):
    return ok(alarm_service.mark_all_read(db, me))


@router.patch("/{alarm_id}/read")
async def read_one(alarm_id: int, me: int = Depends(require_user_id), db: Session = Depends(get_db)):
    changed = alarm_service.mark_read(db, alarm_id, me)
    return ok({"alarm_id": alarm_id, "changed": changed})


@router.delete("/all")
async def delete_all(me: int = Depends(require_user_id), db: Session = Depends(get_db)):
    return ok(alarm_service.soft_delete_all(db, me))


@router.delete("/{alarm_id}")
async def delete_one(alarm_id: int, me: int = Depends(require_user_id), db: Session = Depends(get_db)):
    alarm_service.soft_delete_one(db, me, alarm_id)
    return ok()


@router.delete("")
async def delete_many(payload: DeleteManyRequest, me: int = Depends(require_user_id), db: Session = Depends(get_db)):
    return ok(alarm_service.soft_delete_many(db, me, payload.alarm_ids))

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..constants import CHAT_TOPIC_PREFIX
from ..db import get_db
from ..schemas.chat import SendMessageRequest
from ..services import messages as message_service
from .deps import ok, require_user_id

router = APIRouter(tags=["messages"])


@router.post("/messages")
async def send_message(
    request: Request,
    payload: SendMessageRequest,
    me: int = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    saved = message_service.send_message(db, me, payload.chat_id, payload.content, payload.type)
    if not saved.ignored:
        await request.app.state.broker.publish(f"{CHAT_TOPIC_PREFIX}{payload.chat_id}", saved.model_dump(mode="json"))
    return ok(saved)

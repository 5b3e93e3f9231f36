from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import get_settings
from ..db import get_db
from ..schemas.chat import ChatResponse
from ..services import chats as chat_service
from ..services.chat_summary import build_chat_summaries
from .deps import ok, require_user_id

router = APIRouter(tags=["chat"])
settings = get_settings()


@router.get("/chats")
async def list_chats(
    page: int = Query(0, ge=0),
    size: int = Query(settings.default_page_size, ge=1),
    me: int = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    size = min(size, settings.max_page_size)
    return ok(build_chat_summaries(db, me, page, size))


@router.post("/items/{item_id}/chat")
async def create_chat_for_winner(
    item_id: int,
    me: int = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    room, created = chat_service.create_room_for_item_winner(db, item_id)
    return ok(
        ChatResponse(chat_id=room.id),
        status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        headers={"Location": f"/chats/{room.id}"},
    )


@router.patch("/chats/{chat_id}/exit")
async def exit_chat(chat_id: int, me: int = Depends(require_user_id), db: Session = Depends(get_db)):
    chat_service.exit_room(db, me, chat_id)
    return ok()


@router.post("/chats/{chat_id}/enter")
async def enter_chat(
    chat_id: int,
    page: int = Query(0, ge=0),
    size: int = Query(settings.default_page_size, ge=1),
    me: int = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    size = min(size, settings.max_page_size)
    return ok(chat_service.enter_room(db, me, chat_id, page, size))


@router.patch("/chats/{chat_id}/read")
async def read_all_in_chat(chat_id: int, me: int = Depends(require_user_id), db: Session = Depends(get_db)):
    return ok(chat_service.mark_room_read(db, me, chat_id))


@router.post("/chats/{chat_id}/block")
async def block_partner(chat_id: int, me: int = Depends(require_user_id), db: Session = Depends(get_db)):
    return ok(chat_service.block_partner(db, me, chat_id))


@router.post("/chats/{chat_id}/unblock")
async def unblock_partner(chat_id: int, me: int = Depends(require_user_id), db: Session = Depends(get_db)):
    return ok(chat_service.unblock_partner(db, me, chat_id))


@router.get("/chats/{chat_id}/block")
async def get_block_status(chat_id: int, me: int = Depends(require_user_id), db: Session = Depends(get_db)):
    return ok(chat_service.block_status(db, me, chat_id))

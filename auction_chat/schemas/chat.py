from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import MessageType


class ChatMessagePayload(BaseModel):
    content: str = Field(..., min_length=1, max_length=300)
    type: MessageType = MessageType.TEXT

    @field_validator("content")
    @classmethod
    def content_strip(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Message content is required")
        return cleaned


class SendMessageRequest(ChatMessagePayload):
    chat_id: int = Field(..., ge=1)


class MessageBrief(BaseModel):
    message_id: int
    sender_id: int
    content: str
    type: MessageType
    read: bool
    sent_at: datetime


class MessageResponse(BaseModel):
    message_id: Optional[int] = None
    chat_id: Optional[int] = None
    sender_id: Optional[int] = None
    content: Optional[str] = None
    type: Optional[MessageType] = None
    read: bool = False
    sent_at: Optional[datetime] = None
    ignored: bool = False


class ChatResponse(BaseModel):
    chat_id: int


class PartnerSummary(BaseModel):
    id: int
    nickname: Optional[str] = None
    profile_image: Optional[str] = None


class LastMessageSummary(BaseModel):
    content: Optional[str] = None
    type: Optional[MessageType] = None
    sent_at: datetime


class ItemSummary(BaseModel):
    item_id: int
    title: Optional[str] = None
    image: Optional[str] = None
    winning_price: Optional[int] = None


class ChatSummaryRow(BaseModel):
    chat_id: int
    partner: PartnerSummary
    last_message: Optional[LastMessageSummary] = None
    unread_count: int = 0
    item: Optional[ItemSummary] = None
    i_blocked_partner: bool = False

    model_config = ConfigDict(populate_by_name=True)


class ReadAllResponse(BaseModel):
    chat_id: int
    reader_id: int
    updated_count: int
    unread_count_after: int


class ChatEnterResponse(ReadAllResponse):
    page: int
    size: int
    total_elements: int
    total_pages: int
    messages: List[MessageBrief] = Field(default_factory=list)
    can_send: bool


class BlockResponse(BaseModel):
    blocked_user_id: int
    blocked: bool


class BlockStatusResponse(BaseModel):
    i_blocked_partner: bool
    partner_blocked_me: bool

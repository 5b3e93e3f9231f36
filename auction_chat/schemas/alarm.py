from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateAlarmRequest(BaseModel):
    user_id: int = Field(..., ge=1)
    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def content_strip(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Alarm content is required")
        return cleaned


class DeleteManyRequest(BaseModel):
    alarm_ids: List[int] = Field(default_factory=list)

    @field_validator("alarm_ids")
    @classmethod
    def ensure_positive(cls, value: List[int]) -> List[int]:
        if any(alarm_id <= 0 for alarm_id in value):
            raise ValueError("Invalid alarm id")
        return value


class AlarmResponse(BaseModel):
    alarm_id: int = Field(validation_alias="id")
    content: str
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

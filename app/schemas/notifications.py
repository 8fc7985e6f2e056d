"""Schemas for organizer-to-attendee notifications."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.schemas.events import OrganizerRef

MESSAGE_MAX_LENGTH = 2000


class NotificationCreate(BaseModel):
    event_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, max_length=MESSAGE_MAX_LENGTH)

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class NotifyResponse(BaseModel):
    message: str
    count: int


class NotificationEventRef(BaseModel):
    id: str
    title: str
    date_time: datetime

    class Config:
        from_attributes = True


class NotificationOut(BaseModel):
    id: str
    message: str
    is_read: bool
    created_at: datetime | None = None
    event: NotificationEventRef
    organizer: OrganizerRef

    class Config:
        from_attributes = True

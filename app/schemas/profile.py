"""Request/response schemas for profile endpoints."""

import re
from datetime import datetime
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator

from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN

PHONE_PATTERN = re.compile(r"^[\d\s\-+()]+$")
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9]+$")


class ProfileOut(BaseModel):
    """Own profile, including activity counts."""

    id: str
    username: str
    email: str
    role: str
    full_name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    location: str | None = None
    website: str | None = None
    phone: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    organized_events_count: int = 0
    registrations_count: int = 0


class UpcomingEvent(BaseModel):
    id: str
    title: str
    date_time: datetime
    location: str
    image_url: str | None = None

    class Config:
        from_attributes = True


class PublicProfileOut(BaseModel):
    """Profile visible to anyone; upcoming events are listed for organizers only."""

    id: str
    username: str
    role: str
    full_name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    location: str | None = None
    website: str | None = None
    created_at: datetime | None = None
    organized_events_count: int = 0
    upcoming_events: list[UpcomingEvent] | None = None


class ProfileUpdateRequest(BaseModel):
    """Partial update; empty strings clear optional fields."""

    full_name: str | None = Field(default=None, max_length=255)
    bio: str | None = Field(default=None, max_length=1000)
    phone: str | None = Field(default=None, max_length=20)
    location: str | None = Field(default=None, max_length=255)
    website: str | None = Field(default=None, max_length=255)
    username: str | None = Field(default=None, min_length=3, max_length=30)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        if v and not PHONE_PATTERN.match(v):
            raise ValueError("phone may contain digits, spaces and + - ( ) only")
        return v

    @field_validator("website")
    @classmethod
    def validate_website(cls, v: str | None) -> str | None:
        if v:
            parsed = urlparse(v)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ValueError("website must be an http(s) URL")
        return v

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str | None) -> str | None:
        if v is not None and not USERNAME_PATTERN.match(v):
            raise ValueError("username must be alphanumeric")
        return v


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    confirm_password: str = Field(..., max_length=PASSWORD_MAX_LEN)

    @model_validator(mode="after")
    def passwords_match(self) -> "ChangePasswordRequest":
        if self.new_password != self.confirm_password:
            raise ValueError("confirm_password must match new_password")
        return self


class DeleteAccountRequest(BaseModel):
    password: str | None = None

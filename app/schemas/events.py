"""Request/response schemas for events, registrations and categories."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator

from app.models.event import EventStatus, PaymentStatus

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 255
DESCRIPTION_MIN_LENGTH = 10
LOCATION_MIN_LENGTH = 3
LOCATION_MAX_LENGTH = 255
MAX_ATTENDEES_LIMIT = 10_000
PAGE_LIMIT_MAX = 100


def _to_utc(v: datetime) -> datetime:
    # Naive datetimes are taken as UTC; everything is stored in UTC.
    if v.tzinfo is None:
        return v.replace(tzinfo=UTC)
    return v.astimezone(UTC)


def _strip(v: str | None) -> str | None:
    return v.strip() if isinstance(v, str) else v


def _validate_image_url(v: str | None) -> str | None:
    """Full http(s) URLs and site-relative paths are accepted."""
    if not v:
        return None
    if v.startswith(("http://", "https://", "/")):
        return v
    raise ValueError("image_url must be an http(s) URL or a path starting with '/'")


class EventCreate(BaseModel):
    title: str = Field(..., min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH)
    description: str = Field(..., min_length=DESCRIPTION_MIN_LENGTH)
    date_time: datetime
    location: str = Field(..., min_length=LOCATION_MIN_LENGTH, max_length=LOCATION_MAX_LENGTH)
    max_attendees: int = Field(..., ge=1, le=MAX_ATTENDEES_LIMIT)
    category_id: str = Field(..., min_length=1)
    payment_required: bool = False
    status: EventStatus = EventStatus.SCHEDULED
    image_url: str | None = Field(default=None, max_length=1024)

    strip_text = field_validator("title", "description", "location", mode="before")(_strip)
    check_image = field_validator("image_url")(_validate_image_url)

    @field_validator("date_time")
    @classmethod
    def validate_date_time(cls, v: datetime) -> datetime:
        v = _to_utc(v)
        if v <= datetime.now(UTC):
            raise ValueError("date_time must be in the future")
        return v


class EventUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    title: str | None = Field(default=None, min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, min_length=DESCRIPTION_MIN_LENGTH)
    date_time: datetime | None = None
    location: str | None = Field(
        default=None, min_length=LOCATION_MIN_LENGTH, max_length=LOCATION_MAX_LENGTH
    )
    max_attendees: int | None = Field(default=None, ge=1, le=MAX_ATTENDEES_LIMIT)
    category_id: str | None = Field(default=None, min_length=1)
    payment_required: bool | None = None
    status: EventStatus | None = None
    image_url: str | None = Field(default=None, max_length=1024)

    strip_text = field_validator("title", "description", "location", mode="before")(_strip)
    check_image = field_validator("image_url")(_validate_image_url)

    @field_validator("date_time")
    @classmethod
    def validate_date_time(cls, v: datetime | None) -> datetime | None:
        return _to_utc(v) if v is not None else None


class CategoryRef(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


class OrganizerRef(BaseModel):
    id: str
    username: str

    class Config:
        from_attributes = True


class EventOut(BaseModel):
    id: str
    title: str
    description: str
    date_time: datetime
    location: str
    max_attendees: int
    status: str
    payment_required: bool
    image_url: str | None = None
    category: CategoryRef | None = None
    organizer: OrganizerRef | None = None
    registrations_count: int = 0
    # None for anonymous callers.
    is_registered: bool | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class EventListResponse(BaseModel):
    events: list[EventOut]
    pagination: Pagination


class RegistrationCreate(BaseModel):
    event_id: str = Field(..., min_length=1)


class RegistrationOut(BaseModel):
    id: str
    user_id: str
    event_id: str
    payment_status: PaymentStatus
    created_at: datetime | None = None
    event: EventOut | None = None

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)

    strip_name = field_validator("name", mode="before")(_strip)


class CategoryOut(BaseModel):
    id: str
    name: str
    event_count: int = 0
    is_favorite: bool = False


class FavoriteCategoryOut(BaseModel):
    id: str
    name: str
    event_count: int = 0
    favorited_at: datetime | None = None


class DashboardResponse(BaseModel):
    """ADMIN sees global totals; ORGANIZER sees figures for their own events."""

    role: str
    events_count: int
    registrations_count: int
    users_count: int | None = None


class FavoriteCategoriesUpdate(BaseModel):
    """Replaces the caller's favorites with exactly these categories."""

    category_ids: list[str] = Field(..., alias="categoryIds")

    class Config:
        populate_by_name = True


class FavoriteCategoriesResponse(BaseModel):
    message: str
    favorites: list[CategoryRef]

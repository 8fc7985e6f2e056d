"""Event endpoints: public listing, organizer CRUD, admin delete."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.auth import (
    ensure_owner_or_admin,
    get_current_identity,
    get_optional_identity,
    require_roles,
)
from app.core.database import get_db
from app.models import EventStatus, Role
from app.schemas.auth import Identity, MessageResponse
from app.schemas.events import (
    PAGE_LIMIT_MAX,
    EventCreate,
    EventListResponse,
    EventOut,
    EventUpdate,
)
from app.services import events as event_service

router = APIRouter()


@router.get("", response_model=EventListResponse)
def list_events(
    db: Annotated[Session, Depends(get_db)],
    identity: Annotated[Identity | None, Depends(get_optional_identity)],
    category_id: str | None = None,
    status: EventStatus | None = None,
    organizer_id: str | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=PAGE_LIMIT_MAX)] = 10,
) -> EventListResponse:
    """
    List events, newest first. Filter by category, status or organizer.
    Signed-in callers also get `is_registered` on each event.
    """
    return event_service.list_events(
        db,
        page=page,
        limit=limit,
        category_id=category_id,
        status=status,
        organizer_id=organizer_id,
        identity=identity,
    )


@router.get("/my/organized", response_model=list[EventOut])
def my_organized_events(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> list[EventOut]:
    """Events organized by the caller."""
    events = event_service.list_organized_events(db, identity.id)
    return event_service.to_event_out(db, events, identity)


@router.get("/{event_id}", response_model=EventOut)
def get_event(
    event_id: str,
    db: Annotated[Session, Depends(get_db)],
    identity: Annotated[Identity | None, Depends(get_optional_identity)],
) -> EventOut:
    event = event_service.get_event(db, event_id)
    return event_service.to_event_out(db, [event], identity)[0]


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    body: EventCreate,
    identity: Annotated[Identity, Depends(require_roles(Role.ORGANIZER, Role.ADMIN))],
    db: Annotated[Session, Depends(get_db)],
) -> EventOut:
    """Create an event organized by the caller (ORGANIZER or ADMIN)."""
    event = event_service.create_event(db, body, organizer_id=identity.id)
    return event_service.to_event_out(db, [event], identity)[0]


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    body: EventUpdate,
    identity: Annotated[Identity, Depends(require_roles(Role.ORGANIZER, Role.ADMIN))],
    db: Annotated[Session, Depends(get_db)],
) -> EventOut:
    """Update an event. Organizers may only update their own events."""
    event = event_service.get_event(db, event_id)
    ensure_owner_or_admin(identity, event.organizer_id)
    event = event_service.update_event(db, event, body)
    return event_service.to_event_out(db, [event], identity)[0]


@router.delete("/{event_id}", response_model=MessageResponse)
def delete_event(
    event_id: str,
    _admin: Annotated[Identity, Depends(require_roles(Role.ADMIN))],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete an event and its registrations (ADMIN only)."""
    event = event_service.get_event(db, event_id)
    event_service.delete_event(db, event)
    return MessageResponse(message="Event deleted successfully")

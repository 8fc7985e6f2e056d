"""Notification endpoints: organizers message their attendees, users read their inbox."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import ensure_owner_or_admin, get_current_identity, require_roles
from app.core.database import get_db
from app.core.errors import ForbiddenError
from app.models import Role
from app.schemas.auth import Identity, MessageResponse
from app.schemas.notifications import NotificationCreate, NotificationOut, NotifyResponse
from app.services import events as event_service
from app.services import notifications as notification_service

router = APIRouter()


@router.post("", response_model=NotifyResponse)
def notify_attendees(
    body: NotificationCreate,
    identity: Annotated[Identity, Depends(require_roles(Role.ADMIN, Role.ORGANIZER))],
    db: Annotated[Session, Depends(get_db)],
) -> NotifyResponse:
    """
    Send a message to everyone registered for an event.
    Organizers may only notify attendees of their own events.
    """
    event = event_service.get_event(db, body.event_id)
    ensure_owner_or_admin(identity, event.organizer_id)
    count = notification_service.notify_registrants(db, event, identity.id, body.message)
    return NotifyResponse(message="Notifications sent successfully", count=count)


@router.get("/my", response_model=list[NotificationOut])
def my_notifications(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> list[NotificationOut]:
    return [
        NotificationOut.model_validate(n)
        for n in notification_service.list_for_user(db, identity.id)
    ]


@router.patch("/{notification_id}/read", response_model=MessageResponse)
def mark_read(
    notification_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    notification = notification_service.get_notification(db, notification_id)
    # Only the recipient; admins do not read other people's inboxes.
    if notification.user_id != identity.id:
        raise ForbiddenError("Forbidden")
    notification_service.mark_read(db, notification)
    return MessageResponse(message="Notification marked as read")

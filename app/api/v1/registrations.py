"""Registration endpoints: sign up for an event, list, cancel."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.v1.auth import ensure_owner_or_admin, get_current_identity
from app.core.database import get_db
from app.schemas.auth import Identity, MessageResponse
from app.schemas.events import RegistrationCreate, RegistrationOut
from app.services import events as event_service

router = APIRouter()


@router.post("", response_model=RegistrationOut, status_code=status.HTTP_201_CREATED)
def register(
    body: RegistrationCreate,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> RegistrationOut:
    """
    Register the caller for an event. Payment status is PENDING for paid
    events and PAID otherwise. 400 when the event is full, 409 when already
    registered.
    """
    registration = event_service.register_for_event(db, identity.id, body.event_id)
    return RegistrationOut.model_validate(registration)


@router.get("/user/{user_id}", response_model=list[RegistrationOut])
def list_registrations(
    user_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> list[RegistrationOut]:
    """Registrations of a user (the user themself or an ADMIN)."""
    ensure_owner_or_admin(identity, user_id)
    regs = event_service.list_user_registrations(db, user_id)
    return [RegistrationOut.model_validate(r) for r in regs]


@router.delete("/{registration_id}", response_model=MessageResponse)
def cancel(
    registration_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    registration = event_service.get_registration(db, registration_id)
    ensure_owner_or_admin(identity, registration.user_id)
    event_service.cancel_registration(db, registration)
    return MessageResponse(message="Canceled")

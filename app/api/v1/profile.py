"""Profile endpoints: own profile, public profiles, password change, account deletion."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.core.errors import ConflictError, CredentialError, NotFoundError, ValidationError
from app.core.security import hash_password, verify_password
from app.models import Event, Registration, Role, User
from app.schemas.auth import MessageResponse
from app.schemas.profile import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    ProfileOut,
    ProfileUpdateRequest,
    PublicProfileOut,
    UpcomingEvent,
)
from app.services.events import upcoming_events_for

logger = logging.getLogger(__name__)
router = APIRouter()

PROFILE_FIELDS = ("full_name", "bio", "avatar_url", "location", "website", "phone")


def _profile_out(db: Session, user: User) -> ProfileOut:
    return ProfileOut(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        created_at=user.created_at,
        updated_at=user.updated_at,
        organized_events_count=db.query(Event).filter(Event.organizer_id == user.id).count(),
        registrations_count=db.query(Registration).filter(Registration.user_id == user.id).count(),
        **{f: getattr(user, f) for f in PROFILE_FIELDS},
    )


@router.get("/me", response_model=ProfileOut)
def get_my_profile(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ProfileOut:
    """Full profile of the caller, with counts of organized events and registrations."""
    return _profile_out(db, user)


@router.get("/user/{user_id}", response_model=PublicProfileOut)
def get_public_profile(
    user_id: str,
    db: Annotated[Session, Depends(get_db)],
) -> PublicProfileOut:
    """Public profile. Organizers also list up to six upcoming scheduled events."""
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    upcoming = None
    if user.role == Role.ORGANIZER.value:
        upcoming = [UpcomingEvent.model_validate(e) for e in upcoming_events_for(db, user.id)]
    return PublicProfileOut(
        id=user.id,
        username=user.username,
        role=user.role,
        full_name=user.full_name,
        bio=user.bio,
        avatar_url=user.avatar_url,
        location=user.location,
        website=user.website,
        created_at=user.created_at,
        organized_events_count=db.query(Event).filter(Event.organizer_id == user.id).count(),
        upcoming_events=upcoming,
    )


@router.put("/me", response_model=ProfileOut)
def update_my_profile(
    body: ProfileUpdateRequest,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ProfileOut:
    """Update profile fields. Empty strings clear optional fields; username must stay unique."""
    changes = body.model_dump(exclude_unset=True)
    username = changes.pop("username", None)
    if username is not None and username != user.username:
        taken = db.query(User.id).filter(User.username == username).first()
        if taken is not None:
            raise ConflictError("Username already taken")
        user.username = username
    for field, value in changes.items():
        setattr(user, field, value or None)
    db.commit()
    db.refresh(user)
    return _profile_out(db, user)


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    if not verify_password(body.current_password, user.password_hash):
        raise CredentialError("Incorrect current password")
    user.password_hash = hash_password(body.new_password)
    db.commit()
    logger.info("User %s changed password", user.id)
    return MessageResponse(message="Password changed successfully")


@router.delete("/me", response_model=MessageResponse)
def delete_my_account(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    body: DeleteAccountRequest | None = None,
) -> MessageResponse:
    """
    Permanently delete the caller's account. The password must be confirmed.
    Refresh tokens, registrations, favorites and organized events go with it.
    """
    if body is None or not body.password:
        raise ValidationError("Password is required to delete your account")
    if not verify_password(body.password, user.password_hash):
        raise CredentialError("Invalid password")
    user_id = user.id
    db.delete(user)
    db.commit()
    logger.info("User %s deleted their account", user_id)
    return MessageResponse(message="Your account has been permanently deleted")

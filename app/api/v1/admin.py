"""Admin endpoints: dashboard figures and user management."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.v1.auth import require_roles
from app.core.database import get_db
from app.core.errors import NotFoundError
from app.models import Event, Registration, Role, User
from app.schemas.auth import Identity, RoleUpdateRequest, UserPublic, UsersListResponse
from app.schemas.events import DashboardResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    identity: Annotated[Identity, Depends(require_roles(Role.ADMIN, Role.ORGANIZER))],
    db: Annotated[Session, Depends(get_db)],
) -> DashboardResponse:
    """Global totals for ADMIN; own events and their registrations for ORGANIZER."""
    if identity.role == Role.ORGANIZER.value:
        my_event_ids = select(Event.id).where(Event.organizer_id == identity.id)
        return DashboardResponse(
            role=identity.role,
            events_count=db.query(Event).filter(Event.organizer_id == identity.id).count(),
            registrations_count=db.query(Registration)
            .filter(Registration.event_id.in_(my_event_ids))
            .count(),
        )
    return DashboardResponse(
        role=identity.role,
        events_count=db.query(Event).count(),
        registrations_count=db.query(Registration).count(),
        users_count=db.query(User).count(),
    )


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[Identity, Depends(require_roles(Role.ADMIN))],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users (admin only)."""
    users = db.query(User).order_by(User.username).all()
    return UsersListResponse(users=[UserPublic.model_validate(u) for u in users])


@router.patch("/users/{user_id}/role", response_model=UserPublic)
def update_user_role(
    user_id: str,
    body: RoleUpdateRequest,
    admin: Annotated[Identity, Depends(require_roles(Role.ADMIN))],
    db: Annotated[Session, Depends(get_db)],
) -> UserPublic:
    """Change a user's role. Takes effect on the user's next login or refresh."""
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    user.role = body.role.value
    db.commit()
    db.refresh(user)
    logger.info("Admin %s set role of %s to %s", admin.id, user.id, user.role)
    return UserPublic.model_validate(user)

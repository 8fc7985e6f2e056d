"""Auth endpoints and dependencies (bearer-token identity, role guard)."""

from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.database import get_db
from app.core.errors import AppError, ForbiddenError, TokenInvalidError
from app.core.security import decode_access_token
from app.models import User
from app.schemas.auth import (
    Identity,
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
    UserPublic,
)
from app.services.auth import AuthService

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Dependency: settings the running app was built with."""
    return request.app.state.settings


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthService:
    return AuthService(db, settings)


def get_current_identity(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> Identity:
    """
    Dependency: require a valid `Authorization: Bearer <access token>`.

    Raises 401 when the header is missing or malformed (TOKEN_INVALID), when the
    token has expired (TOKEN_EXPIRED) or fails verification (TOKEN_INVALID).
    """
    if credentials is None or not credentials.credentials:
        raise TokenInvalidError("Missing or invalid token")
    payload = decode_access_token(credentials.credentials, settings)
    identity = Identity(id=payload["sub"], role=payload["role"])
    request.state.identity = identity
    return identity


def get_optional_identity(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> Identity | None:
    """Dependency: identity when a valid bearer token is present, otherwise None."""
    identity = None
    if credentials is not None and credentials.credentials:
        try:
            payload = decode_access_token(credentials.credentials, settings)
            identity = Identity(id=payload["sub"], role=payload["role"])
        except AppError:
            identity = None
    request.state.identity = identity
    return identity


def get_current_user(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Dependency: the authenticated identity loaded from the database. 401 if the user is gone."""
    user = db.query(User).filter(User.id == identity.id).first()
    if user is None:
        raise TokenInvalidError("Unauthorized")
    return user


def check_role(identity: Identity | None, allowed: tuple[str, ...]) -> Identity:
    """Raise ForbiddenError unless an identity is present and its role is allow-listed."""
    if identity is None or identity.role not in allowed:
        raise ForbiddenError("Forbidden")
    return identity


def require_roles(*allowed: str) -> Callable[..., Identity]:
    """
    Build a dependency that admits only the given roles.

    Usage: `_admin: Annotated[Identity, Depends(require_roles("ADMIN"))]`
    """
    allowed_roles = tuple(str(getattr(r, "value", r)) for r in allowed)

    def role_guard(
        identity: Annotated[Identity, Depends(get_current_identity)],
    ) -> Identity:
        return check_role(identity, allowed_roles)

    return role_guard


def ensure_owner_or_admin(identity: Identity, owner_id: str) -> None:
    """Raise ForbiddenError unless the caller owns the resource or is an ADMIN."""
    if identity.role != "ADMIN" and identity.id != owner_id:
        raise ForbiddenError("Forbidden")


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserPublic:
    """Create an account. 409 if the email or username is already taken."""
    user = service.register(body)
    return UserPublic.model_validate(user)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginResponse:
    """
    Authenticate with email and password; returns an access/refresh token pair.
    Include the access token in the Authorization header as: Bearer <accessToken>
    """
    access, refresh, user = service.login(body.email, body.password)
    return LoginResponse(
        access_token=access,
        refresh_token=refresh,
        user=UserPublic.model_validate(user),
    )


@router.post("/refresh", response_model=TokenPair)
def refresh(
    body: RefreshRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenPair:
    """Exchange a refresh token for a new pair. The presented refresh token cannot be reused."""
    access, new_refresh = service.refresh(body.refresh_token)
    return TokenPair(access_token=access, refresh_token=new_refresh)


@router.post("/logout", response_model=MessageResponse)
def logout(
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[AuthService, Depends(get_auth_service)],
    body: LogoutRequest | None = None,
) -> MessageResponse:
    """Revoke the given refresh token, or every session of the caller when none is sent."""
    service.logout(identity, body.refresh_token if body else None)
    return MessageResponse(message="Logged out successfully")


@router.post("/logout-all", response_model=MessageResponse)
def logout_all(
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Revoke every refresh token of the caller. Outstanding access tokens run until expiry."""
    service.logout_all(identity)
    return MessageResponse(message="All sessions logged out")


@router.get("/me", response_model=UserPublic)
def me(user: Annotated[User, Depends(get_current_user)]) -> UserPublic:
    return UserPublic.model_validate(user)

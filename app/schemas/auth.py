"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, EmailStr, Field

from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from app.models.user import Role


class RegisterRequest(BaseModel):
    """New account; role defaults to ATTENDEE."""

    username: str = Field(
        ..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN, description="Username"
    )
    email: EmailStr = Field(..., description="Email (unique)")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )
    role: Role = Field(default=Role.ATTENDEE, description="ADMIN, ORGANIZER or ATTENDEE")


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, alias="refreshToken")

    class Config:
        populate_by_name = True


class LogoutRequest(BaseModel):
    """When refreshToken is omitted or empty every session of the caller is revoked."""

    refresh_token: str | None = Field(default=None, alias="refreshToken")

    class Config:
        populate_by_name = True


class UserPublic(BaseModel):
    """User entry returned by register/login and admin lists (no password)."""

    id: str
    username: str
    email: str
    role: str

    class Config:
        from_attributes = True


class TokenPair(BaseModel):
    """Access + refresh tokens returned by refresh."""

    access_token: str = Field(..., alias="accessToken", description="JWT access token")
    refresh_token: str = Field(..., alias="refreshToken", description="JWT refresh token")

    class Config:
        populate_by_name = True


class LoginResponse(TokenPair):
    user: UserPublic


class Identity(BaseModel):
    """Authenticated identity decoded from an access token (id, role)."""

    id: str
    role: str


class MessageResponse(BaseModel):
    message: str


class RoleUpdateRequest(BaseModel):
    role: Role


class UsersListResponse(BaseModel):
    """Response for GET /admin/users (admin only)."""

    users: list[UserPublic]

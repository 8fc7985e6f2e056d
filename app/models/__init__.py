"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.event import (
    Category,
    Event,
    EventStatus,
    FavoriteCategory,
    PaymentStatus,
    Registration,
)
from app.models.notification import Notification
from app.models.refresh_token import RefreshToken
from app.models.user import Role, User

__all__ = [
    "Base",
    "Category",
    "Event",
    "EventStatus",
    "FavoriteCategory",
    "Notification",
    "PaymentStatus",
    "RefreshToken",
    "Registration",
    "Role",
    "User",
]

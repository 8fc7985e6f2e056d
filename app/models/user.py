"""ORM model for application users (auth, RBAC and profile)."""

import enum

from sqlalchemy import Column, DateTime, String, Text, func
from sqlalchemy.orm import relationship

from app.models.base import Base, new_id


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    ORGANIZER = "ORGANIZER"
    ATTENDEE = "ATTENDEE"


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: one of Role (ADMIN, ORGANIZER, ATTENDEE). Deleting a user removes
    their refresh tokens, registrations, favorites and organized events.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=Role.ATTENDEE.value)

    # OAuth provider identifier (set on first OAuth login)
    google_id = Column(String(255), nullable=True, unique=True)

    full_name = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String(1024), nullable=True)
    location = Column(String(255), nullable=True)
    website = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    refresh_tokens = relationship(
        "RefreshToken", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    organized_events = relationship(
        "Event", back_populates="organizer", cascade="all, delete-orphan", passive_deletes=True
    )
    registrations = relationship(
        "Registration", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    favorite_categories = relationship(
        "FavoriteCategory", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

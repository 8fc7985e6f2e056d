"""ORM models for categories, events, registrations and favorite categories."""

import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from app.models.base import Base, new_id


class EventStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False, unique=True)

    events = relationship("Event", back_populates="category")
    favorited_by = relationship(
        "FavoriteCategory", back_populates="category", cascade="all, delete-orphan", passive_deletes=True
    )


class Event(Base):
    """An event created by an ORGANIZER (or ADMIN) that attendees register for."""

    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    date_time = Column(DateTime(timezone=True), nullable=False, index=True)
    location = Column(String(255), nullable=False)
    max_attendees = Column(Integer, nullable=False)
    status = Column(String(32), nullable=False, default=EventStatus.SCHEDULED.value, index=True)
    payment_required = Column(Boolean, nullable=False, default=False)
    image_url = Column(String(1024), nullable=True)
    category_id = Column(
        String(36), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    organizer_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    category = relationship("Category", back_populates="events")
    organizer = relationship("User", back_populates="organized_events")
    registrations = relationship(
        "Registration", back_populates="event", cascade="all, delete-orphan", passive_deletes=True
    )
    notifications = relationship(
        "Notification", back_populates="event", cascade="all, delete-orphan", passive_deletes=True
    )


class Registration(Base):
    __tablename__ = "registrations"
    __table_args__ = (UniqueConstraint("user_id", "event_id", name="uq_registrations_user_event"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    event_id = Column(
        String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    payment_status = Column(String(32), nullable=False, default=PaymentStatus.PAID.value)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("User", back_populates="registrations")
    event = relationship("Event", back_populates="registrations")


class FavoriteCategory(Base):
    __tablename__ = "favorite_categories"
    __table_args__ = (
        UniqueConstraint("user_id", "category_id", name="uq_favorite_categories_user_category"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id = Column(
        String(36), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("User", back_populates="favorite_categories")
    category = relationship("Category", back_populates="favorited_by")

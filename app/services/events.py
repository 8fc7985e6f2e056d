"""Event catalogue: listing with pagination, CRUD, registrations and favorite categories."""

import logging
import math
from datetime import UTC, datetime

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models import (
    Category,
    Event,
    EventStatus,
    FavoriteCategory,
    PaymentStatus,
    Registration,
)
from app.schemas.auth import Identity
from app.schemas.events import (
    CategoryOut,
    EventCreate,
    EventListResponse,
    EventOut,
    EventUpdate,
    FavoriteCategoryOut,
    Pagination,
)

logger = logging.getLogger(__name__)


def _registration_counts(session: Session, event_ids: list[str]) -> dict[str, int]:
    if not event_ids:
        return {}
    rows = (
        session.query(Registration.event_id, func.count(Registration.id))
        .filter(Registration.event_id.in_(event_ids))
        .group_by(Registration.event_id)
        .all()
    )
    return {event_id: count for event_id, count in rows}


def _registered_event_ids(session: Session, user_id: str, event_ids: list[str]) -> set[str]:
    if not event_ids:
        return set()
    rows = (
        session.query(Registration.event_id)
        .filter(Registration.user_id == user_id, Registration.event_id.in_(event_ids))
        .all()
    )
    return {r[0] for r in rows}


def to_event_out(
    session: Session, events: list[Event], identity: Identity | None = None
) -> list[EventOut]:
    """Serialize events with registration counts and, for a known caller, is_registered."""
    ids = [e.id for e in events]
    counts = _registration_counts(session, ids)
    mine = _registered_event_ids(session, identity.id, ids) if identity else set()
    out: list[EventOut] = []
    for e in events:
        item = EventOut.model_validate(e)
        item.registrations_count = counts.get(e.id, 0)
        item.is_registered = (e.id in mine) if identity else None
        out.append(item)
    return out


def list_events(
    session: Session,
    *,
    page: int = 1,
    limit: int = 10,
    category_id: str | None = None,
    status: EventStatus | None = None,
    organizer_id: str | None = None,
    identity: Identity | None = None,
) -> EventListResponse:
    """Newest first; pages = ceil(total / limit)."""
    query = session.query(Event)
    if category_id:
        query = query.filter(Event.category_id == category_id)
    if status:
        query = query.filter(Event.status == status.value)
    if organizer_id:
        query = query.filter(Event.organizer_id == organizer_id)

    total = query.count()
    events = (
        query.options(joinedload(Event.category), joinedload(Event.organizer))
        .order_by(Event.created_at.desc(), Event.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return EventListResponse(
        events=to_event_out(session, events, identity),
        pagination=Pagination(
            page=page, limit=limit, total=total, pages=math.ceil(total / limit)
        ),
    )


def list_organized_events(session: Session, organizer_id: str) -> list[Event]:
    """Every event the organizer owns, newest first. Unpaged."""
    return (
        session.query(Event)
        .options(joinedload(Event.category), joinedload(Event.organizer))
        .filter(Event.organizer_id == organizer_id)
        .order_by(Event.created_at.desc(), Event.id)
        .all()
    )


def get_event(session: Session, event_id: str) -> Event:
    event = session.query(Event).filter(Event.id == event_id).first()
    if event is None:
        raise NotFoundError("Event not found")
    return event


def _require_category(session: Session, category_id: str) -> None:
    if session.query(Category.id).filter(Category.id == category_id).first() is None:
        raise ValidationError("Invalid category")


def create_event(session: Session, data: EventCreate, organizer_id: str) -> Event:
    _require_category(session, data.category_id)
    values = data.model_dump()
    values["status"] = data.status.value
    event = Event(**values, organizer_id=organizer_id)
    session.add(event)
    session.commit()
    session.refresh(event)
    logger.info("Event %s created by %s", event.id, organizer_id)
    return event


def update_event(session: Session, event: Event, data: EventUpdate) -> Event:
    changes = data.model_dump(exclude_unset=True)
    if "category_id" in changes:
        if changes["category_id"] is None:
            raise ValidationError("category_id cannot be null")
        _require_category(session, changes["category_id"])
    required = (
        "title",
        "description",
        "date_time",
        "location",
        "max_attendees",
        "payment_required",
        "status",
    )
    for field in required:
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null")
    if "status" in changes:
        changes["status"] = EventStatus(changes["status"]).value
    for field, value in changes.items():
        setattr(event, field, value)
    session.commit()
    session.refresh(event)
    return event


def delete_event(session: Session, event: Event) -> None:
    session.delete(event)
    session.commit()
    logger.info("Event %s deleted", event.id)


def register_for_event(session: Session, user_id: str, event_id: str) -> Registration:
    """
    Register a user for an event. Raises NotFoundError, ValidationError when
    the event is full, ConflictError when already registered.
    """
    event = get_event(session, event_id)
    count = session.query(Registration).filter(Registration.event_id == event.id).count()
    if count >= event.max_attendees:
        raise ValidationError("Event is full")
    existing = (
        session.query(Registration.id)
        .filter(Registration.user_id == user_id, Registration.event_id == event.id)
        .first()
    )
    if existing is not None:
        raise ConflictError("Already registered")
    registration = Registration(
        user_id=user_id,
        event_id=event.id,
        payment_status=(
            PaymentStatus.PENDING.value if event.payment_required else PaymentStatus.PAID.value
        ),
    )
    session.add(registration)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ConflictError("Already registered") from e
    session.refresh(registration)
    logger.info("User %s registered for event %s", user_id, event.id)
    return registration


def list_user_registrations(session: Session, user_id: str) -> list[Registration]:
    return (
        session.query(Registration)
        .options(joinedload(Registration.event))
        .filter(Registration.user_id == user_id)
        .order_by(Registration.created_at.desc())
        .all()
    )


def get_registration(session: Session, registration_id: str) -> Registration:
    registration = session.query(Registration).filter(Registration.id == registration_id).first()
    if registration is None:
        raise NotFoundError("Not found")
    return registration


def cancel_registration(session: Session, registration: Registration) -> None:
    session.delete(registration)
    session.commit()


def upcoming_events_for(session: Session, organizer_id: str, limit: int = 6) -> list[Event]:
    return (
        session.query(Event)
        .filter(
            Event.organizer_id == organizer_id,
            Event.status == EventStatus.SCHEDULED.value,
            Event.date_time >= datetime.now(UTC),
        )
        .order_by(Event.date_time.asc())
        .limit(limit)
        .all()
    )


def list_categories(session: Session, identity: Identity | None = None) -> list[CategoryOut]:
    """All categories by name with event counts; is_favorite only for a known caller."""
    rows = (
        session.query(Category, func.count(Event.id))
        .outerjoin(Event, Event.category_id == Category.id)
        .group_by(Category.id)
        .order_by(Category.name.asc())
        .all()
    )
    favorites: set[str] = set()
    if identity is not None:
        favorites = {
            r[0]
            for r in session.query(FavoriteCategory.category_id)
            .filter(FavoriteCategory.user_id == identity.id)
            .all()
        }
    return [
        CategoryOut(id=c.id, name=c.name, event_count=n, is_favorite=c.id in favorites)
        for c, n in rows
    ]


def get_category(
    session: Session, category_id: str, identity: Identity | None = None
) -> CategoryOut:
    category = session.query(Category).filter(Category.id == category_id).first()
    if category is None:
        raise NotFoundError("Category not found")
    event_count = session.query(func.count(Event.id)).filter(Event.category_id == category.id).scalar()
    is_favorite = False
    if identity is not None:
        is_favorite = (
            session.query(FavoriteCategory.id)
            .filter(
                FavoriteCategory.user_id == identity.id,
                FavoriteCategory.category_id == category.id,
            )
            .first()
            is not None
        )
    return CategoryOut(
        id=category.id, name=category.name, event_count=event_count or 0, is_favorite=is_favorite
    )


def create_category(session: Session, name: str) -> Category:
    if session.query(Category.id).filter(Category.name == name).first() is not None:
        raise ConflictError("Category already exists")
    category = Category(name=name)
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


def list_favorite_categories(session: Session, user_id: str) -> list[FavoriteCategoryOut]:
    favorites = (
        session.query(FavoriteCategory)
        .options(joinedload(FavoriteCategory.category))
        .filter(FavoriteCategory.user_id == user_id)
        .order_by(FavoriteCategory.created_at.desc())
        .all()
    )
    counts: dict[str, int] = {}
    if favorites:
        rows = (
            session.query(Event.category_id, func.count(Event.id))
            .filter(Event.category_id.in_([f.category_id for f in favorites]))
            .group_by(Event.category_id)
            .all()
        )
        counts = {category_id: n for category_id, n in rows}
    return [
        FavoriteCategoryOut(
            id=f.category.id,
            name=f.category.name,
            event_count=counts.get(f.category_id, 0),
            favorited_at=f.created_at,
        )
        for f in favorites
    ]


def add_favorite_category(session: Session, user_id: str, category_id: str) -> None:
    """Idempotent."""
    if session.query(Category.id).filter(Category.id == category_id).first() is None:
        raise NotFoundError("Category not found")
    exists = (
        session.query(FavoriteCategory.id)
        .filter(FavoriteCategory.user_id == user_id, FavoriteCategory.category_id == category_id)
        .first()
    )
    if exists is None:
        session.add(FavoriteCategory(user_id=user_id, category_id=category_id))
        session.commit()


def replace_favorite_categories(
    session: Session, user_id: str, category_ids: list[str]
) -> list[Category]:
    """
    Make `category_ids` the user's complete set of favorites in one transaction.
    Duplicate ids count once; any unknown id rejects the whole request.
    """
    wanted = list(dict.fromkeys(category_ids))
    found: set[str] = set()
    if wanted:
        found = {
            category_id
            for (category_id,) in session.query(Category.id).filter(Category.id.in_(wanted)).all()
        }
    if len(found) != len(wanted):
        raise ValidationError("One or more categories not found")

    session.query(FavoriteCategory).filter(FavoriteCategory.user_id == user_id).delete(
        synchronize_session=False
    )
    session.add_all(FavoriteCategory(user_id=user_id, category_id=c) for c in wanted)
    session.commit()
    logger.info("User %s replaced favorite categories (%s)", user_id, len(wanted))
    if not wanted:
        return []
    return session.query(Category).filter(Category.id.in_(wanted)).order_by(Category.name).all()


def remove_favorite_category(session: Session, user_id: str, category_id: str) -> None:
    """Idempotent."""
    session.query(FavoriteCategory).filter(
        FavoriteCategory.user_id == user_id, FavoriteCategory.category_id == category_id
    ).delete(synchronize_session=False)
    session.commit()

"""Notifications: fan-out of an organizer message to every registrant of an event."""

import logging

from sqlalchemy.orm import Session, joinedload

from app.core.errors import NotFoundError
from app.models import Event, Notification, Registration

logger = logging.getLogger(__name__)


def notify_registrants(session: Session, event: Event, sender_id: str, message: str) -> int:
    """Store one notification per registrant of `event`. Returns how many were created."""
    recipients = [
        user_id
        for (user_id,) in session.query(Registration.user_id)
        .filter(Registration.event_id == event.id)
        .all()
    ]
    session.add_all(
        Notification(user_id=user_id, organizer_id=sender_id, event_id=event.id, message=message)
        for user_id in recipients
    )
    session.commit()
    logger.info("User %s notified %s registrants of event %s", sender_id, len(recipients), event.id)
    return len(recipients)


def list_for_user(session: Session, user_id: str) -> list[Notification]:
    """Newest first."""
    return (
        session.query(Notification)
        .options(joinedload(Notification.event), joinedload(Notification.organizer))
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id)
        .all()
    )


def get_notification(session: Session, notification_id: str) -> Notification:
    notification = session.query(Notification).filter(Notification.id == notification_id).first()
    if notification is None:
        raise NotFoundError("Notification not found")
    return notification


def mark_read(session: Session, notification: Notification) -> None:
    if not notification.is_read:
        notification.is_read = True
        session.commit()

"""Refresh-token store: persisted session tokens with lazy expiry and revocation."""

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.models import RefreshToken, User

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Backends without timezone support (SQLite) hand back naive UTC datetimes."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class RefreshTokenStore:
    """
    Thin query layer over the refresh_tokens table.

    Methods flush but do not commit; the caller owns the transaction so that
    rotation (revoke old + save new) lands atomically.
    """

    def __init__(self, session: Session, settings: "Settings") -> None:
        self.session = session
        self.ttl = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)

    def save(self, user_id: str, token: str) -> RefreshToken:
        """Persist a token for user_id, expiring JWT_REFRESH_EXPIRE_DAYS from now."""
        row = RefreshToken(
            token=token,
            user_id=user_id,
            expires_at=datetime.now(UTC) + self.ttl,
        )
        self.session.add(row)
        self.session.flush()
        return row

    def validate(self, token: str) -> User | None:
        """
        Return the owner of a live token, or None.

        An expired row is deleted on the way out, so expiry is enforced even
        if the periodic sweep never runs.
        """
        row = self.session.query(RefreshToken).filter(RefreshToken.token == token).first()
        if row is None:
            return None
        if as_utc(row.expires_at) <= datetime.now(UTC):
            logger.info("Refresh token for user %s expired; removing", row.user_id)
            self.session.delete(row)
            self.session.flush()
            return None
        return row.user

    def revoke(self, token: str) -> int:
        """Delete the matching row; returns rows deleted (0 when already gone)."""
        return (
            self.session.query(RefreshToken)
            .filter(RefreshToken.token == token)
            .delete(synchronize_session=False)
        )

    def revoke_all(self, user_id: str) -> int:
        """Delete every token owned by user_id; returns rows deleted."""
        return (
            self.session.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id)
            .delete(synchronize_session=False)
        )

    def owner_of(self, token: str) -> str | None:
        row = self.session.query(RefreshToken.user_id).filter(RefreshToken.token == token).first()
        return row[0] if row else None

    def purge_expired(self) -> int:
        """Delete every row whose expiry has passed; returns rows deleted."""
        return (
            self.session.query(RefreshToken)
            .filter(RefreshToken.expires_at <= datetime.now(UTC))
            .delete(synchronize_session=False)
        )

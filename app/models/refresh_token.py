"""ORM model for persisted refresh tokens."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import relationship

from app.models.base import Base, new_id


class RefreshToken(Base):
    """
    One row per live session. The token string is opaque to the store; a row is
    deleted on logout, on rotation, on lazy expiry during lookup, or by the sweep.
    """

    __tablename__ = "refresh_tokens"

    id = Column(String(36), primary_key=True, default=new_id)
    token = Column(Text, nullable=False, unique=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("User", back_populates="refresh_tokens")

"""Session lifecycle: register, login, refresh with rotation, logout."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, CredentialError, TokenInvalidError
from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from app.models import User
from app.schemas.auth import Identity, RegisterRequest
from app.services.tokens import RefreshTokenStore

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


class AuthService:
    """
    Orchestrates credential checks, token issuance and the refresh-token store.

    Each public method commits its own transaction.
    """

    def __init__(self, session: Session, settings: "Settings") -> None:
        self.session = session
        self.settings = settings
        self.tokens = RefreshTokenStore(session, settings)

    def register(self, data: RegisterRequest) -> User:
        """Create an account. Raises ConflictError if the email or username is taken."""
        exists = (
            self.session.query(User.id)
            .filter(or_(User.email == data.email, User.username == data.username))
            .first()
        )
        if exists is not None:
            raise ConflictError("Email or username already exists")
        user = User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
            role=data.role.value,
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same email/username.
            self.session.rollback()
            raise ConflictError("Email or username already exists") from e
        self.session.refresh(user)
        logger.info("Registered user %s with role %s", user.id, user.role)
        return user

    def _issue_pair(self, user: User) -> tuple[str, str]:
        access = create_access_token(user.id, user.role, self.settings)
        refresh = create_refresh_token(user.id, user.role, self.settings)
        self.tokens.save(user.id, refresh)
        return access, refresh

    def login(self, email: str, password: str) -> tuple[str, str, User]:
        """
        Verify credentials and open a new session. Existing sessions stay valid.
        Returns (access_token, refresh_token, user).
        """
        user = self.session.query(User).filter(User.email == email).first()
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login attempt")
            raise CredentialError("Invalid credentials")
        access, refresh = self._issue_pair(user)
        self.session.commit()
        logger.info("User %s logged in", user.id)
        return access, refresh, user

    def refresh(self, refresh_token: str) -> tuple[str, str]:
        """
        Exchange a refresh token for a new pair; the presented token is revoked.

        Of two concurrent refreshes with the same token only one deletes the
        row; the other gets TokenInvalidError.
        """
        decode_refresh_token(refresh_token, self.settings)
        user = self.tokens.validate(refresh_token)
        if user is None:
            # Persist a lazy-expiry delete, if validate made one.
            self.session.commit()
            raise TokenInvalidError("Invalid or expired refresh token")
        if self.tokens.revoke(refresh_token) == 0:
            self.session.rollback()
            raise TokenInvalidError("Invalid or expired refresh token")
        access, new_refresh = self._issue_pair(user)
        self.session.commit()
        logger.info("Rotated refresh token for user %s", user.id)
        return access, new_refresh

    def logout(self, identity: Identity, refresh_token: str | None = None) -> int:
        """
        Revoke one session (the given refresh token, if it belongs to the caller)
        or, without a token (missing or empty), every session of the caller. Returns rows deleted.
        """
        if not refresh_token:
            return self.logout_all(identity)
        owner = self.tokens.owner_of(refresh_token)
        deleted = 0
        if owner == identity.id:
            deleted = self.tokens.revoke(refresh_token)
        self.session.commit()
        logger.info("User %s logged out (%s session revoked)", identity.id, deleted)
        return deleted

    def logout_all(self, identity: Identity) -> int:
        deleted = self.tokens.revoke_all(identity.id)
        self.session.commit()
        logger.info("User %s logged out of all sessions (%s revoked)", identity.id, deleted)
        return deleted

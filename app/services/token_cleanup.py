"""Periodic sweep: delete refresh tokens whose expiry has passed."""

import asyncio
import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.services.tokens import RefreshTokenStore

if TYPE_CHECKING:
    from app.core.config import Settings
    from app.core.database import Database

logger = logging.getLogger(__name__)


def run_token_cleanup(session: Session, settings: "Settings") -> int:
    """
    Delete expired refresh tokens. Returns the number of rows deleted.

    Idempotent: safe to run repeatedly. Lookups already drop expired rows
    lazily; this keeps the table from growing with abandoned sessions.
    """
    if not settings.REFRESH_TOKEN_CLEANUP_ENABLED:
        logger.info("Token cleanup is disabled (REFRESH_TOKEN_CLEANUP_ENABLED=false); skipping.")
        return 0

    deleted_count = RefreshTokenStore(session, settings).purge_expired()
    session.commit()

    if deleted_count > 0:
        logger.info("Token cleanup run: expired_refresh_tokens_deleted=%s", deleted_count)
    return deleted_count


def _cleanup_once(db: "Database", settings: "Settings") -> int:
    session = db.session()
    try:
        return run_token_cleanup(session, settings)
    finally:
        session.close()


async def token_cleanup_loop(db: "Database", settings: "Settings") -> None:
    """
    Run the sweep every REFRESH_TOKEN_CLEANUP_INTERVAL_SEC until cancelled.

    A failed run is logged and the loop carries on; request handling never
    depends on it.
    """
    interval = settings.REFRESH_TOKEN_CLEANUP_INTERVAL_SEC
    while True:
        await asyncio.sleep(interval)
        try:
            await asyncio.to_thread(_cleanup_once, db, settings)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Token cleanup error")

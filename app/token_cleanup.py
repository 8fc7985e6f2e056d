"""
CLI entrypoint for a one-shot sweep of expired refresh tokens. Run from cron, e.g.:

  python -m app.token_cleanup

Or hourly: 0 * * * * cd /path/to/eventhub && .venv/bin/python -m app.token_cleanup

The API process runs the same sweep in the background while it is up.
"""

import logging
import sys

from dotenv import load_dotenv

from app.core.config import get_settings
from app.core.database import Database
from app.core.logging_config import configure_logging
from app.services.token_cleanup import run_token_cleanup

logger = logging.getLogger(__name__)


def main() -> int:
    """Delete refresh tokens whose expiry has passed."""
    load_dotenv()
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    db = Database(settings.DATABASE_URL)
    session = db.session()
    try:
        deleted = run_token_cleanup(session, settings)
        logger.info("Token cleanup completed: expired_refresh_tokens_deleted=%s", deleted)
        return 0
    except Exception as e:
        logger.exception("Token cleanup job failed: %s", e)
        return 1
    finally:
        session.close()
        db.dispose()


if __name__ == "__main__":
    sys.exit(main())

"""Unit and integration tests for the expired refresh-token sweep."""

import asyncio
import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

from app.models import RefreshToken, User
from app.services.token_cleanup import run_token_cleanup, token_cleanup_loop
from _helpers import make_database, make_settings


class TestCleanupDisabled(unittest.TestCase):
    """When REFRESH_TOKEN_CLEANUP_ENABLED is False, run_token_cleanup does nothing."""

    def test_returns_zero_and_does_not_query(self) -> None:
        settings = MagicMock()
        settings.REFRESH_TOKEN_CLEANUP_ENABLED = False
        session = MagicMock()
        self.assertEqual(run_token_cleanup(session, settings), 0)
        session.query.assert_not_called()


class TestCleanupDeletes(unittest.TestCase):
    """run_token_cleanup commits and reports the number of rows removed."""

    def _settings(self) -> MagicMock:
        settings = MagicMock()
        settings.REFRESH_TOKEN_CLEANUP_ENABLED = True
        settings.JWT_REFRESH_EXPIRE_DAYS = 30
        return settings

    def test_nothing_expired(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 0
        self.assertEqual(run_token_cleanup(session, self._settings()), 0)
        session.commit.assert_called_once()

    def test_expired_rows_deleted(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 3
        self.assertEqual(run_token_cleanup(session, self._settings()), 3)
        session.commit.assert_called_once()


class TestCleanupIntegration(unittest.TestCase):
    """Against SQLite: expired rows go, live rows stay."""

    def test_sweep(self) -> None:
        db = make_database()
        self.addCleanup(db.dispose)
        session = db.session()
        self.addCleanup(session.close)
        user = User(username="alice", email="alice@x.com", password_hash="x", role="ATTENDEE")
        session.add(user)
        session.flush()
        now = datetime.now(UTC)
        session.add_all(
            [
                RefreshToken(token="old-1", user_id=user.id, expires_at=now - timedelta(days=1)),
                RefreshToken(token="old-2", user_id=user.id, expires_at=now - timedelta(hours=1)),
                RefreshToken(token="live", user_id=user.id, expires_at=now + timedelta(days=1)),
            ]
        )
        session.commit()

        # Disabled sweep leaves everything in place.
        self.assertEqual(run_token_cleanup(session, make_settings()), 0)
        self.assertEqual(session.query(RefreshToken).count(), 3)

        settings = make_settings(REFRESH_TOKEN_CLEANUP_ENABLED=True)
        self.assertEqual(run_token_cleanup(session, settings), 2)
        self.assertEqual([t.token for t in session.query(RefreshToken).all()], ["live"])
        # Idempotent.
        self.assertEqual(run_token_cleanup(session, settings), 0)


class TestCleanupLoop(unittest.TestCase):
    """The background loop logs failures and keeps running until cancelled."""

    def test_failure_is_logged_and_loop_continues(self) -> None:
        settings = MagicMock()
        settings.REFRESH_TOKEN_CLEANUP_INTERVAL_SEC = 0.01
        calls: list[int] = []

        def flaky(db: object, settings: object) -> int:
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("database went away")
            return 0

        async def scenario() -> None:
            task = asyncio.create_task(token_cleanup_loop(MagicMock(), settings))
            for _ in range(500):
                if len(calls) >= 2:
                    break
                await asyncio.sleep(0.01)
            task.cancel()
            with self.assertRaises(asyncio.CancelledError):
                await task

        with patch("app.services.token_cleanup._cleanup_once", side_effect=flaky):
            with self.assertLogs("app.services.token_cleanup", level="ERROR") as logs:
                asyncio.run(scenario())

        self.assertGreaterEqual(len(calls), 2)
        self.assertIn("Token cleanup error", logs.output[0])


if __name__ == "__main__":
    unittest.main()

"""Tests for the refresh-token store against an in-memory SQLite database."""

import unittest
from datetime import UTC, datetime, timedelta

from app.models import RefreshToken, User
from app.services.tokens import RefreshTokenStore, as_utc
from _helpers import make_database, make_settings


class StoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_database()
        self.addCleanup(self.db.dispose)
        self.session = self.db.session()
        self.addCleanup(self.session.close)
        self.store = RefreshTokenStore(self.session, make_settings())
        self.alice = self._user("alice")
        self.bob = self._user("bob")

    def _user(self, name: str) -> User:
        user = User(username=name, email=f"{name}@x.com", password_hash="x", role="ATTENDEE")
        self.session.add(user)
        self.session.commit()
        return user

    def _count(self, **filters: object) -> int:
        return self.session.query(RefreshToken).filter_by(**filters).count()

    def _expire(self, token: str) -> None:
        row = self.session.query(RefreshToken).filter_by(token=token).one()
        row.expires_at = datetime.now(UTC) - timedelta(seconds=1)
        self.session.commit()


class TestSave(StoreTestCase):
    def test_save_sets_expiry_thirty_days_out(self) -> None:
        row = self.store.save(self.alice.id, "tok-1")
        self.session.commit()
        delta = as_utc(row.expires_at) - datetime.now(UTC)
        self.assertGreater(delta, timedelta(days=29, hours=23))
        self.assertLessEqual(delta, timedelta(days=30))
        self.assertEqual(self._count(user_id=self.alice.id), 1)


class TestValidate(StoreTestCase):
    def test_unknown_token(self) -> None:
        self.assertIsNone(self.store.validate("missing"))

    def test_live_token_returns_owner(self) -> None:
        self.store.save(self.alice.id, "tok-1")
        self.session.commit()
        user = self.store.validate("tok-1")
        self.assertIsNotNone(user)
        self.assertEqual(user.id, self.alice.id)

    def test_expired_token_is_deleted_lazily(self) -> None:
        self.store.save(self.alice.id, "tok-1")
        self.session.commit()
        self._expire("tok-1")
        self.assertIsNone(self.store.validate("tok-1"))
        self.session.commit()
        self.assertEqual(self._count(token="tok-1"), 0)


class TestRevoke(StoreTestCase):
    def test_revoke_is_idempotent(self) -> None:
        self.store.save(self.alice.id, "tok-1")
        self.session.commit()
        self.assertEqual(self.store.revoke("tok-1"), 1)
        self.assertEqual(self.store.revoke("tok-1"), 0)
        self.session.commit()
        self.assertIsNone(self.store.validate("tok-1"))

    def test_revoke_all_only_touches_one_user(self) -> None:
        for token in ("a1", "a2", "a3"):
            self.store.save(self.alice.id, token)
        self.store.save(self.bob.id, "b1")
        self.session.commit()
        self.assertEqual(self.store.revoke_all(self.alice.id), 3)
        self.session.commit()
        self.assertEqual(self._count(user_id=self.alice.id), 0)
        self.assertEqual(self._count(user_id=self.bob.id), 1)

    def test_owner_of(self) -> None:
        self.store.save(self.bob.id, "b1")
        self.session.commit()
        self.assertEqual(self.store.owner_of("b1"), self.bob.id)
        self.assertIsNone(self.store.owner_of("nope"))


class TestPurgeExpired(StoreTestCase):
    def test_only_expired_rows_are_removed(self) -> None:
        self.store.save(self.alice.id, "old")
        self.store.save(self.alice.id, "fresh")
        self.session.commit()
        self._expire("old")
        self.assertEqual(self.store.purge_expired(), 1)
        self.session.commit()
        self.assertEqual(self._count(token="old"), 0)
        self.assertEqual(self._count(token="fresh"), 1)


class TestUserDeletionCascades(StoreTestCase):
    def test_deleting_user_removes_tokens(self) -> None:
        self.store.save(self.alice.id, "a1")
        self.session.commit()
        self.session.delete(self.alice)
        self.session.commit()
        self.assertEqual(self.session.query(RefreshToken).count(), 0)


if __name__ == "__main__":
    unittest.main()

"""Shared fixtures for API and store tests: in-memory SQLite app, user/login helpers."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient
from pydantic import SecretStr

from app.core.config import Settings
from app.core.database import Database
from app.main import create_app
from app.models import Base

TEST_SECRET = "test-access-secret"


def make_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": SecretStr(TEST_SECRET),
        "REFRESH_TOKEN_CLEANUP_ENABLED": False,
        "DB_CONNECT_RETRIES": 1,
        "DB_CONNECT_RETRY_DELAY_SEC": 0,
    }
    values.update(overrides)
    return Settings(**values)


def make_database() -> Database:
    db = Database("sqlite://")
    Base.metadata.create_all(db.engine)
    return db


def future_iso(days: int = 30) -> str:
    return (datetime.now(UTC) + timedelta(days=days)).isoformat()


class FastBcryptMixin(unittest.TestCase):
    """Drop bcrypt cost to the minimum so tests that hash passwords stay fast."""

    def setUp(self) -> None:
        super().setUp()
        patcher = patch("app.core.security.BCRYPT_ROUNDS", 4)
        patcher.start()
        self.addCleanup(patcher.stop)


class ApiTestCase(FastBcryptMixin):
    """Fresh app and empty in-memory database per test."""

    settings_overrides: dict[str, object] = {}

    def setUp(self) -> None:
        super().setUp()
        self.settings = make_settings(**self.settings_overrides)
        self.app = create_app(self.settings)
        Base.metadata.create_all(self.app.state.db.engine)
        self.addCleanup(self.app.state.db.dispose)
        self.client = TestClient(self.app)

    def register(
        self,
        username: str,
        email: str,
        password: str = "secret1",
        role: str | None = None,
    ) -> dict:
        body = {"username": username, "email": email, "password": password}
        if role is not None:
            body["role"] = role
        resp = self.client.post("/api/auth/register", json=body)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def login(self, email: str, password: str = "secret1") -> dict:
        resp = self.client.post("/api/auth/login", json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def signup_and_login(self, username: str, role: str | None = None) -> tuple[dict, dict]:
        """Register `<username>@x.com` and log in; returns (user, auth headers)."""
        email = f"{username}@x.com"
        user = self.register(username, email, role=role)
        tokens = self.login(email)
        return user, self.bearer(tokens["accessToken"])

    @staticmethod
    def bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

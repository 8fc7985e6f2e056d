"""API tests for categories, events and registrations."""

import unittest
from datetime import UTC, datetime, timedelta

from app.models import Event
from app.schemas.events import PAGE_LIMIT_MAX
from _helpers import ApiTestCase, future_iso


class CatalogueTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin_user, self.admin = self.signup_and_login("root", role="ADMIN")
        self.organizer_user, self.organizer = self.signup_and_login("olga", role="ORGANIZER")
        self.attendee_user, self.attendee = self.signup_and_login("alice")
        resp = self.client.post("/api/categories", json={"name": "Music"}, headers=self.admin)
        self.assertEqual(resp.status_code, 201, resp.text)
        self.category = resp.json()

    def create_event(self, headers: dict | None = None, **overrides: object) -> dict:
        body = {
            "title": "Jazz Night",
            "description": "An evening of live jazz.",
            "date_time": future_iso(),
            "location": "Blue Hall",
            "max_attendees": 2,
            "category_id": self.category["id"],
        }
        body.update(overrides)
        resp = self.client.post("/api/events", json=body, headers=headers or self.organizer)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()


class TestEventCrud(CatalogueTestCase):
    def test_organizer_creates_event(self) -> None:
        event = self.create_event()
        self.assertEqual(event["organizer"]["id"], self.organizer_user["id"])
        self.assertEqual(event["category"]["name"], "Music")
        self.assertEqual(event["status"], "SCHEDULED")
        self.assertEqual(event["registrations_count"], 0)

    def test_attendee_cannot_create_event(self) -> None:
        resp = self.client.post(
            "/api/events",
            json={
                "title": "Nope",
                "description": "Should not be allowed.",
                "date_time": future_iso(),
                "location": "Nowhere",
                "max_attendees": 5,
                "category_id": self.category["id"],
            },
            headers=self.attendee,
        )
        self.assertEqual(resp.status_code, 403)

    def test_validation(self) -> None:
        base = {
            "title": "Jazz Night",
            "description": "An evening of live jazz.",
            "date_time": future_iso(),
            "location": "Blue Hall",
            "max_attendees": 10,
            "category_id": self.category["id"],
        }
        cases = {
            "past date": {"date_time": future_iso(days=-1)},
            "short title": {"title": "ab"},
            "zero seats": {"max_attendees": 0},
            "bad image": {"image_url": "ftp://x"},
        }
        for name, change in cases.items():
            with self.subTest(name):
                resp = self.client.post(
                    "/api/events", json={**base, **change}, headers=self.organizer
                )
                self.assertEqual(resp.status_code, 400)

    def test_unknown_category_is_400(self) -> None:
        resp = self.client.post(
            "/api/events",
            json={
                "title": "Jazz Night",
                "description": "An evening of live jazz.",
                "date_time": future_iso(),
                "location": "Blue Hall",
                "max_attendees": 10,
                "category_id": "missing",
            },
            headers=self.organizer,
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Invalid category")

    def test_update_owner_or_admin_only(self) -> None:
        event = self.create_event()
        _, other_organizer = self.signup_and_login("oscar", role="ORGANIZER")

        resp = self.client.put(
            f"/api/events/{event['id']}", json={"title": "Hijacked"}, headers=other_organizer
        )
        self.assertEqual(resp.status_code, 403)

        resp = self.client.put(
            f"/api/events/{event['id']}", json={"title": "Late Jazz"}, headers=self.organizer
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["title"], "Late Jazz")
        self.assertEqual(resp.json()["location"], "Blue Hall")

        resp = self.client.put(
            f"/api/events/{event['id']}", json={"status": "CANCELED"}, headers=self.admin
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "CANCELED")

    def test_update_missing_event_is_404(self) -> None:
        resp = self.client.put("/api/events/missing", json={"title": "X" * 5}, headers=self.admin)
        self.assertEqual(resp.status_code, 404)

    def test_delete_is_admin_only(self) -> None:
        event = self.create_event()
        resp = self.client.delete(f"/api/events/{event['id']}", headers=self.organizer)
        self.assertEqual(resp.status_code, 403)
        resp = self.client.delete(f"/api/events/{event['id']}", headers=self.admin)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get(f"/api/events/{event['id']}").status_code, 404)

    def test_my_organized(self) -> None:
        self.create_event()
        self.create_event(title="Rock Night")
        resp = self.client.get("/api/events/my/organized", headers=self.organizer)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.json()), 2)
        resp = self.client.get("/api/events/my/organized", headers=self.attendee)
        self.assertEqual(resp.json(), [])

    def test_my_organized_is_not_paged(self) -> None:
        session = self.app.state.db.session()
        try:
            session.add_all(
                Event(
                    title=f"Event {i}",
                    description="Bulk-loaded event.",
                    date_time=datetime.now(UTC) + timedelta(days=1),
                    location="Hall",
                    max_attendees=5,
                    category_id=self.category["id"],
                    organizer_id=self.organizer_user["id"],
                )
                for i in range(PAGE_LIMIT_MAX + 5)
            )
            session.commit()
        finally:
            session.close()
        resp = self.client.get("/api/events/my/organized", headers=self.organizer)
        self.assertEqual(len(resp.json()), PAGE_LIMIT_MAX + 5)


class TestEventListing(CatalogueTestCase):
    def test_pagination(self) -> None:
        for i in range(5):
            self.create_event(title=f"Event {i}")
        resp = self.client.get("/api/events", params={"page": 2, "limit": 2})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(len(body["events"]), 2)
        self.assertEqual(body["pagination"], {"page": 2, "limit": 2, "total": 5, "pages": 3})

        last = self.client.get("/api/events", params={"page": 3, "limit": 2}).json()
        self.assertEqual(len(last["events"]), 1)

    def test_bad_paging_is_400(self) -> None:
        self.assertEqual(self.client.get("/api/events", params={"page": 0}).status_code, 400)
        self.assertEqual(self.client.get("/api/events", params={"limit": 1000}).status_code, 400)

    def test_filters(self) -> None:
        self.create_event()
        self.create_event(status="CANCELED")
        resp = self.client.get("/api/events", params={"status": "CANCELED"})
        self.assertEqual(resp.json()["pagination"]["total"], 1)
        resp = self.client.get("/api/events", params={"organizer_id": self.admin_user["id"]})
        self.assertEqual(resp.json()["pagination"]["total"], 0)

    def test_optional_auth_personalizes(self) -> None:
        event = self.create_event()
        self.client.post("/api/registrations", json={"event_id": event["id"]}, headers=self.attendee)

        anonymous = self.client.get(f"/api/events/{event['id']}").json()
        self.assertIsNone(anonymous["is_registered"])
        self.assertEqual(anonymous["registrations_count"], 1)

        mine = self.client.get(f"/api/events/{event['id']}", headers=self.attendee).json()
        self.assertTrue(mine["is_registered"])

        other = self.client.get("/api/events", headers=self.organizer).json()
        self.assertFalse(other["events"][0]["is_registered"])

    def test_bad_token_on_optional_route_is_anonymous(self) -> None:
        self.create_event()
        resp = self.client.get("/api/events", headers=self.bearer("garbage"))
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.json()["events"][0]["is_registered"])


class TestRegistrations(CatalogueTestCase):
    def test_register_and_cancel(self) -> None:
        event = self.create_event()
        resp = self.client.post(
            "/api/registrations", json={"event_id": event["id"]}, headers=self.attendee
        )
        self.assertEqual(resp.status_code, 201)
        registration = resp.json()
        self.assertEqual(registration["payment_status"], "PAID")
        self.assertEqual(registration["user_id"], self.attendee_user["id"])

        resp = self.client.get(
            f"/api/registrations/user/{self.attendee_user['id']}", headers=self.attendee
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([r["id"] for r in resp.json()], [registration["id"]])
        self.assertEqual(resp.json()[0]["event"]["title"], "Jazz Night")

        resp = self.client.delete(
            f"/api/registrations/{registration['id']}", headers=self.organizer
        )
        self.assertEqual(resp.status_code, 403)
        resp = self.client.delete(f"/api/registrations/{registration['id']}", headers=self.attendee)
        self.assertEqual(resp.status_code, 200)
        resp = self.client.delete(f"/api/registrations/{registration['id']}", headers=self.attendee)
        self.assertEqual(resp.status_code, 404)

    def test_paid_event_starts_pending(self) -> None:
        event = self.create_event(payment_required=True)
        resp = self.client.post(
            "/api/registrations", json={"event_id": event["id"]}, headers=self.attendee
        )
        self.assertEqual(resp.json()["payment_status"], "PENDING")

    def test_duplicate_and_full(self) -> None:
        event = self.create_event(max_attendees=1)
        first = self.client.post(
            "/api/registrations", json={"event_id": event["id"]}, headers=self.attendee
        )
        self.assertEqual(first.status_code, 201)
        again = self.client.post(
            "/api/registrations", json={"event_id": event["id"]}, headers=self.attendee
        )
        # Event is at capacity, so the capacity check answers first.
        self.assertEqual(again.status_code, 400)
        self.assertEqual(again.json()["message"], "Event is full")

        roomy = self.create_event(max_attendees=5)
        self.client.post("/api/registrations", json={"event_id": roomy["id"]}, headers=self.attendee)
        dup = self.client.post(
            "/api/registrations", json={"event_id": roomy["id"]}, headers=self.attendee
        )
        self.assertEqual(dup.status_code, 409)

    def test_unknown_event_is_404(self) -> None:
        resp = self.client.post(
            "/api/registrations", json={"event_id": "missing"}, headers=self.attendee
        )
        self.assertEqual(resp.status_code, 404)

    def test_only_self_or_admin_lists_registrations(self) -> None:
        path = f"/api/registrations/user/{self.attendee_user['id']}"
        self.assertEqual(self.client.get(path, headers=self.organizer).status_code, 403)
        self.assertEqual(self.client.get(path, headers=self.admin).status_code, 200)


class TestCategories(CatalogueTestCase):
    def test_listing_with_counts_and_favorites(self) -> None:
        self.client.post("/api/categories", json={"name": "Art"}, headers=self.admin)
        self.create_event()

        anonymous = self.client.get("/api/categories").json()
        self.assertEqual([c["name"] for c in anonymous], ["Art", "Music"])
        self.assertEqual(anonymous[1]["event_count"], 1)
        self.assertFalse(any(c["is_favorite"] for c in anonymous))

        resp = self.client.post(
            f"/api/categories/{self.category['id']}/favorite", headers=self.attendee
        )
        self.assertEqual(resp.status_code, 200)
        # Idempotent.
        self.client.post(f"/api/categories/{self.category['id']}/favorite", headers=self.attendee)

        mine = self.client.get("/api/categories", headers=self.attendee).json()
        self.assertEqual([c["is_favorite"] for c in mine], [False, True])

        favorites = self.client.get("/api/categories/favorites/my", headers=self.attendee).json()
        self.assertEqual(len(favorites), 1)
        self.assertEqual(favorites[0]["name"], "Music")
        self.assertEqual(favorites[0]["event_count"], 1)

        self.client.delete(f"/api/categories/{self.category['id']}/favorite", headers=self.attendee)
        self.assertEqual(
            self.client.get("/api/categories/favorites/my", headers=self.attendee).json(), []
        )

    def test_category_detail(self) -> None:
        self.create_event()
        path = f"/api/categories/{self.category['id']}"
        anonymous = self.client.get(path).json()
        self.assertEqual(anonymous["name"], "Music")
        self.assertEqual(anonymous["event_count"], 1)
        self.assertFalse(anonymous["is_favorite"])

        self.client.post(f"{path}/favorite", headers=self.attendee)
        self.assertTrue(self.client.get(path, headers=self.attendee).json()["is_favorite"])
        self.assertFalse(self.client.get(path, headers=self.organizer).json()["is_favorite"])
        self.assertEqual(self.client.get("/api/categories/missing").status_code, 404)

    def test_replace_favorites(self) -> None:
        art = self.client.post("/api/categories", json={"name": "Art"}, headers=self.admin).json()
        sport = self.client.post("/api/categories", json={"name": "Sport"}, headers=self.admin).json()
        self.client.post(f"/api/categories/{self.category['id']}/favorite", headers=self.attendee)

        resp = self.client.put(
            "/api/categories/favorites",
            json={"categoryIds": [sport["id"], art["id"], art["id"]]},
            headers=self.attendee,
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["message"], "Favorite categories updated")
        self.assertEqual([c["name"] for c in resp.json()["favorites"]], ["Art", "Sport"])
        favorites = self.client.get("/api/categories/favorites/my", headers=self.attendee).json()
        self.assertEqual(sorted(f["name"] for f in favorites), ["Art", "Sport"])

        resp = self.client.put(
            "/api/categories/favorites", json={"categoryIds": []}, headers=self.attendee
        )
        self.assertEqual(resp.json()["favorites"], [])
        self.assertEqual(
            self.client.get("/api/categories/favorites/my", headers=self.attendee).json(), []
        )

    def test_replace_favorites_rejects_bad_input_without_changes(self) -> None:
        self.client.post(f"/api/categories/{self.category['id']}/favorite", headers=self.attendee)
        for body in (
            {"categoryIds": [self.category["id"], "missing"]},
            {"categoryIds": "not-a-list"},
            {},
        ):
            with self.subTest(body=body):
                resp = self.client.put(
                    "/api/categories/favorites", json=body, headers=self.attendee
                )
                self.assertEqual(resp.status_code, 400)
        favorites = self.client.get("/api/categories/favorites/my", headers=self.attendee).json()
        self.assertEqual([f["name"] for f in favorites], ["Music"])

    def test_replace_favorites_requires_bearer(self) -> None:
        resp = self.client.put("/api/categories/favorites", json={"categoryIds": []})
        self.assertEqual(resp.status_code, 401)

    def test_duplicate_category_conflicts(self) -> None:
        resp = self.client.post("/api/categories", json={"name": "Music"}, headers=self.admin)
        self.assertEqual(resp.status_code, 409)

    def test_favorite_unknown_category_is_404(self) -> None:
        resp = self.client.post("/api/categories/missing/favorite", headers=self.attendee)
        self.assertEqual(resp.status_code, 404)

    def test_only_admin_creates_categories(self) -> None:
        resp = self.client.post("/api/categories", json={"name": "Sports"}, headers=self.organizer)
        self.assertEqual(resp.status_code, 403)


if __name__ == "__main__":
    unittest.main()

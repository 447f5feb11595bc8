"""
Test API endpoints.
"""
from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.models.events import EventStatus
from app.models.hubs import Hub
from app.models.notifications import Notification, NotificationType
from app.models.registrations import Registration, RegistrationStatus


class TestHubEndpoints:
    def test_list_active_hubs_sorted(self, client: TestClient, db_session: Session, hub):
        db_session.add_all([
            Hub(name="Berlin", country="DE", is_active=True),
            Hub(name="Zurich", country="CH", is_active=False),
        ])
        db_session.commit()

        response = client.get("/hubs")

        assert response.status_code == 200
        assert [h["name"] for h in response.json()] == ["Amsterdam", "Berlin"]

    def test_hub_detail(self, client: TestClient, hub):
        response = client.get(f"/hubs/{hub.id}")

        assert response.status_code == 200
        assert response.json()["deregistration_deadline_hours"] == 24

    def test_hub_not_found(self, client: TestClient):
        assert client.get("/hubs/999").status_code == 404


class TestEventEndpoints:
    """Test event-related API endpoints."""

    def test_event_snapshot(self, client: TestClient, make_event):
        event = make_event(capacity=4, registered_count=4, waitlist_count=2, price_amount=15.0)

        response = client.get(f"/events/{event.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["capacity"] == 4
        assert data["registered_count"] == 4
        assert data["waitlist_count"] == 2
        assert data["is_full"] is True
        assert data["spots_left"] == 0
        assert data["price_display"] == "EUR 15.00"

    def test_event_snapshot_not_found(self, client: TestClient):
        response = client.get("/events/99999")
        assert response.status_code == 404

    def test_browse_events(self, client: TestClient, make_event, hub, now):
        learn = make_event(title="Negotiation Workshop", category="Learn")
        make_event(title="Walk", category="Grow", starts_at=now + timedelta(days=1))
        make_event(title="Hidden Draft", status=EventStatus.DRAFT.value)

        response = client.get("/events", params={"hub_id": hub.id})
        assert response.status_code == 200
        assert [e["title"] for e in response.json()] == ["Walk", "Negotiation Workshop"]

        response = client.get("/events", params={"hub_id": hub.id, "category": "Learn"})
        assert [e["id"] for e in response.json()] == [learn.id]

        response = client.get("/events", params={"hub_id": hub.id, "q": "negotiation"})
        assert [e["id"] for e in response.json()] == [learn.id]

    def test_browse_events_rejects_unknown_category(self, client: TestClient, hub):
        response = client.get("/events", params={"hub_id": hub.id, "category": "Party"})
        assert response.status_code == 422


class TestRegistrationEndpoints:
    """Test register/deregister endpoints."""

    def test_register_created(self, client: TestClient, make_event):
        event = make_event(capacity=10)

        response = client.post(f"/events/{event.id}/register", json={"user_id": 42})

        assert response.status_code == 201
        data = response.json()
        assert data["event_id"] == event.id
        assert data["user_id"] == 42
        assert data["status"] == RegistrationStatus.REGISTERED.value
        assert data["position"] is None

        snapshot = client.get(f"/events/{event.id}").json()
        assert snapshot["registered_count"] == 1

    def test_register_replay_returns_existing(self, client: TestClient, make_event):
        event = make_event()

        first = client.post(f"/events/{event.id}/register", json={"user_id": 42})
        second = client.post(f"/events/{event.id}/register", json={"user_id": 42})

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["id"] == first.json()["id"]

    def test_register_full_event_waitlists(self, client: TestClient, make_event):
        event = make_event(capacity=1)

        client.post(f"/events/{event.id}/register", json={"user_id": 1})
        response = client.post(f"/events/{event.id}/register", json={"user_id": 2})

        assert response.status_code == 201
        assert response.json()["status"] == RegistrationStatus.WAITLISTED.value
        assert response.json()["position"] == 1

    def test_register_missing_event(self, client: TestClient):
        response = client.post("/events/99999/register", json={"user_id": 1})
        assert response.status_code == 404

    def test_register_unpublished_event(self, client: TestClient, make_event):
        event = make_event(status=EventStatus.CANCELED.value)

        response = client.post(f"/events/{event.id}/register", json={"user_id": 1})

        assert response.status_code == 422
        assert "canceled" in response.json()["detail"]

    def test_register_validation(self, client: TestClient, make_event):
        event = make_event()
        response = client.post(f"/events/{event.id}/register", json={})
        assert response.status_code == 422

    def test_deregister_promotes_waitlist(self, client: TestClient, db_session: Session, make_event):
        event = make_event(capacity=1)
        seated = client.post(f"/events/{event.id}/register", json={"user_id": 1}).json()
        waiting = client.post(f"/events/{event.id}/register", json={"user_id": 2}).json()

        response = client.post(f"/registrations/{seated['id']}/deregister")

        assert response.status_code == 204
        assert response.content == b""
        assert client.get(f"/registrations/{seated['id']}").json()["status"] == "canceled"
        promoted = client.get(f"/registrations/{waiting['id']}").json()
        assert promoted["status"] == "registered"
        assert promoted["position"] is None

        snapshot = client.get(f"/events/{event.id}").json()
        assert snapshot["registered_count"] == 1
        assert snapshot["waitlist_count"] == 0

    def test_deregister_non_deregisterable(self, client: TestClient, make_event):
        event = make_event(is_non_deregisterable=True)
        registration = client.post(f"/events/{event.id}/register", json={"user_id": 1}).json()

        response = client.post(f"/registrations/{registration['id']}/deregister")

        assert response.status_code == 403

    def test_deregister_after_deadline(self, client: TestClient, make_event, now):
        event = make_event(starts_at=now + timedelta(hours=5))
        registration = client.post(f"/events/{event.id}/register", json={"user_id": 1}).json()

        response = client.post(f"/registrations/{registration['id']}/deregister")

        assert response.status_code == 409
        assert "deadline" in response.json()["detail"]

    def test_deregister_twice(self, client: TestClient, make_event):
        event = make_event()
        registration = client.post(f"/events/{event.id}/register", json={"user_id": 1}).json()

        assert client.post(f"/registrations/{registration['id']}/deregister").status_code == 204
        assert client.post(f"/registrations/{registration['id']}/deregister").status_code == 409

    def test_deregister_missing(self, client: TestClient):
        assert client.post("/registrations/99999/deregister").status_code == 404
        assert client.get("/registrations/99999").status_code == 404

    def test_register_when_lock_server_down(self, client: TestClient, make_event, monkeypatch):
        import fakeredis

        server = fakeredis.FakeServer()
        server.connected = False
        monkeypatch.setattr(
            "app.services.registrations.get_redis_client",
            lambda: fakeredis.FakeRedis(server=server, decode_responses=True),
        )
        event = make_event()

        response = client.post(f"/events/{event.id}/register", json={"user_id": 1})

        assert response.status_code == 503

    def test_deregister_when_store_down(self, client: TestClient, make_event, monkeypatch):
        event = make_event()
        registration = client.post(f"/events/{event.id}/register", json={"user_id": 1}).json()

        def unavailable(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("db down"))

        monkeypatch.setattr("app.services.registrations.ledger.get_registration", unavailable)

        response = client.post(f"/registrations/{registration['id']}/deregister")

        assert response.status_code == 503


class TestUserEndpoints:
    def test_my_registrations_and_events(self, client: TestClient, make_event, now):
        first = make_event(title="First")
        second = make_event(title="Second", starts_at=now + timedelta(days=3))
        kept = client.post(f"/events/{first.id}/register", json={"user_id": 8}).json()
        dropped = client.post(f"/events/{second.id}/register", json={"user_id": 8}).json()
        client.post(f"/registrations/{dropped['id']}/deregister")

        all_rows = client.get("/users/8/registrations").json()
        active_rows = client.get("/users/8/registrations", params={"active_only": True}).json()
        assert {r["id"] for r in all_rows} == {kept["id"], dropped["id"]}
        assert [r["id"] for r in active_rows] == [kept["id"]]

        upcoming = client.get("/users/8/events").json()
        assert [e["title"] for e in upcoming] == ["First"]
        assert client.get("/users/8/events", params={"when": "past"}).json() == []

    def test_user_events_rejects_unknown_scope(self, client: TestClient):
        assert client.get("/users/8/events", params={"when": "someday"}).status_code == 422


class TestNotificationEndpoints:
    def _seed(self, db_session: Session, user_id: int, count: int) -> list[Notification]:
        notifications = [
            Notification(user_id=user_id, title=f"Note {i}", body="", type=NotificationType.ANNOUNCEMENT.value)
            for i in range(count)
        ]
        db_session.add_all(notifications)
        db_session.commit()
        for notification in notifications:
            db_session.refresh(notification)
        return notifications

    def test_inbox_and_mark_read(self, client: TestClient, db_session: Session):
        notes = self._seed(db_session, user_id=3, count=3)
        self._seed(db_session, user_id=4, count=1)

        inbox = client.get("/users/3/notifications").json()
        assert inbox["unread_count"] == 3
        assert [n["id"] for n in inbox["items"]] == [n.id for n in reversed(notes)]

        response = client.post(f"/notifications/{notes[0].id}/read")
        assert response.status_code == 200
        assert response.json()["is_read"] is True
        assert client.get("/users/3/notifications").json()["unread_count"] == 2

        response = client.post("/users/3/notifications/read-all")
        assert response.json() == {"updated": 2}
        assert client.get("/users/3/notifications").json()["unread_count"] == 0
        assert client.get("/users/4/notifications").json()["unread_count"] == 1

    def test_mark_read_not_found(self, client: TestClient):
        assert client.post("/notifications/99999/read").status_code == 404


class TestAPIIntegration:
    """Test complete API workflows."""

    def test_capacity_two_walkthrough(self, client: TestClient, db_session: Session, make_event, notification_task):
        event = make_event(capacity=2)

        u1 = client.post(f"/events/{event.id}/register", json={"user_id": 1}).json()
        client.post(f"/events/{event.id}/register", json={"user_id": 2})
        u3 = client.post(f"/events/{event.id}/register", json={"user_id": 3}).json()
        assert u3["status"] == "waitlisted"
        assert u3["position"] == 1

        assert client.post(f"/registrations/{u1['id']}/deregister").status_code == 204

        snapshot = client.get(f"/events/{event.id}").json()
        assert snapshot["registered_count"] == 2
        assert snapshot["waitlist_count"] == 0
        assert client.get(f"/registrations/{u3['id']}").json()["status"] == "registered"

        changes = [c.args[1] for c in notification_task.delay.call_args_list]
        assert changes == ["registered", "registered", "waitlisted", "canceled", "promoted"]
        assert db_session.query(Registration).filter(Registration.event_id == event.id).count() == 3

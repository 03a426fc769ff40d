from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlmodel import Session

from mmc_admin.crud.contact import contact_crud
from mmc_admin.models.contact import ContactSubmission


def submit(client: TestClient, **overrides) -> dict:
    payload = {
        "name": "Carlos Mendes",
        "email": "carlos@example.com",
        "subject": "Project inquiry",
        "message": "We would like a quote for a new website.",
    }
    payload.update(overrides)
    response = client.post("/api/contact-submissions", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["submission"]


class TestCreateSubmission:
    def test_public_create(self, client: TestClient):
        response = client.post("/api/contact-submissions", json={
            "name": "Carlos", "email": "carlos@example.com",
            "subject": "Hello", "message": "Hi there", "phone": "+258 84 000 0000"
        })

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Contact submission created successfully"
        submission = data["submission"]
        assert submission["read"] is False
        assert submission["replied"] is False
        assert submission["priority"] == "medium"
        assert submission["source"] == "website"

    def test_invalid_email(self, client: TestClient):
        response = client.post("/api/contact-submissions", json={
            "name": "Carlos", "email": "not-an-email", "subject": "Hi", "message": "Hi"
        })
        assert response.status_code == 400
        assert response.json()["fields"] == ["email"]

    def test_invalid_priority(self, client: TestClient):
        response = client.post("/api/contact-submissions", json={
            "name": "Carlos", "email": "c@example.com", "subject": "Hi", "message": "Hi", "priority": "urgent"
        })
        assert response.status_code == 400


class TestAdminSubmissions:
    def test_list_requires_admin(self, client: TestClient):
        assert client.get("/api/contact-submissions").status_code == 401

    def test_list_and_filter(self, client: TestClient, admin_headers):
        submit(client, name="First")
        submit(client, name="Urgent", priority="high")

        response = client.get("/api/contact-submissions", headers=admin_headers)
        assert len(response.json()) == 2

        response = client.get("/api/contact-submissions", headers=admin_headers, params={"priority": "high"})
        assert [s["name"] for s in response.json()] == ["Urgent"]

        response = client.get("/api/contact-submissions", headers=admin_headers, params={"read": "maybe"})
        assert response.status_code == 400

    def test_get_by_id(self, client: TestClient, admin_headers):
        created = submit(client)

        response = client.get(f"/api/contact-submissions/{created['id']}", headers=admin_headers)
        assert response.json()["email"] == "carlos@example.com"
        assert client.get("/api/contact-submissions/0", headers=admin_headers).status_code == 400
        assert client.get("/api/contact-submissions/55", headers=admin_headers).status_code == 404

    def test_mark_read(self, client: TestClient, admin_headers):
        created = submit(client)

        response = client.put(f"/api/contact-submissions/{created['id']}/read", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Submission marked as read"
        assert response.json()["submission"]["read"] is True

    def test_mark_unread(self, client: TestClient, admin_headers):
        created = submit(client)
        client.put(f"/api/contact-submissions/{created['id']}/read", headers=admin_headers)

        response = client.put(
            f"/api/contact-submissions/{created['id']}/read", headers=admin_headers, json={"read": False}
        )
        assert response.json()["submission"]["read"] is False

    def test_mark_replied_also_marks_read(self, client: TestClient, admin_headers):
        created = submit(client)

        response = client.put(f"/api/contact-submissions/{created['id']}/replied", headers=admin_headers)

        submission = response.json()["submission"]
        assert response.json()["message"] == "Submission marked as replied"
        assert submission["replied"] is True
        assert submission["read"] is True

    def test_set_priority(self, client: TestClient, admin_headers):
        created = submit(client)

        response = client.put(
            f"/api/contact-submissions/{created['id']}/priority", headers=admin_headers, json={"priority": "low"}
        )
        assert response.json()["submission"]["priority"] == "low"

        response = client.put(
            f"/api/contact-submissions/{created['id']}/priority", headers=admin_headers, json={"priority": "asap"}
        )
        assert response.status_code == 400

    def test_delete(self, client: TestClient, admin_headers):
        created = submit(client)

        response = client.delete(f"/api/contact-submissions/{created['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert client.get(f"/api/contact-submissions/{created['id']}", headers=admin_headers).status_code == 404


class TestSubmissionStats:
    def test_stats(self, client: TestClient, admin_headers):
        first = submit(client)
        submit(client, priority="high")
        submit(client, priority="high")
        client.put(f"/api/contact-submissions/{first['id']}/read", headers=admin_headers)

        data = client.get("/api/contact-submissions/stats/overview", headers=admin_headers).json()

        assert data["totalSubmissions"] == 3
        assert data["unreadSubmissions"] == 2
        assert data["readSubmissions"] == 1
        assert data["highPrioritySubmissions"] == 2
        assert data["todaySubmissions"] == 3

    def test_today_excludes_older_submissions(self, session: Session):
        now = datetime(2025, 3, 4, 15, 30, tzinfo=timezone.utc)
        session.add(ContactSubmission(name="a", email="a@example.com", subject="s", message="m",
                                      created_at=now - timedelta(days=1)))
        session.add(ContactSubmission(name="b", email="b@example.com", subject="s", message="m",
                                      created_at=now.replace(hour=1)))
        session.commit()

        stats = contact_crud.get_stats(session, now=now)
        assert stats["total_submissions"] == 2
        assert stats["today_submissions"] == 1

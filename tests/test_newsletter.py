import asyncio
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from mmc_admin.core import email as email_service
from mmc_admin.core.storage import UploadManager, NEWSLETTERS
from mmc_admin.crud.newsletter import newsletter_crud
from mmc_admin.models.newsletter import NewsletterCampaign, CampaignStatus

PDF_BYTES = b"%PDF-1.4\n% test newsletter\n%%EOF\n"


def subscribe(client: TestClient, email: str, name: str = None):
    payload = {"email": email}
    if name:
        payload["name"] = name
    return client.post("/api/newsletter/subscribers", json=payload)


def upload_pdf(client: TestClient, headers, **overrides):
    form = {"name": "March Issue", "category": "monthly", "date": "2025-03-01"}
    form.update(overrides)
    return client.post(
        "/api/newsletter/upload",
        headers=headers,
        data=form,
        files={"pdf": ("march-2025.pdf", PDF_BYTES, "application/pdf")},
    )


class TestSubscribers:
    def test_subscribe(self, client: TestClient):
        response = subscribe(client, "Reader@Example.com", "Reader")

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Successfully subscribed to newsletter"
        subscriber = data["subscriber"]
        assert subscriber["email"] == "reader@example.com"
        assert subscriber["unsubscribed"] is False
        assert subscriber["preferences"] == {"frequency": "weekly", "categories": []}

    def test_duplicate_subscription(self, client: TestClient):
        subscribe(client, "reader@example.com")

        response = subscribe(client, "READER@example.com")

        assert response.status_code == 400
        assert response.json() == {"error": "Email is already subscribed"}

    def test_concurrent_duplicate_subscription(self, client: TestClient):
        subscribe(client, "reader@example.com")

        # Both requests passed the lookup; the unique index decides
        with patch.object(newsletter_crud, "get_subscriber_by_email", return_value=None):
            response = subscribe(client, "reader@example.com")

        assert response.status_code == 400
        assert response.json() == {"error": "Email is already subscribed"}
        assert subscribe(client, "second@example.com").status_code == 201

    def test_invalid_email(self, client: TestClient):
        response = subscribe(client, "nope")
        assert response.status_code == 400

    def test_resubscribe_through_public_form(self, client: TestClient, admin_headers):
        created = subscribe(client, "reader@example.com").json()["subscriber"]
        unsubscribed = client.put(
            f"/api/newsletter/subscribers/{created['id']}/unsubscribe", headers=admin_headers
        ).json()["subscriber"]
        assert unsubscribed["unsubscribed"] is True
        assert unsubscribed["unsubscribedAt"] is not None

        response = subscribe(client, "reader@example.com")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Successfully resubscribed to newsletter"
        assert data["subscriber"]["id"] == created["id"]
        assert data["subscriber"]["unsubscribed"] is False
        assert data["subscriber"]["unsubscribedAt"] is None

    def test_admin_resubscribe(self, client: TestClient, admin_headers):
        created = subscribe(client, "reader@example.com").json()["subscriber"]
        url = f"/api/newsletter/subscribers/{created['id']}"

        # Already active
        assert client.put(f"{url}/resubscribe", headers=admin_headers).status_code == 400

        client.put(f"{url}/unsubscribe", headers=admin_headers)
        response = client.put(f"{url}/resubscribe", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["subscriber"]["unsubscribedAt"] is None

    def test_list_and_filter(self, client: TestClient, admin_headers):
        first = subscribe(client, "a@example.com").json()["subscriber"]
        subscribe(client, "b@example.com")
        client.put(f"/api/newsletter/subscribers/{first['id']}/unsubscribe", headers=admin_headers)

        assert client.get("/api/newsletter/subscribers").status_code == 401

        response = client.get("/api/newsletter/subscribers", headers=admin_headers)
        assert len(response.json()) == 2

        response = client.get(
            "/api/newsletter/subscribers", headers=admin_headers, params={"unsubscribed": "true"}
        )
        assert [s["email"] for s in response.json()] == ["a@example.com"]

    def test_update_preferences(self, client: TestClient, admin_headers):
        created = subscribe(client, "reader@example.com").json()["subscriber"]

        response = client.put(
            f"/api/newsletter/subscribers/{created['id']}",
            headers=admin_headers,
            json={"name": "Renamed", "preferences": {"frequency": "monthly", "categories": ["news"]}},
        )

        assert response.status_code == 200
        subscriber = response.json()["subscriber"]
        assert subscriber["name"] == "Renamed"
        assert subscriber["preferences"] == {"frequency": "monthly", "categories": ["news"]}

    def test_update_rejects_unknown_frequency(self, client: TestClient, admin_headers):
        created = subscribe(client, "reader@example.com").json()["subscriber"]
        response = client.put(
            f"/api/newsletter/subscribers/{created['id']}",
            headers=admin_headers,
            json={"preferences": {"frequency": "hourly"}},
        )
        assert response.status_code == 400

    def test_delete(self, client: TestClient, admin_headers):
        created = subscribe(client, "reader@example.com").json()["subscriber"]

        response = client.delete(f"/api/newsletter/subscribers/{created['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert client.get(
            f"/api/newsletter/subscribers/{created['id']}", headers=admin_headers
        ).status_code == 404


class TestCampaigns:
    def test_send_to_all(self, client: TestClient, admin_headers):
        subscribe(client, "a@example.com")
        subscribe(client, "b@example.com")

        response = client.post("/api/newsletter/send", headers=admin_headers, json={
            "subject": "Hello", "content": "News of the month"
        })

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Newsletter sent successfully to 2 recipients"
        campaign = data["campaign"]
        assert campaign["status"] == "sent"
        assert campaign["recipientCount"] == 2
        assert campaign["sentTo"] == "all"
        assert campaign["sentAt"] is not None
        assert campaign["deliveryStats"] == {"delivered": 2, "bounced": 0, "opened": 0, "clicked": 0}

    def test_send_skips_unsubscribed(self, client: TestClient, admin_headers):
        first = subscribe(client, "a@example.com").json()["subscriber"]
        subscribe(client, "b@example.com")
        client.put(f"/api/newsletter/subscribers/{first['id']}/unsubscribe", headers=admin_headers)

        with patch("mmc_admin.core.email.send_newsletter_email", new=AsyncMock(return_value=True)) as sender:
            response = client.post("/api/newsletter/send", headers=admin_headers, json={
                "subject": "Hello", "content": "Body"
            })

        assert response.json()["campaign"]["recipientCount"] == 1
        sender.assert_awaited_once()
        assert sender.await_args.kwargs["to_email"] == "b@example.com"

    def test_send_to_selected(self, client: TestClient, admin_headers):
        first = subscribe(client, "a@example.com").json()["subscriber"]
        subscribe(client, "b@example.com")

        response = client.post("/api/newsletter/send", headers=admin_headers, json={
            "subject": "Hello", "content": "Body", "sendTo": "selected", "subscriberIds": [first["id"]]
        })

        campaign = response.json()["campaign"]
        assert campaign["recipientCount"] == 1
        assert campaign["subscriberIds"] == [first["id"]]

    def test_selected_requires_ids(self, client: TestClient, admin_headers):
        subscribe(client, "a@example.com")
        response = client.post("/api/newsletter/send", headers=admin_headers, json={
            "subject": "Hello", "content": "Body", "sendTo": "selected"
        })
        assert response.status_code == 400

    def test_no_recipients(self, client: TestClient, admin_headers, session: Session):
        response = client.post("/api/newsletter/send", headers=admin_headers, json={
            "subject": "Hello", "content": "Body"
        })

        assert response.status_code == 400
        assert response.json()["error"] == "No recipients found"
        assert session.exec(select(NewsletterCampaign)).all() == []

    def test_all_deliveries_fail(self, client: TestClient, admin_headers, session: Session):
        subscribe(client, "a@example.com")
        subscribe(client, "b@example.com")

        with patch("mmc_admin.core.email.send_newsletter_email", new=AsyncMock(return_value=False)):
            response = client.post("/api/newsletter/send", headers=admin_headers, json={
                "subject": "Hello", "content": "Body"
            })

        assert response.status_code == 502
        campaign_id = response.json()["campaignId"]
        campaign = session.get(NewsletterCampaign, campaign_id)
        assert campaign.status == CampaignStatus.failed
        assert campaign.delivery_stats["bounced"] == 2
        assert campaign.sent_at is None

    def test_partial_delivery_is_sent(self, client: TestClient, admin_headers):
        subscribe(client, "a@example.com")
        subscribe(client, "b@example.com")

        sender = AsyncMock(side_effect=[True, ConnectionError("smtp down")])
        with patch("mmc_admin.core.email.send_newsletter_email", new=sender):
            response = client.post("/api/newsletter/send", headers=admin_headers, json={
                "subject": "Hello", "content": "Body"
            })

        assert response.status_code == 200
        stats = response.json()["campaign"]["deliveryStats"]
        assert stats["delivered"] == 1
        assert stats["bounced"] == 1

    def test_list_get_delete_campaigns(self, client: TestClient, admin_headers):
        subscribe(client, "a@example.com")
        sent = client.post("/api/newsletter/send", headers=admin_headers, json={
            "subject": "Hello", "content": "Body"
        }).json()["campaign"]

        listed = client.get("/api/newsletter/campaigns", headers=admin_headers).json()
        assert [c["id"] for c in listed] == [sent["id"]]

        filtered = client.get(
            "/api/newsletter/campaigns", headers=admin_headers, params={"status": "failed"}
        ).json()
        assert filtered == []

        assert client.get(f"/api/newsletter/campaigns/{sent['id']}", headers=admin_headers).status_code == 200
        assert client.delete(f"/api/newsletter/campaigns/{sent['id']}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/newsletter/campaigns/{sent['id']}", headers=admin_headers).status_code == 404


class TestUploads:
    def test_upload_pdf(self, client: TestClient, admin_headers, upload_manager: UploadManager):
        response = upload_pdf(client, admin_headers)

        assert response.status_code == 201, response.text
        data = response.json()
        assert data["message"] == "Newsletter uploaded successfully"
        newsletter = data["newsletter"]
        assert newsletter["originalName"] == "march-2025.pdf"
        assert newsletter["fileSize"] == len(PDF_BYTES)
        assert newsletter["downloadCount"] == 0
        assert newsletter["date"].startswith("2025-03-01")
        assert newsletter["filename"].startswith("newsletter-")
        assert upload_manager.exists(newsletter["filename"], NEWSLETTERS)

    def test_upload_requires_pdf_file(self, client: TestClient, admin_headers):
        response = client.post(
            "/api/newsletter/upload",
            headers=admin_headers,
            data={"name": "March Issue", "category": "monthly", "date": "2025-03-01"},
            files={"other": ("x.bin", b"123", "application/octet-stream")},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "PDF file is required"

    def test_upload_rejects_non_pdf(self, client: TestClient, admin_headers, upload_manager: UploadManager):
        response = client.post(
            "/api/newsletter/upload",
            headers=admin_headers,
            data={"name": "March Issue", "category": "monthly", "date": "2025-03-01"},
            files={"pdf": ("march.png", b"\x89PNG", "image/png")},
        )
        assert response.status_code == 415
        assert list((upload_manager.upload_dir / "newsletters").iterdir()) == []

    def test_upload_rejects_bad_category(self, client: TestClient, admin_headers):
        response = upload_pdf(client, admin_headers, category="yearly")
        assert response.status_code == 400
        assert response.json()["fields"] == ["category"]

    def test_public_list_hides_inactive(self, client: TestClient, admin_headers):
        first = upload_pdf(client, admin_headers, name="Visible").json()["newsletter"]
        second = upload_pdf(client, admin_headers, name="Retired").json()["newsletter"]
        client.put(f"/api/newsletter/uploads/{second['id']}", headers=admin_headers, json={"active": False})

        response = client.get("/api/newsletter/uploads")

        assert [n["id"] for n in response.json()] == [first["id"]]

    def test_download(self, client: TestClient, admin_headers, session: Session):
        newsletter = upload_pdf(client, admin_headers).json()["newsletter"]

        response = client.get(f"/api/newsletter/uploads/{newsletter['id']}/download")

        assert response.status_code == 200
        assert response.content == PDF_BYTES
        assert response.headers["content-type"] == "application/pdf"
        assert "march-2025.pdf" in response.headers["content-disposition"]
        assert client.get(f"/api/newsletter/uploads/{newsletter['id']}").json()["downloadCount"] == 1

    def test_download_missing_file(self, client: TestClient, admin_headers, upload_manager: UploadManager):
        newsletter = upload_pdf(client, admin_headers).json()["newsletter"]
        upload_manager.resolve(newsletter["filename"], NEWSLETTERS).unlink()

        response = client.get(f"/api/newsletter/uploads/{newsletter['id']}/download")

        assert response.status_code == 404
        assert response.json() == {"error": "File not found"}
        assert client.get(f"/api/newsletter/uploads/{newsletter['id']}").json()["downloadCount"] == 0

    def test_replace_pdf(self, client: TestClient, admin_headers, upload_manager: UploadManager):
        newsletter = upload_pdf(client, admin_headers).json()["newsletter"]
        old_path = upload_manager.resolve(newsletter["filename"], NEWSLETTERS)

        response = client.put(
            f"/api/newsletter/uploads/{newsletter['id']}",
            headers=admin_headers,
            data={"name": "March Issue (fixed)"},
            files={"pdf": ("march-fixed.pdf", PDF_BYTES + b"\n", "application/pdf")},
        )

        assert response.status_code == 200
        updated = response.json()["newsletter"]
        assert updated["name"] == "March Issue (fixed)"
        assert updated["originalName"] == "march-fixed.pdf"
        assert updated["filename"] != newsletter["filename"]
        assert not old_path.exists()

    def test_delete_removes_file(self, client: TestClient, admin_headers, upload_manager: UploadManager):
        newsletter = upload_pdf(client, admin_headers).json()["newsletter"]
        path = upload_manager.resolve(newsletter["filename"], NEWSLETTERS)

        response = client.delete(f"/api/newsletter/uploads/{newsletter['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert not path.exists()
        assert client.get(f"/api/newsletter/uploads/{newsletter['id']}").status_code == 404


class TestNewsletterStats:
    def test_empty_stats(self, client: TestClient, admin_headers):
        data = client.get("/api/newsletter/stats", headers=admin_headers).json()
        assert data["totalSubscribers"] == 0
        assert data["subscriptionRate"] == "0.00"

    def test_stats(self, client: TestClient, admin_headers):
        ids = [subscribe(client, f"r{i}@example.com").json()["subscriber"]["id"] for i in range(8)]
        for subscriber_id in ids[:3]:
            client.put(f"/api/newsletter/subscribers/{subscriber_id}/unsubscribe", headers=admin_headers)
        upload_pdf(client, admin_headers)
        client.post("/api/newsletter/send", headers=admin_headers, json={"subject": "Hi", "content": "Body"})

        data = client.get("/api/newsletter/stats", headers=admin_headers).json()

        assert data["totalSubscribers"] == 8
        assert data["activeSubscribers"] == 5
        assert data["unsubscribedCount"] == 3
        assert data["totalCampaigns"] == 1
        assert data["totalUploads"] == 1
        assert data["subscriptionRate"] == "62.50"


class TestNewsletterEmail:
    def test_render_newsletter(self):
        html = email_service.render_newsletter("Spring News", "<b>Hello</b>\nSecond line", "Ana")

        assert "<title>Spring News</title>" in html
        assert "Hi Ana," in html
        # Campaign content is admin-authored HTML; newlines become line breaks
        assert "<b>Hello</b><br>Second line" in html

    def test_simulated_delivery(self):
        assert asyncio.run(email_service.send_newsletter_email("a@example.com", "Hi", "Body")) is True

    def test_smtp_without_configuration(self, monkeypatch):
        monkeypatch.setattr(email_service.settings, "SMTP_HOST", None)
        assert asyncio.run(email_service.send_email("a@example.com", "Hi", "<p>Body</p>")) is False

    def test_plain_text_alternative(self):
        assert email_service.html_to_text("<p>One<br>Two</p><p>Three</p>") == "One\nTwo\n\nThree"

    def test_build_message(self, monkeypatch):
        monkeypatch.setattr(email_service.settings, "EMAIL_FROM", "news@mmc.example")
        monkeypatch.setattr(email_service.settings, "EMAIL_FROM_NAME", "MMC Newsletter")

        message = email_service.build_message("a@example.com", "Hi", "<p>Body</p>")

        assert message["From"] == "MMC Newsletter <news@mmc.example>"
        assert message["To"] == "a@example.com"
        parts = message.get_payload()
        assert [part.get_content_type() for part in parts] == ["text/plain", "text/html"]

import pytest
from fastapi.testclient import TestClient


def create_testimonial(client: TestClient, headers, **overrides) -> dict:
    payload = {"name": "Ana Silva", "company": "Acme", "rating": 5, "testimonial": "Great work"}
    payload.update(overrides)
    response = client.post("/api/testimonials", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()["testimonial"]


class TestCreateTestimonial:
    def test_create_defaults(self, client: TestClient, admin_headers):
        response = client.post("/api/testimonials", headers=admin_headers, json={
            "name": "Ana Silva", "company": "Acme", "rating": 4, "projectType": "Website Redesign"
        })

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Testimonial created successfully"
        testimonial = data["testimonial"]
        assert testimonial["active"] is True
        assert testimonial["featured"] is False
        assert testimonial["verified"] is False
        assert testimonial["source"] == "website"
        assert testimonial["projectType"] == "Website Redesign"

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_out_of_range(self, client: TestClient, admin_headers, rating):
        response = client.post("/api/testimonials", headers=admin_headers, json={
            "name": "Ana", "company": "Acme", "rating": rating
        })
        assert response.status_code == 400
        assert response.json()["fields"] == ["rating"]

    def test_missing_required_fields(self, client: TestClient, admin_headers):
        response = client.post("/api/testimonials", headers=admin_headers, json={"name": "Ana"})
        assert response.status_code == 400
        assert set(response.json()["fields"]) == {"company", "rating"}

    def test_create_requires_admin(self, client: TestClient):
        response = client.post("/api/testimonials", json={"name": "Ana", "company": "Acme", "rating": 5})
        assert response.status_code == 401


class TestListTestimonials:
    def test_public_list_only_active(self, client: TestClient, admin_headers):
        create_testimonial(client, admin_headers, name="Shown")
        create_testimonial(client, admin_headers, name="Hidden", active=False)

        response = client.get("/api/testimonials")

        assert response.status_code == 200
        assert [t["name"] for t in response.json()] == ["Shown"]

    def test_public_rating_is_minimum(self, client: TestClient, admin_headers):
        for rating in (3, 4, 5):
            create_testimonial(client, admin_headers, rating=rating)

        response = client.get("/api/testimonials", params={"rating": "4"})
        assert sorted(t["rating"] for t in response.json()) == [4, 5]

    def test_admin_list_includes_inactive(self, client: TestClient, admin_headers):
        create_testimonial(client, admin_headers, name="Shown")
        create_testimonial(client, admin_headers, name="Hidden", active=False)

        response = client.get("/api/testimonials/all", headers=admin_headers)
        assert len(response.json()) == 2

        response = client.get("/api/testimonials/all", headers=admin_headers, params={"active": "false"})
        assert [t["name"] for t in response.json()] == ["Hidden"]

    def test_admin_rating_is_exact(self, client: TestClient, admin_headers):
        for rating in (3, 4, 5):
            create_testimonial(client, admin_headers, rating=rating)

        response = client.get("/api/testimonials/all", headers=admin_headers, params={"rating": "4"})
        assert [t["rating"] for t in response.json()] == [4]

    def test_admin_list_requires_token(self, client: TestClient):
        assert client.get("/api/testimonials/all").status_code == 401

    def test_admin_search(self, client: TestClient, admin_headers):
        create_testimonial(client, admin_headers, company="Northwind Traders")
        create_testimonial(client, admin_headers, company="Contoso")

        response = client.get("/api/testimonials/all", headers=admin_headers, params={"search": "northwind"})
        assert [t["company"] for t in response.json()] == ["Northwind Traders"]

    def test_featured_list(self, client: TestClient, admin_headers):
        create_testimonial(client, admin_headers, name="Star", featured=True)
        create_testimonial(client, admin_headers, name="Hidden star", featured=True, active=False)
        create_testimonial(client, admin_headers, name="Regular")

        response = client.get("/api/testimonials/featured/list")
        assert [t["name"] for t in response.json()] == ["Star"]

    def test_get_by_id(self, client: TestClient, admin_headers):
        created = create_testimonial(client, admin_headers)

        assert client.get(f"/api/testimonials/{created['id']}").json()["name"] == "Ana Silva"
        assert client.get("/api/testimonials/abc").status_code == 400
        assert client.get("/api/testimonials/777").status_code == 404


class TestModifyTestimonial:
    def test_update(self, client: TestClient, admin_headers):
        created = create_testimonial(client, admin_headers)

        response = client.put(f"/api/testimonials/{created['id']}", headers=admin_headers, json={
            "rating": 3, "verified": True
        })

        assert response.status_code == 200
        updated = response.json()["testimonial"]
        assert updated["rating"] == 3
        assert updated["verified"] is True
        assert updated["name"] == "Ana Silva"

    def test_update_rejects_bad_rating(self, client: TestClient, admin_headers):
        created = create_testimonial(client, admin_headers)
        response = client.put(f"/api/testimonials/{created['id']}", headers=admin_headers, json={"rating": 9})
        assert response.status_code == 400

    def test_toggle_active(self, client: TestClient, admin_headers):
        created = create_testimonial(client, admin_headers)

        first = client.put(f"/api/testimonials/{created['id']}/toggle-active", headers=admin_headers).json()
        second = client.put(f"/api/testimonials/{created['id']}/toggle-active", headers=admin_headers).json()

        assert first["message"] == "Testimonial deactivated successfully"
        assert first["testimonial"]["active"] is False
        assert second["message"] == "Testimonial activated successfully"
        assert second["testimonial"]["active"] is True

    def test_toggle_featured(self, client: TestClient, admin_headers):
        created = create_testimonial(client, admin_headers)

        response = client.put(f"/api/testimonials/{created['id']}/toggle-featured", headers=admin_headers)

        assert response.json()["message"] == "Testimonial featured successfully"
        assert response.json()["testimonial"]["featured"] is True

    def test_delete(self, client: TestClient, admin_headers):
        created = create_testimonial(client, admin_headers)

        response = client.delete(f"/api/testimonials/{created['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert client.get(f"/api/testimonials/{created['id']}").status_code == 404


class TestTestimonialStats:
    def test_empty_stats(self, client: TestClient, admin_headers):
        response = client.get("/api/testimonials/stats/overview", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["totalTestimonials"] == 0
        assert data["averageRating"] == "0.0"
        assert data["ratingDistribution"] == []

    def test_stats(self, client: TestClient, admin_headers):
        create_testimonial(client, admin_headers, rating=5, featured=True, verified=True)
        create_testimonial(client, admin_headers, rating=4)
        create_testimonial(client, admin_headers, rating=4)
        create_testimonial(client, admin_headers, rating=1, active=False)

        data = client.get("/api/testimonials/stats/overview", headers=admin_headers).json()

        assert data["totalTestimonials"] == 4
        assert data["activeTestimonials"] == 3
        assert data["featuredTestimonials"] == 1
        assert data["verifiedTestimonials"] == 1
        assert data["averageRating"] == "4.3"
        assert data["ratingDistribution"] == [{"rating": 4, "count": 2}, {"rating": 5, "count": 1}]

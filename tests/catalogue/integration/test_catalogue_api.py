"""HTTP tests for the product and category endpoints."""

import pytest

from storefront.catalogue.api import category_router, product_router

STAFF_HEADERS = {"X-User-Id": "staff-1", "X-User-Role": "staff"}


@pytest.fixture()
def client(api_client):
    return api_client(product_router, category_router)


def _create(client, sku="TEE-001", name="Classic Tee", price=150000):
    response = client.post("/products", json={"sku": sku, "name": name, "price": price}, headers=STAFF_HEADERS)
    assert response.status_code == 201
    return response.json()["data"]["id"]


class TestProductEndpoints:
    def test_create_requires_staff(self, client):
        response = client.post("/products", json={"sku": "TEE-001", "name": "Tee", "price": 1})
        assert response.status_code == 401

    def test_draft_product_hidden_from_customers(self, client):
        product_id = _create(client)
        assert client.get(f"/products/{product_id}").status_code == 404
        assert client.get(f"/products/{product_id}", headers=STAFF_HEADERS).status_code == 200

    def test_activated_product_is_public(self, client):
        product_id = _create(client)
        response = client.put(f"/products/{product_id}/status", json={"action": "activate"}, headers=STAFF_HEADERS)
        assert response.json()["data"]["status"] == "active"

        body = client.get(f"/products/{product_id}").json()
        assert body["success"] is True
        assert body["data"]["sku"] == "TEE-001"

    def test_public_listing_shows_only_active(self, client):
        _create(client, sku="DRAFT-1", name="Draft")
        active = _create(client, sku="LIVE-1", name="Live")
        client.put(f"/products/{active}/status", json={"action": "activate"}, headers=STAFF_HEADERS)

        public = client.get("/products").json()
        assert public["total"] == 1
        assert public["data"][0]["id"] == active

        everything = client.get("/products", headers=STAFF_HEADERS).json()
        assert everything["total"] == 2

    def test_invalid_sku_is_bad_request(self, client):
        response = client.post("/products", json={"sku": "x", "name": "Tee", "price": 1}, headers=STAFF_HEADERS)
        assert response.status_code == 400
        assert "sku" in response.json()["error_detail"]

    def test_invalid_transition_is_bad_request(self, client):
        product_id = _create(client)
        response = client.put(f"/products/{product_id}/status", json={"action": "deactivate"}, headers=STAFF_HEADERS)
        assert response.status_code == 400


class TestCategoryEndpoints:
    def test_create_and_list(self, client):
        response = client.post("/categories", json={"name": "Shirts"}, headers=STAFF_HEADERS)
        assert response.status_code == 201

        listing = client.get("/categories").json()
        assert [c["name"] for c in listing["data"]] == ["Shirts"]

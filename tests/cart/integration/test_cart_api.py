"""HTTP tests for the cart endpoints."""

import pytest

from storefront.cart.api import cart_router

GUEST_HEADERS = {"X-Session-Id": "guest123"}


@pytest.fixture()
def client(api_client):
    return api_client(cart_router)


def _create(client, headers=GUEST_HEADERS):
    response = client.post("/cart", headers=headers)
    assert response.status_code == 201
    return response.json()["data"]["id"]


class TestCartEndpoints:
    def test_guest_cart_flow(self, client, make_product):
        product_id = make_product(price=100000.0, stock=5)
        cart_id = _create(client)

        item = {"product_id": product_id, "quantity": 3}
        added = client.post(f"/cart/{cart_id}/items", json=item, headers=GUEST_HEADERS)
        assert added.status_code == 201
        data = added.json()["data"]
        assert data["total_quantity"] == 3
        assert data["subtotal"] == 300000.0
        assert data["items"][0]["line_total"] == 300000.0

        oversell = client.post(
            f"/cart/{cart_id}/items", json={"product_id": product_id, "quantity": 3}, headers=GUEST_HEADERS
        )
        assert oversell.status_code == 400
        assert oversell.json()["success"] is False

        converted = client.post(
            f"/cart/{cart_id}/convert-to-order",
            json={"payment_method": "cod"},
            headers={**GUEST_HEADERS, "X-User-Id": "user-1"},
        )
        assert converted.status_code == 201
        assert converted.json()["data"]["amounts"]["total"] == 300000.0

        assert client.get("/cart", headers=GUEST_HEADERS).status_code == 404

    def test_checkout_requires_sign_in(self, client, make_product):
        cart_id = _create(client)
        response = client.post(f"/cart/{cart_id}/convert-to-order", json={}, headers=GUEST_HEADERS)
        assert response.status_code == 401

    def test_foreign_session_is_unauthorized(self, client):
        cart_id = _create(client)
        assert client.get(f"/cart/{cart_id}", headers={"X-Session-Id": "other"}).status_code == 401

    def test_summary(self, client, make_product):
        product_id = make_product(price=5000.0, stock=5)
        cart_id = _create(client)
        client.post(f"/cart/{cart_id}/items", json={"product_id": product_id, "quantity": 2}, headers=GUEST_HEADERS)

        summary = client.get(f"/cart/{cart_id}/summary", headers=GUEST_HEADERS).json()["data"]
        assert summary == {"item_count": 1, "total_quantity": 2, "subtotal": 10000.0}

    def test_stats_require_staff(self, client):
        assert client.get("/cart/stats", headers={"X-User-Id": "user-1"}).status_code == 403

    def test_staff_cannot_open_a_customer_cart(self, client):
        cart_id = _create(client, headers={"X-User-Id": "user-1"})
        staff_headers = {"X-User-Id": "staff-1", "X-User-Role": "staff"}
        assert client.get(f"/cart/{cart_id}", headers=staff_headers).status_code == 401
        assert client.get(f"/cart/{cart_id}", headers={"X-User-Id": "user-1"}).status_code == 200

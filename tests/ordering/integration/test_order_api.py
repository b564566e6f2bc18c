"""HTTP tests for the order endpoints."""

import pytest

from storefront.ordering.api import admin_order_router, order_router

CUSTOMER_HEADERS = {"X-User-Id": "user-1"}
STAFF_HEADERS = {"X-User-Id": "staff-1", "X-User-Role": "staff"}
ADMIN_HEADERS = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture()
def client(api_client):
    return api_client(order_router, admin_order_router)


def _place(client, product_id, quantity=1, headers=CUSTOMER_HEADERS):
    body = {"items": [{"product_id": product_id, "quantity": quantity}]}
    response = client.post("/orders", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]


class TestOrderEndpoints:
    def test_place_and_fetch(self, client, make_product):
        product_id = make_product(price=20000.0)
        order = _place(client, product_id, quantity=2)
        assert order["amounts"]["total"] == 40000.0
        assert order["items"][0]["quantity"] == 2

        fetched = client.get(f"/orders/{order['id']}", headers=CUSTOMER_HEADERS).json()["data"]
        assert fetched["order_number"] == order["order_number"]

        by_number = client.get(f"/orders/order-number/{order['order_number']}", headers=CUSTOMER_HEADERS)
        assert by_number.json()["data"]["id"] == order["id"]

    def test_empty_items_rejected(self, client):
        assert client.post("/orders", json={"items": []}, headers=CUSTOMER_HEADERS).status_code == 400

    def test_other_customer_gets_unauthorized(self, client, make_product):
        order = _place(client, make_product())
        assert client.get(f"/orders/{order['id']}", headers={"X-User-Id": "user-2"}).status_code == 401

    def test_my_orders(self, client, make_product):
        product_id = make_product()
        _place(client, product_id)
        _place(client, product_id, headers={"X-User-Id": "user-2"})

        body = client.get("/orders/my", headers=CUSTOMER_HEADERS).json()
        assert body["total"] == 1

    def test_lifecycle_through_http(self, client, make_product):
        order = _place(client, make_product())
        order_id = order["id"]

        assert client.post(f"/orders/{order_id}/confirm", headers=CUSTOMER_HEADERS).status_code == 403
        assert client.post(f"/orders/{order_id}/confirm", headers=STAFF_HEADERS).status_code == 200
        shipped = client.post(f"/orders/{order_id}/ship", json={"tracking_number": "VN1"}, headers=STAFF_HEADERS)
        assert shipped.json()["data"]["status"] == "shipped"
        delivered = client.post(f"/orders/{order_id}/deliver", headers=STAFF_HEADERS)
        assert delivered.json()["data"]["payment_status"] == "paid"

        again = client.post(f"/orders/{order_id}/cancel", json={"reason": "late"}, headers=CUSTOMER_HEADERS)
        assert again.status_code == 400

    def test_admin_order_for_user(self, client, make_product):
        product_id = make_product()
        response = client.post(
            "/admin/orders/user/user-7",
            json={"items": [{"product_id": product_id, "quantity": 1}]},
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 201
        assert response.json()["data"]["user_id"] == "user-7"

        forbidden = client.post(
            "/admin/orders/user/user-7",
            json={"items": [{"product_id": product_id, "quantity": 1}]},
            headers=STAFF_HEADERS,
        )
        assert forbidden.status_code == 403

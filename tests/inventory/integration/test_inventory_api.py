"""HTTP tests for the inventory endpoints."""

import pytest

from storefront.inventory.api import inventory_router

STAFF_HEADERS = {"X-User-Id": "staff-1", "X-User-Role": "staff"}


@pytest.fixture()
def client(api_client):
    return api_client(inventory_router)


class TestStockEndpoints:
    def test_requires_staff(self, client):
        response = client.get("/inventory/stock", headers={"X-User-Id": "user-1"})
        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_requires_authentication(self, client):
        assert client.get("/inventory/stock").status_code == 401

    def test_initialize_and_read(self, client, make_product):
        product_id = make_product(stock=None)
        response = client.post(
            "/inventory/stock",
            json={"product_id": product_id, "initial_quantity": 8, "reorder_point": 2},
            headers=STAFF_HEADERS,
        )
        assert response.status_code == 201
        stock_item_id = response.json()["data"]["stock_item_id"]

        level = client.get(f"/inventory/stock/{stock_item_id}", headers=STAFF_HEADERS).json()["data"]
        assert level["on_hand"] == 8
        assert level["available"] == 8

    def test_duplicate_initialize_is_conflict(self, client, make_product):
        product_id = make_product(stock=3)
        response = client.post("/inventory/stock", json={"product_id": product_id}, headers=STAFF_HEADERS)
        assert response.status_code == 409

    def test_reserve_beyond_available_is_bad_request(self, client, make_product):
        product_id = make_product(stock=5)
        body = {"product_id": product_id, "quantity": 3}

        first = client.post("/inventory/reserve", json=body, headers=STAFF_HEADERS)
        assert first.status_code == 200
        assert first.json()["data"]["available"] == 2

        second = client.post("/inventory/reserve", json=body, headers=STAFF_HEADERS)
        assert second.status_code == 400
        assert second.json()["success"] is False

    def test_zero_quantity_rejected(self, client, make_product):
        product_id = make_product(stock=5)
        response = client.post(
            "/inventory/reserve", json={"product_id": product_id, "quantity": 0}, headers=STAFF_HEADERS
        )
        assert response.status_code == 400

    def test_unknown_stock_item_is_not_found(self, client):
        assert client.get("/inventory/stock/missing", headers=STAFF_HEADERS).status_code == 404

    def test_out_of_stock_listing(self, client, make_product):
        make_product(stock=5)
        empty = make_product(stock=0)

        response = client.get("/inventory/stock/out", headers=STAFF_HEADERS)
        body = response.json()
        assert body["total"] == 1
        assert body["data"][0]["product_id"] == empty


class TestMovementEndpoints:
    def test_full_workflow(self, client, make_product):
        product_id = make_product(stock=5)
        created = client.post(
            "/inventory/movements",
            json={"product_id": product_id, "movement_type": "inbound", "quantity": 5},
            headers=STAFF_HEADERS,
        )
        assert created.status_code == 201
        movement_id = created.json()["data"]["id"]

        assert client.post(f"/inventory/movements/{movement_id}/approve", headers=STAFF_HEADERS).status_code == 200
        completed = client.post(f"/inventory/movements/{movement_id}/complete", headers=STAFF_HEADERS)
        assert completed.status_code == 200
        assert completed.json()["data"]["on_hand"] == 10
        assert completed.json()["data"]["movement"]["status"] == "completed"

    def test_invalid_transition_is_bad_request(self, client, make_product):
        product_id = make_product(stock=5)
        movement_id = client.post(
            "/inventory/movements",
            json={"product_id": product_id, "movement_type": "inbound", "quantity": 5},
            headers=STAFF_HEADERS,
        ).json()["data"]["id"]

        response = client.post(f"/inventory/movements/{movement_id}/complete", headers=STAFF_HEADERS)
        assert response.status_code == 400

"""HTTP tests for coupon and point endpoints."""

from datetime import UTC, datetime, timedelta

import pytest

from storefront.promotions.api import coupon_router, point_router

CUSTOMER_HEADERS = {"X-User-Id": "user-1"}
STAFF_HEADERS = {"X-User-Id": "staff-1", "X-User-Role": "staff"}
ADMIN_HEADERS = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture()
def client(api_client):
    return api_client(coupon_router, point_router)


def _coupon_body(**overrides):
    now = datetime.now(UTC)
    body = {
        "code": "SAVE10",
        "name": "Save ten",
        "coupon_type": "percentage",
        "discount_value": 10,
        "valid_from": (now - timedelta(days=1)).isoformat(),
        "valid_to": (now + timedelta(days=7)).isoformat(),
    }
    body.update(overrides)
    return body


class TestCouponEndpoints:
    def test_create_requires_admin(self, client):
        assert client.post("/coupons", json=_coupon_body(), headers=STAFF_HEADERS).status_code == 403
        assert client.post("/coupons", json=_coupon_body(), headers=ADMIN_HEADERS).status_code == 201

    def test_validate(self, client):
        client.post("/coupons", json=_coupon_body(), headers=ADMIN_HEADERS)
        response = client.post(
            "/coupons/validate", json={"code": "save10", "order_amount": 200000}, headers=CUSTOMER_HEADERS
        )
        data = response.json()["data"]
        assert data["valid"] is True
        assert data["discount_amount"] == 20000.0

    def test_validate_unknown_is_still_ok_response(self, client):
        response = client.post("/coupons/validate", json={"code": "NOPE", "order_amount": 1}, headers=CUSTOMER_HEADERS)
        assert response.status_code == 200
        assert response.json()["data"]["valid"] is False

    def test_active_listing_is_public(self, client):
        client.post("/coupons", json=_coupon_body(), headers=ADMIN_HEADERS)
        assert client.get("/coupons/active").json()["total"] == 1


class TestPointEndpoints:
    def test_earn_and_balance(self, client):
        earned = client.post("/points/earn", json={"user_id": "user-1", "points": 300}, headers=STAFF_HEADERS)
        assert earned.json()["data"]["balance"] == 300

        balance = client.get("/points/balance", headers=CUSTOMER_HEADERS).json()["data"]
        assert balance["balance"] == 300

    def test_overdraw_is_bad_request(self, client):
        response = client.post("/points/redeem", json={"points": 5}, headers=CUSTOMER_HEADERS)
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_other_users_history_is_private(self, client):
        assert client.get("/points/user/user-2/history", headers=CUSTOMER_HEADERS).status_code == 401

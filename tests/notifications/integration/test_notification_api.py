"""HTTP tests for notification endpoints."""

import pytest

from storefront.notifications.api import notification_router

USER_HEADERS = {"X-User-Id": "user-1"}
STAFF_HEADERS = {"X-User-Id": "staff-1", "X-User-Role": "staff"}


@pytest.fixture()
def client(api_client):
    return api_client(notification_router)


def _send(client, **overrides):
    body = {"user_id": "user-1", "title": "Hello", "message": "Welcome to the store", "data": {"k": "v"}}
    body.update(overrides)
    response = client.post("/notifications", json=body, headers=STAFF_HEADERS)
    assert response.status_code == 201
    return response.json()["data"]["id"]


class TestNotificationEndpoints:
    def test_requires_identity(self, client):
        assert client.get("/notifications").status_code == 401

    def test_customer_cannot_send(self, client):
        body = {"user_id": "u", "title": "t", "message": "m"}
        response = client.post("/notifications", json=body, headers=USER_HEADERS)
        assert response.status_code == 403

    def test_list_and_unread_count(self, client):
        _send(client)
        _send(client)

        listing = client.get("/notifications", headers=USER_HEADERS).json()
        assert listing["total"] == 2
        assert client.get("/notifications/unread-count", headers=USER_HEADERS).json()["data"]["count"] == 2

    def test_read_flow(self, client):
        notification_id = _send(client)

        read = client.post(f"/notifications/{notification_id}/read", headers=USER_HEADERS).json()["data"]
        assert read["status"] == "read"

        archived = client.post(f"/notifications/{notification_id}/archive", headers=USER_HEADERS).json()["data"]
        assert archived["status"] == "archived"

        assert client.delete(f"/notifications/{notification_id}", headers=USER_HEADERS).status_code == 200
        assert client.get(f"/notifications/{notification_id}", headers=USER_HEADERS).status_code == 404

    def test_other_users_notification(self, client):
        notification_id = _send(client)
        response = client.get(f"/notifications/{notification_id}", headers={"X-User-Id": "user-2"})
        assert response.status_code == 401

    def test_read_all(self, client):
        _send(client)
        response = client.post("/notifications/read-all", headers=USER_HEADERS)
        assert response.json()["data"]["count"] == 1

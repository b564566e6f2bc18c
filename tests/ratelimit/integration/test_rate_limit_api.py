"""HTTP tests for rate limit rules and the request dependency."""

import pytest
from fastapi import APIRouter, Depends

from storefront.api.envelope import ok
from storefront.ratelimit.api import rate_limit_router
from storefront.ratelimit.dependency import enforce_rate_limits

ADMIN_HEADERS = {"X-User-Id": "admin-1", "X-User-Role": "admin"}

limited = APIRouter(prefix="/api/v1", dependencies=[Depends(enforce_rate_limits)])


@limited.get("/ping")
async def ping():
    return ok({"pong": True})


@pytest.fixture()
def client(api_client):
    return api_client(rate_limit_router, limited)


class TestRateLimitEndpoints:
    def test_rule_crud(self, client):
        created = client.post(
            "/rate-limits",
            json={"name": "ping", "path_prefix": "/api/v1/ping", "limit": 5, "window_seconds": 60},
            headers=ADMIN_HEADERS,
        )
        assert created.status_code == 201
        rule_id = created.json()["data"]["id"]

        updated = client.put(f"/rate-limits/{rule_id}", json={"limit": 10}, headers=ADMIN_HEADERS)
        assert updated.json()["data"]["limit"] == 10
        assert client.get("/rate-limits", headers=ADMIN_HEADERS).json()["total"] == 1

    def test_requests_beyond_limit_get_429(self, client):
        client.post(
            "/rate-limits",
            json={"name": "ping", "path_prefix": "/api/v1/ping", "limit": 2, "window_seconds": 3600},
            headers=ADMIN_HEADERS,
        )
        headers = {"X-User-Id": "user-1"}
        assert client.get("/api/v1/ping", headers=headers).status_code == 200
        assert client.get("/api/v1/ping", headers=headers).status_code == 200

        blocked = client.get("/api/v1/ping", headers=headers)
        assert blocked.status_code == 429
        assert blocked.json()["success"] is False
        assert int(blocked.headers["Retry-After"]) >= 1

        assert client.get("/api/v1/ping", headers={"X-User-Id": "user-2"}).status_code == 200

    def test_expired_counter_cleanup(self, client):
        client.post(
            "/rate-limits",
            json={"name": "ping", "path_prefix": "/api/v1/ping", "limit": 5, "window_seconds": 60},
            headers=ADMIN_HEADERS,
        )
        client.get("/api/v1/ping", headers={"X-User-Id": "user-1"})

        response = client.delete("/rate-limits/counters/expired", headers=ADMIN_HEADERS)
        assert response.status_code == 200
        assert response.json()["data"] == {"removed": 0}
        assert client.delete("/rate-limits/counters/expired", headers={"X-User-Id": "user-1"}).status_code == 403

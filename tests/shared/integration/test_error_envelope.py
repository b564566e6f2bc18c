"""The HTTP error envelope and status mapping."""

import pytest
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from protean.exceptions import ExpectedVersionError

from storefront.api.deps import current_actor
from storefront.api.envelope import ok
from storefront.shared.errors import Conflict, InsufficientStock, NotFound, RateLimited

router = APIRouter(prefix="/errors")


class Body(BaseModel):
    quantity: int = Field(ge=1)


@router.post("/validate")
async def validate(body: Body):
    return ok(body.model_dump())


@router.get("/stock")
async def stock():
    raise InsufficientStock(available=1, requested=3)


@router.get("/missing")
async def missing():
    raise NotFound("Widget not found", field="widget_id")


@router.get("/conflict")
async def conflict():
    raise Conflict("SKU taken", field="sku")


@router.get("/stale")
async def stale():
    raise ExpectedVersionError("version mismatch")


@router.get("/limited")
async def limited():
    raise RateLimited("Slow down", retry_after=30)


@router.get("/me")
async def me(actor=Depends(current_actor)):
    return ok({"user_id": actor.user_id, "role": actor.role.value})


@pytest.fixture()
def client(api_client):
    return api_client(router)


class TestErrorEnvelope:
    def test_request_validation(self, client):
        response = client.post("/errors/validate", json={"quantity": 0})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "quantity" in body["error_detail"]

    def test_business_rule(self, client):
        response = client.get("/errors/stock")
        assert response.status_code == 400
        assert response.json()["error_detail"] == {"quantity": ["Insufficient stock: 1 available, 3 requested"]}

    def test_not_found(self, client):
        response = client.get("/errors/missing")
        assert response.status_code == 404
        assert response.json()["message"] == "Widget not found"

    def test_conflicts(self, client):
        assert client.get("/errors/conflict").status_code == 409
        assert client.get("/errors/stale").status_code == 409

    def test_rate_limited(self, client):
        response = client.get("/errors/limited")
        assert response.status_code == 429
        assert response.headers["Retry-After"] == "30"

    def test_identity_headers(self, client):
        assert client.get("/errors/me").status_code == 401
        response = client.get("/errors/me", headers={"X-User-Id": "u-1", "X-User-Role": "staff"})
        assert response.json() == {"success": True, "message": "OK", "data": {"user_id": "u-1", "role": "staff"}}

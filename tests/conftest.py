import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Fetch and activate the domain by pushing the associated domain_context.
    The activated domain can then be referred to elsewhere as `current_domain`.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from storefront.domain import storefront

    storefront.init()
    storefront.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session", autouse=True)
def setup_db(request):
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    from storefront.notifications.channel import reset_channels
    from storefront.payments.gateway import reset_gateway

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()

    reset_gateway()
    reset_channels()


# ---------------------------------------------------------------------------
# Shared callers and catalogue fixtures
# ---------------------------------------------------------------------------
STAFF = {"actor_id": "staff-1", "actor_role": "staff"}
ADMIN = {"actor_id": "admin-1", "actor_role": "admin"}


@pytest.fixture()
def staff():
    return dict(STAFF)


@pytest.fixture()
def admin():
    return dict(ADMIN)


@pytest.fixture()
def make_product():
    """Create an active product with tracked stock. Returns its id."""
    from protean.utils.globals import current_domain

    from storefront.catalogue.product.management import ChangeProductStatus, CreateProduct
    from storefront.inventory.stock.initialization import InitializeStock

    counter = {"n": 0}

    def _make(name="Test Product", price=100000.0, stock=10, sku=None, activate=True, reorder_point=0):
        counter["n"] += 1
        sku = sku or f"SKU-{counter['n']:04d}"
        product_id = current_domain.process(
            CreateProduct(sku=sku, name=name, price=price, **STAFF),
            asynchronous=False,
        )
        if activate:
            current_domain.process(
                ChangeProductStatus(product_id=product_id, action="activate", **STAFF),
                asynchronous=False,
            )
        if stock is not None:
            current_domain.process(
                InitializeStock(
                    product_id=product_id,
                    sku=sku,
                    initial_quantity=stock,
                    reorder_point=reorder_point,
                    **STAFF,
                ),
                asynchronous=False,
            )
        return product_id

    return _make


@pytest.fixture()
def api_client():
    """Build a TestClient over the given routers with the error envelope installed."""
    from fastapi import FastAPI
    from fastapi.testclient import TestClient

    from storefront.api.errors import register_exception_handlers

    def _client(*routers):
        app = FastAPI()
        register_exception_handlers(app)
        for router in routers:
            app.include_router(router)
        return TestClient(app)

    return _client


def headers(user_id, role=None, session_id=None) -> dict:
    result = {"X-User-Id": user_id} if user_id else {}
    if role:
        result["X-User-Role"] = role
    if session_id:
        result["X-Session-Id"] = session_id
    return result


@pytest.fixture()
def as_user():
    return headers

"""The audit trail follows business actions across components."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from protean.utils.globals import current_domain

from storefront.audit.audit_log import SYSTEM_USER, record
from storefront.audit.queries import AuditFilters, cleanup_audit_logs, get_audit_log, list_audit_logs
from storefront.ordering.order.creation import CreateOrder
from storefront.ordering.order.lifecycle import CancelOrder
from storefront.shared.access import Actor
from storefront.shared.errors import DomainError, Forbidden

ADMIN = Actor.of("admin-1", "admin")


def _order(product_id):
    return current_domain.process(
        CreateOrder(items=json.dumps([{"product_id": product_id, "quantity": 1}]), actor_id="user-1"),
        asynchronous=False,
    )


def _actions(**filters):
    return [entry.action for entry in list_audit_logs(ADMIN, AuditFilters(**filters), limit=100).items]


class TestAuditTrail:
    def test_order_actions_are_recorded(self, make_product):
        order_id = _order(make_product())
        current_domain.process(
            CancelOrder(order_id=order_id, reason="Changed my mind", actor_id="user-1"), asynchronous=False
        )

        actions = _actions(resource_type="order", resource_id=order_id)
        assert set(actions) == {"order.created", "order.cancelled"}

    def test_entries_carry_the_actor(self, make_product):
        order_id = _order(make_product())
        entry = list_audit_logs(ADMIN, AuditFilters(action="order.created", resource_id=order_id)).items[0]
        assert entry.user_id == "user-1"
        assert json.loads(entry.details)["owner_id"] == "user-1"

    def test_system_actions(self):
        record("order", "order-1", "order.delivered", datetime.now(UTC))
        assert list_audit_logs(ADMIN, AuditFilters(user_id=SYSTEM_USER)).total == 1

    def test_admin_only(self):
        with pytest.raises(Forbidden):
            list_audit_logs(Actor.of("staff-1", "staff"), AuditFilters())

    def test_date_range(self):
        record("order", "order-1", "order.created", datetime.now(UTC) - timedelta(days=10))
        record("order", "order-2", "order.created", datetime.now(UTC))
        today = datetime.now(UTC).date().isoformat()
        assert list_audit_logs(ADMIN, AuditFilters(start_date=today)).total == 1

    def test_bad_date(self):
        with pytest.raises(DomainError):
            list_audit_logs(ADMIN, AuditFilters(start_date="yesterday"))


class TestRetention:
    def test_cleanup_removes_old_entries(self):
        record("order", "order-1", "order.created", datetime.now(UTC) - timedelta(days=120))
        record("order", "order-2", "order.created", datetime.now(UTC))

        assert cleanup_audit_logs(ADMIN, days=90) == 1
        remaining = list_audit_logs(ADMIN, AuditFilters()).items
        assert [entry.resource_id for entry in remaining] == ["order-2"]
        assert get_audit_log(remaining[0].entry_id, ADMIN).action == "order.created"

    def test_days_must_be_positive(self):
        with pytest.raises(DomainError):
            cleanup_audit_logs(ADMIN, days=0)

"""Application tests for rate limit rules and request counting."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.utils.globals import current_domain

from storefront.ratelimit.counter import RateLimitCounter
from storefront.ratelimit.management import (
    CleanupRateLimitCounters,
    CreateRateLimitRule,
    DeleteRateLimitRule,
    RecordRequestHit,
    UpdateRateLimitRule,
    active_rules,
    load_rule,
)
from storefront.shared.errors import Conflict, Forbidden, NotFound, RateLimited


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _rule(admin, name="orders", path_prefix="/api/v1/orders", limit=2, **options):
    return _process(
        CreateRateLimitRule(name=name, path_prefix=path_prefix, limit=limit, window_seconds=3600, **options, **admin)
    )


def _hit(path="/api/v1/orders", client_key="ip:1.2.3.4"):
    _process(RecordRequestHit(path=path, client_key=client_key))


class TestRuleManagement:
    def test_admin_only(self, staff):
        with pytest.raises(Forbidden):
            _rule(staff)

    def test_unique_name(self, admin):
        _rule(admin)
        with pytest.raises(Conflict):
            _rule(admin)

    def test_update_and_delete(self, admin):
        rule_id = _rule(admin)
        _process(UpdateRateLimitRule(rule_id=rule_id, is_active=False, **admin))
        assert active_rules() == []

        _process(DeleteRateLimitRule(rule_id=rule_id, **admin))
        with pytest.raises(NotFound):
            load_rule(rule_id)

    def test_active_rules_by_priority(self, admin):
        _rule(admin, name="low", priority=1)
        _rule(admin, name="high", priority=5)
        assert [rule.name for rule in active_rules()] == ["high", "low"]


class TestRequestCounting:
    def test_limit_enforced(self, admin):
        _rule(admin, limit=2)
        _hit()
        _hit()
        with pytest.raises(RateLimited) as exc:
            _hit()
        assert exc.value.retry_after >= 1

    def test_clients_counted_separately(self, admin):
        _rule(admin, limit=1)
        _hit(client_key="ip:1.1.1.1")
        _hit(client_key="ip:2.2.2.2")
        with pytest.raises(RateLimited):
            _hit(client_key="ip:1.1.1.1")

    def test_other_paths_unaffected(self, admin):
        _rule(admin, limit=1)
        for _ in range(5):
            _hit(path="/api/v1/products")

    def test_no_rules_means_no_limit(self):
        for _ in range(5):
            _hit()


class TestCounterCleanup:
    def _counters(self):
        return current_domain.repository_for(RateLimitCounter)._dao.query.all().items

    def test_only_closed_windows_are_removed(self, admin):
        rule = load_rule(_rule(admin))
        repo = current_domain.repository_for(RateLimitCounter)
        repo.add(RateLimitCounter.open(rule, "ip:1.1.1.1", datetime.now(UTC) - timedelta(hours=3)))
        repo.add(RateLimitCounter.open(rule, "ip:2.2.2.2", datetime.now(UTC) - timedelta(hours=2)))
        _hit(client_key="ip:3.3.3.3")
        assert len(self._counters()) == 3

        assert _process(CleanupRateLimitCounters(**admin)) == 2

        remaining = self._counters()
        assert [counter.client_key for counter in remaining] == ["ip:3.3.3.3"]
        assert remaining[0].count == 1

    def test_nothing_to_remove(self, admin):
        assert _process(CleanupRateLimitCounters(**admin)) == 0

    def test_admin_only(self, staff):
        with pytest.raises(Forbidden):
            _process(CleanupRateLimitCounters(**staff))

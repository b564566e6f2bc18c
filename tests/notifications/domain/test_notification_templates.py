"""Tests for notification templates."""

import pytest

from storefront.notifications.templates import (
    LOW_STOCK_ALERT,
    ORDER_PLACED,
    ORDER_SHIPPED,
    PAYMENT_FAILED,
    TEMPLATE_REGISTRY,
    get_template,
)


class TestTemplates:
    def test_every_template_renders_with_empty_context(self):
        for name, template_cls in TEMPLATE_REGISTRY.items():
            rendered = template_cls.render({})
            assert rendered["title"], name
            assert rendered["message"], name

    def test_order_placed(self):
        rendered = get_template(ORDER_PLACED).render({"order_number": "ORD-9", "total": 300000.0})
        assert "ORD-9" in rendered["title"]
        assert "300000.0 VND" in rendered["message"]

    def test_order_shipped_mentions_tracking(self):
        rendered = get_template(ORDER_SHIPPED).render({"order_number": "ORD-9", "tracking_number": "VN123"})
        assert "VN123" in rendered["message"]

    def test_types(self):
        assert get_template(PAYMENT_FAILED).notification_type == "payment"
        assert get_template(LOW_STOCK_ALERT).notification_type == "inventory"

    def test_unknown(self):
        with pytest.raises(ValueError):
            get_template("nope")

"""Shared BDD fixtures and step definitions for ordering scenarios."""

import json

import pytest
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then, when

from storefront.inventory.stock.allocation import available_quantity
from storefront.ordering.order.creation import CreateOrder
from storefront.ordering.order.lifecycle import CancelOrder
from storefront.ordering.queries import load_order
from storefront.shared.errors import DomainError, InsufficientStock, InvalidTransition, Unauthorized


def process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def error():
    """Holds the exception raised by the last When step, if any."""
    return {"exc": None}


@pytest.fixture()
def context():
    return {}


@pytest.fixture()
def attempt(error):
    """Run a command, keeping a domain failure for the Then steps instead of raising it."""

    def _attempt(command):
        error["exc"] = None
        try:
            return process(command)
        except DomainError as exc:
            error["exc"] = exc
            return None

    return _attempt


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse("a product priced {price:d} with {stock:d} units in stock"),
    target_fixture="product_id",
)
def product_in_stock(make_product, price, stock):
    return make_product(price=float(price), stock=stock)


@given(parsers.cfparse('customer "{user_id}" has ordered {quantity:d} units of it'))
def customer_order(context, product_id, user_id, quantity):
    items = json.dumps([{"product_id": product_id, "quantity": quantity}])
    context["order_id"] = process(CreateOrder(items=items, actor_id=user_id, actor_role="customer"))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('customer "{user_id}" cancels the order because "{reason}"'))
def customer_cancels(context, attempt, user_id, reason):
    attempt(CancelOrder(order_id=context["order_id"], reason=reason, actor_id=user_id, actor_role="customer"))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("{count:d} units are available"))
def units_available(product_id, count):
    assert available_quantity(product_id) == count


@then("the transition is rejected")
def transition_rejected(error):
    assert isinstance(error["exc"], InvalidTransition)


@then("the request fails for insufficient stock")
def insufficient_stock(error):
    assert isinstance(error["exc"], InsufficientStock)


@then("the caller is rejected as not the owner")
def not_owner(error):
    assert isinstance(error["exc"], Unauthorized)


@then(parsers.cfparse('the order status is "{status}"'))
def order_status(context, status):
    assert load_order(context["order_id"]).status == status

"""Shared BDD fixtures and step definitions for the Storefront domain."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from storefront.cart.cart import Cart
from storefront.cart.events import (
    CartCleared,
    CartClaimed,
    CartExpirationExtended,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
    CartsMerged,
)
from storefront.order.events import (
    OrderCreated,
    OrderItemAdded,
    OrderStatusChanged,
    OrderTotalsRecalculated,
)
from storefront.order.order import Order

_CART_EVENT_CLASSES = {
    "CartItemAdded": CartItemAdded,
    "CartItemQuantityUpdated": CartItemQuantityUpdated,
    "CartItemRemoved": CartItemRemoved,
    "CartCleared": CartCleared,
    "CartClaimed": CartClaimed,
    "CartsMerged": CartsMerged,
    "CartExpirationExtended": CartExpirationExtended,
}

_ORDER_EVENT_CLASSES = {
    "OrderCreated": OrderCreated,
    "OrderItemAdded": OrderItemAdded,
    "OrderStatusChanged": OrderStatusChanged,
    "OrderTotalsRecalculated": OrderTotalsRecalculated,
}

# Status -> the moves that reach it from Pending
_PATHS_FROM_PENDING = {
    "Pending": [],
    "Paid": ["Paid"],
    "Processing": ["Paid", "Processing"],
    "Shipped": ["Paid", "Processing", "Shipped"],
    "Delivered": ["Paid", "Processing", "Shipped", "Delivered"],
    "Returned": ["Paid", "Processing", "Shipped", "Returned"],
    "Cancelled": ["Cancelled"],
    "Refunded": ["Paid", "Refunded"],
}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps: Cart
# ---------------------------------------------------------------------------
@given("a user cart", target_fixture="cart")
def user_cart():
    cart = Cart.create(user_id="user-001")
    cart._events.clear()
    return cart


@given("a guest cart", target_fixture="cart")
def guest_cart():
    cart = Cart.create(session_id="sess-001")
    cart._events.clear()
    return cart


@given(
    parsers.cfparse('the cart holds {qty:d} of variant "{variant_id}" at {price}'),
    target_fixture="cart",
)
def cart_holds_variant(cart, qty, variant_id, price):
    cart.add_item(product_id=f"prod-{variant_id}", variant_id=variant_id, quantity=qty, unit_price=float(price))
    cart._events.clear()
    return cart


# ---------------------------------------------------------------------------
# Given steps: Order
# ---------------------------------------------------------------------------
@given("a pending order", target_fixture="order")
def pending_order():
    order = Order.create(order_number="ORD-2026-000001", customer_email="buyer@example.com")
    order._events.clear()
    return order


@given(parsers.cfparse('the order is in "{status}" status'), target_fixture="order")
def order_in_status(order, status):
    for step in _PATHS_FROM_PENDING[status]:
        order.set_status(step)
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Then steps: Cart
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart has {count:d} line"))
def cart_has_n_lines_singular(cart, count):
    assert len(cart.items) == count


@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_has_n_lines(cart, count):
    assert len(cart.items) == count


@then(parsers.cfparse("the cart holds {count:d} units"))
def cart_holds_units(cart, count):
    assert cart.total_items == count


@then(parsers.cfparse("the cart subtotal is {amount:g}"))
def cart_subtotal_is(cart, amount):
    assert cart.subtotal == pytest.approx(amount)


@then("the cart action fails with a validation error")
def cart_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("a {event_type} cart event is raised"))
def cart_event_raised(cart, event_type):
    event_cls = _CART_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in cart._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in cart._events]}"


@then(parsers.cfparse("no {event_type} cart event is raised"))
def cart_event_not_raised(cart, event_type):
    event_cls = _CART_EVENT_CLASSES[event_type]
    assert not any(isinstance(e, event_cls) for e in cart._events)


# ---------------------------------------------------------------------------
# Then steps: Order
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse("the order total is {amount:g}"))
def order_total_is(order, amount):
    assert order.total == pytest.approx(amount)


@then("the order action fails with a validation error")
def order_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("an {event_type} order event is raised"))
def an_order_event_raised(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert any(isinstance(e, event_cls) for e in order._events)


@then(parsers.cfparse("no {event_type} order event is raised"))
def order_event_not_raised(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert not any(isinstance(e, event_cls) for e in order._events)

"""Application tests for payment processor webhooks."""

import pytest
from protean import current_domain
from storefront.order.order import Order, OrderStatus
from storefront.order.payment import ProcessPaymentWebhook


def _order_with_intent(*path, intent="pi_001"):
    order = Order.create(order_number="ORD-2026-000007", customer_email="customer@test.com")
    order.add_item("prod-ac-01", "var-ac-9k", "Split AC Inverter", "9000 BTU", "AC-INV-9K", 1, 999.99)
    order.set_payment_info(intent, "card")
    for status in path:
        order.set_status(status)
    current_domain.repository_for(Order).add(order)
    return str(order.id)


def _webhook(event_type, intent="pi_001", **extra):
    return current_domain.process(
        ProcessPaymentWebhook(event_type=event_type, payment_intent_id=intent, **extra),
        asynchronous=False,
    )


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestPaymentSucceeded:
    def test_pending_order_becomes_paid(self):
        order_id = _order_with_intent()
        assert _webhook("payment_intent.succeeded") == order_id

        order = _order(order_id)
        assert order.status == "Paid"
        assert order.paid_at is not None
        assert order.timeline[-1].description == "Payment received"

    def test_duplicate_delivery_is_ignored(self):
        order_id = _order_with_intent(OrderStatus.PAID)
        assert _webhook("payment_intent.succeeded") is None
        assert len(_order(order_id).history) == 1


class TestPaymentFailed:
    def test_failure_is_recorded_without_status_change(self):
        order_id = _order_with_intent()
        _webhook("payment_intent.payment_failed", failure_message="Card declined")

        order = _order(order_id)
        assert order.status == "Pending"
        assert order.timeline[-1].description == "Payment failed: Card declined"

    def test_failure_without_message(self):
        order_id = _order_with_intent()
        _webhook("payment_intent.payment_failed")
        assert _order(order_id).timeline[-1].description == "Payment failed: Unknown error"


class TestChargeRefunded:
    @pytest.mark.parametrize("path", [(OrderStatus.PAID,), (OrderStatus.PAID, OrderStatus.PROCESSING)])
    def test_refundable_order_is_refunded(self, path):
        order_id = _order_with_intent(*path)
        _webhook("charge.refunded", amount_refunded=999.99)

        order = _order(order_id)
        assert order.status == "Refunded"
        assert order.timeline[-1].description == "Refund processed: 999.99 USD"

    def test_refund_of_shipped_order_is_acknowledged_but_not_applied(self):
        order_id = _order_with_intent(OrderStatus.PAID, OrderStatus.PROCESSING, OrderStatus.SHIPPED)
        assert _webhook("charge.refunded") is None
        assert _order(order_id).status == "Shipped"

    def test_refund_of_pending_order_is_ignored(self):
        order_id = _order_with_intent()
        assert _webhook("charge.refunded") is None
        assert _order(order_id).status == "Pending"


class TestUnmatchedWebhooks:
    def test_unknown_intent_is_acknowledged(self):
        _order_with_intent()
        assert _webhook("payment_intent.succeeded", intent="pi_unknown") is None

    def test_unhandled_event_type_is_ignored(self):
        order_id = _order_with_intent()
        assert _webhook("customer.created") is None
        assert _order(order_id).status == "Pending"

"""Payment references and payment processor webhooks.

Webhooks arrive already verified by the payment collaborator. Each one is
matched to an order through its payment intent and translated into a
status change or a history entry. Webhooks are always acknowledged: an
event that cannot be applied is logged and skipped rather than failed,
because processors retry anything that is not acknowledged.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"
CHARGE_REFUNDED = "charge.refunded"


@storefront.command(part_of="Order")
class RecordPaymentInfo:
    order_id = Identifier(required=True)
    payment_intent_id = String(required=True, max_length=255)
    payment_method = String(max_length=50)


@storefront.command(part_of="Order")
class ProcessPaymentWebhook:
    event_type = String(required=True, max_length=100)
    payment_intent_id = String(required=True, max_length=255)
    failure_message = Text()
    amount_refunded = Float(min_value=0.0)


@storefront.command_handler(part_of=Order)
class PaymentHandler:
    @handle(RecordPaymentInfo)
    def record_payment_info(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.set_payment_info(command.payment_intent_id, command.payment_method)
        repo.add(order)

    @handle(ProcessPaymentWebhook)
    def process_payment_webhook(self, command):
        """Apply a payment webhook. Returns the affected order id, or None if nothing changed."""
        repo = current_domain.repository_for(Order)
        order = repo.by_payment_intent(command.payment_intent_id)
        if order is None:
            logger.warning(
                "Order not found for payment intent",
                event_type=command.event_type,
                payment_intent_id=command.payment_intent_id,
            )
            return None

        if command.event_type == PAYMENT_SUCCEEDED:
            applied = self._payment_succeeded(order)
        elif command.event_type == PAYMENT_FAILED:
            applied = self._payment_failed(order, command.failure_message)
        elif command.event_type == CHARGE_REFUNDED:
            applied = self._charge_refunded(order, command.amount_refunded)
        else:
            logger.info("Ignoring unhandled payment webhook", event_type=command.event_type)
            return None

        if not applied:
            return None

        repo.add(order)
        return str(order.id)

    def _payment_succeeded(self, order):
        if OrderStatus(order.status) != OrderStatus.PENDING:
            logger.info(
                "Payment already applied",
                order_number=order.order_number,
                status=order.status,
            )
            return False

        order.set_status(OrderStatus.PAID, description="Payment received")
        logger.info("Order marked as paid", order_number=order.order_number)
        return True

    def _payment_failed(self, order, failure_message):
        if OrderStatus(order.status) != OrderStatus.PENDING:
            return False

        reason = failure_message or "Unknown error"
        order.add_event(OrderStatus.PENDING, description=f"Payment failed: {reason}")
        logger.warning("Payment failed", order_number=order.order_number, reason=reason)
        return True

    def _charge_refunded(self, order, amount_refunded):
        if not order.can_be_refunded:
            logger.info(
                "Refund ignored for order that cannot be refunded",
                order_number=order.order_number,
                status=order.status,
            )
            return False

        description = "Refund processed"
        if amount_refunded is not None:
            description = f"Refund processed: {amount_refunded:.2f} {order.currency}"

        try:
            order.set_status(OrderStatus.REFUNDED, description=description)
        except ValidationError as exc:
            logger.warning(
                "Refund could not be applied",
                order_number=order.order_number,
                status=order.status,
                error=str(exc),
            )
            return False

        logger.info("Order refunded", order_number=order.order_number, amount=amount_refunded)
        return True

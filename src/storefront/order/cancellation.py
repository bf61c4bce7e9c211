"""Order cancellation: command and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    """Cancel an order that has not yet entered fulfilment."""

    order_id = Identifier(required=True)
    reason = String(max_length=500)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if not order.can_be_cancelled:
            raise ValidationError({"status": [f"Order cannot be cancelled in {order.status} status"]})

        order.set_cancellation_reason(command.reason)
        order.set_status(OrderStatus.CANCELLED, description="Order cancelled", notes=command.reason)
        repo.add(order)

        logger.info("Order cancelled", order_number=order.order_number, reason=command.reason)
